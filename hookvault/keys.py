"""
Storage key codec.

A stored event lives under ``<namespace>:<id>``. Event ids start with a
sortable UTC timestamp, so lexicographic key order within a namespace is
(approximately) chronological.
"""
import re
import secrets
import string
from datetime import datetime, timezone

from .errors import InvalidNamespace

NO_KEY = "NO-KEY"
DELIMITER = ":"

ID_SUFFIX_LENGTH = 8
ID_ALPHABET = string.digits + string.ascii_lowercase

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]")


def effective_namespace(raw: str | None) -> str:
    """Trimmed namespace, or NO-KEY when nothing usable was supplied."""
    trimmed = (raw or "").strip()
    return trimmed if trimmed else NO_KEY


def encode_key(namespace: str, event_id: str) -> str:
    if DELIMITER in namespace:
        raise InvalidNamespace(f"Namespace must not contain '{DELIMITER}'")
    return f"{namespace}{DELIMITER}{event_id}"


def decode_key(key: str) -> tuple[str, str]:
    namespace, _, event_id = key.partition(DELIMITER)
    return namespace, event_id


def namespace_of(key: str) -> str:
    return key.partition(DELIMITER)[0]


def generate_event_id(now: datetime | None = None) -> str:
    """
    Build a new event id: ``<timestamp>_<suffix>``.

    The timestamp is ISO-8601 UTC with millisecond precision and every
    non-alphanumeric character replaced by ``-``; the suffix is 8 random
    base36 characters.
    """
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    stamp = stamp.replace("+00:00", "Z")
    suffix = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
    return f"{_NON_ALNUM.sub('-', stamp)}_{suffix}"
