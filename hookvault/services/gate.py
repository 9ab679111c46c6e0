"""Namespace allowlist gate."""
from typing import Iterable

import structlog

from ..errors import ForbiddenNamespace

log = structlog.get_logger()


class NamespaceGate:
    """
    Decides whether a namespace may be written, read or deleted.

    An empty allowlist accepts everything, NO-KEY included. Otherwise
    membership is an exact string match; entries are trimmed once, here.
    """

    def __init__(self, allowlist: Iterable[str] = ()):
        self._allowlist = frozenset(n.strip() for n in allowlist if n.strip())

    @classmethod
    def from_csv(cls, raw: str) -> "NamespaceGate":
        return cls(raw.split(","))

    @property
    def open(self) -> bool:
        return not self._allowlist

    def is_allowed(self, namespace: str) -> bool:
        return self.open or namespace in self._allowlist

    def check(self, namespace: str) -> None:
        if not self.is_allowed(namespace):
            log.warning("namespace.forbidden", namespace=namespace)
            raise ForbiddenNamespace(namespace)
