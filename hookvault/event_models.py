from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Union

Scalar = Union[str, int, float, bool, None]


class EventRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Time-prefixed event id")
    namespace: str = Field(..., description="Project namespace, NO-KEY when absent")
    received_at: str = Field(..., alias="receivedAt", description="ISO-8601 UTC receive time")
    body: Dict[str, Scalar] = Field(default_factory=dict)


class ListPage(BaseModel):
    """One page of a key listing; cursor is set iff the listing is incomplete.

    ``examined`` counts the entries the backend walked to build the page,
    including expired ones it skipped, so it can exceed ``len(keys)``.
    """
    keys: List[str] = Field(default_factory=list)
    cursor: str | None = None
    list_complete: bool = True
    examined: int | None = None


class EventPage(BaseModel):
    events: List[EventRecord] = Field(default_factory=list)
    cursor: str | None = None
    list_complete: bool = True
    error: str | None = None


class NamespaceScan(BaseModel):
    namespaces: List[str] = Field(default_factory=list)
    scanned: int = 0
    truncated: bool = False
    error: str | None = None
