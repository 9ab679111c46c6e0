from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from typing import Any, Dict, List
from ..event_models import EventPage, EventRecord, NamespaceScan


class IngestResponse(BaseModel):
    ok: bool = True
    id: str


class EventListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    events: List[EventRecord]
    cursor: str | None = None
    list_complete: bool = Field(..., alias="listComplete")
    error: str | None = None

    @classmethod
    def from_page(cls, page: EventPage) -> "EventListResponse":
        return cls(events=page.events, cursor=page.cursor, list_complete=page.list_complete, error=page.error)

    def to_content(self) -> Dict[str, Any]:
        """JSON body; ``cursor`` and ``error`` are left out when unset."""
        content = self.model_dump(mode="json", by_alias=True, exclude={"cursor", "error"})
        if self.cursor is not None:
            content["cursor"] = self.cursor
        if self.error is not None:
            content["error"] = self.error
        return content


class NamespaceListResponse(BaseModel):
    keys: List[str]
    truncated: bool = False
    error: str | None = None

    @classmethod
    def from_scan(cls, scan: NamespaceScan) -> "NamespaceListResponse":
        return cls(keys=scan.namespaces, truncated=scan.truncated, error=scan.error)


class DeleteRequest(BaseModel):
    namespace: str | None = Field(default=None, validation_alias=AliasChoices("namespace", "key"))
    ids: List[str] = Field(..., min_length=1)


class DeleteResponse(BaseModel):
    ok: bool = True
    deleted: int
