from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from .schemas import (
    DeleteRequest,
    DeleteResponse,
    EventListResponse,
    IngestResponse,
    NamespaceListResponse,
)
from ..event_models import EventRecord
from ..keys import effective_namespace
from ..services.listing import DEFAULT_PAGE_SIZE, clamp_page_size
from ..services.webhooks import WebhookService

router = APIRouter()


def get_service(request: Request) -> WebhookService:
    return request.app.state.service


def namespace_from_request(request: Request) -> str:
    """Namespace from the ``key`` header, ``api_key`` query or ``x-api-key`` header."""
    raw = (
        request.headers.get("key")
        or request.query_params.get("api_key")
        or request.headers.get("x-api-key")
    )
    return effective_namespace(raw)


def parse_limit(raw: str | None) -> int:
    """Missing, non-numeric or zero limits fall back to the default page size."""
    try:
        limit = int(raw) if raw else 0
    except ValueError:
        limit = 0
    return clamp_page_size(limit or DEFAULT_PAGE_SIZE)


@router.post("/webhook", response_model=IngestResponse)
@router.post("/api/webhook", response_model=IngestResponse)
async def ingest_webhook(request: Request, service: WebhookService = Depends(get_service)):
    record = await service.ingest(namespace_from_request(request), await request.body())
    return IngestResponse(id=record.id)


@router.get("/api/events")
async def list_events(
    request: Request,
    key: str | None = None,
    limit: str | None = None,
    cursor: str | None = None,
    service: WebhookService = Depends(get_service),
):
    namespace = effective_namespace(key) if key is not None else namespace_from_request(request)
    page = await service.list_events(namespace, parse_limit(limit), cursor or None)
    return JSONResponse(EventListResponse.from_page(page).to_content())


@router.get("/api/events/{event_id}", response_model=EventRecord, response_model_by_alias=True)
async def get_event(
    event_id: str,
    request: Request,
    key: str | None = None,
    service: WebhookService = Depends(get_service),
):
    namespace = effective_namespace(key) if key is not None else namespace_from_request(request)
    record = await service.get_event(namespace, event_id)
    if record is None:
        raise HTTPException(404, detail=f"Event {event_id} not found")
    return record


@router.delete("/api/events", response_model=DeleteResponse)
async def delete_events(req: DeleteRequest, service: WebhookService = Depends(get_service)):
    deleted = await service.delete_events(effective_namespace(req.namespace), req.ids)
    return DeleteResponse(deleted=deleted)


@router.get("/api/keys", response_model=NamespaceListResponse, response_model_exclude_none=True)
async def list_namespaces(service: WebhookService = Depends(get_service)):
    return NamespaceListResponse.from_scan(await service.list_namespaces())
