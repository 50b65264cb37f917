from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, Request, Response

from src.healthlog.api.headers import (
    entity_creation_alert,
    entity_deletion_alert,
    entity_update_alert,
    pagination_headers,
)
from src.healthlog.api.schemas.common import ok
from src.healthlog.api.schemas.weights import WeightPayload
from src.healthlog.auth import Caller, get_caller
from src.healthlog.config import get_settings
from src.healthlog.db.repositories.weights_repository import DEFAULT_SORT
from src.healthlog.services.weight_service import weight_service

ENTITY = "weight"

router = APIRouter(tags=["weights"])


def _page_size(size: int | None) -> int:
    settings = get_settings()
    return min(size or settings.default_page_size, settings.max_page_size)


def _created(response: Response, request: Request, record: dict) -> None:
    response.status_code = 201
    response.headers["Location"] = f"{request.url.path.rstrip('/')}/{record['id']}"
    response.headers.update(entity_creation_alert(ENTITY, str(record["id"])))


@router.post("/weights", status_code=201)
def create_weight(request: Request, response: Response, body: WeightPayload, caller: Caller = Depends(get_caller)):
    _ = request.state.request_id
    record = weight_service.create(body, caller=caller)
    _created(response, request, record)
    return ok(record)


@router.put("/weights")
def update_weight(request: Request, response: Response, body: WeightPayload, caller: Caller = Depends(get_caller)):
    _ = request.state.request_id
    record, created = weight_service.update(body, caller=caller)
    if created:
        _created(response, request, record)
    else:
        response.headers.update(entity_update_alert(ENTITY, str(record["id"])))
    return ok(record)


@router.get("/weights")
def get_weights(
    request: Request,
    response: Response,
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    sort: str = DEFAULT_SORT,
    caller: Caller = Depends(get_caller),
):
    _ = request.state.request_id
    payload = weight_service.list_page(caller=caller, page=page, size=_page_size(size), sort=sort)
    response.headers.update(pagination_headers(request.url.path, payload["page"]))
    return ok(payload)


@router.get("/weights/{weight_id}")
def get_weight(request: Request, weight_id: int, caller: Caller = Depends(get_caller)):
    _ = request.state.request_id
    return ok(weight_service.get(weight_id))


@router.delete("/weights/{weight_id}")
def delete_weight(request: Request, response: Response, weight_id: int, caller: Caller = Depends(get_caller)):
    _ = request.state.request_id
    weight_service.delete(weight_id)
    response.headers.update(entity_deletion_alert(ENTITY, str(weight_id)))
    return ok(None)


@router.get("/_search/weights")
def search_weights(
    request: Request,
    response: Response,
    query: str = Query(min_length=1),
    page: int = Query(default=0, ge=0),
    size: int | None = Query(default=None, ge=1),
    caller: Caller = Depends(get_caller),
):
    _ = request.state.request_id
    payload = weight_service.search(query, page=page, size=_page_size(size))
    response.headers.update(pagination_headers(request.url.path, payload["page"], query=query))
    return ok(payload)


@router.get("/weights-by-days/{days}")
def get_weights_by_days(request: Request, days: int = Path(ge=0, le=36500), caller: Caller = Depends(get_caller)):
    _ = request.state.request_id
    return ok(weight_service.readings_in_last_days(days, caller=caller))
