"""
Contacts API Routes.

- GET /list-contacts - Paginated list, optionally filtered by city and tag
- POST /upsert-contact - Create or update one contact by email
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Query, Request

from contact_store import ContactGatewayInterface, ContactValidationError
from contact_store.mongo_gateway import utc_now

from ..dependencies import get_gateway
from ..models import ErrorResponse, ResultResponse, UpsertContactRequest
from .common import handle_route_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contacts"], responses={500: {"model": ErrorResponse}})


def build_contact_filter(city: Optional[str], tag: Optional[str]) -> Dict[str, Any]:
    """Exact-match filter on city and/or tag; blank values are ignored."""
    filter: Dict[str, Any] = {}
    city = (city or "").strip()
    tag = (tag or "").strip()
    if city:
        filter["city"] = city
    if tag:
        filter["tags"] = tag
    return filter


def parse_contact_payload(raw: bytes) -> Dict[str, Any]:
    """
    Decode an upsert-contact body. An empty body is treated as {}.

    Raises:
        ContactValidationError: If the body is not a JSON object
    """
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise ContactValidationError("request body must be a JSON object") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ContactValidationError("request body must be a JSON object")
    return payload


def build_contact_upsert(
    payload: Dict[str, Any],
) -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any]]:
    """
    Split an upsert-contact payload into filter, always-set and insert-only fields.

    Empty name/city are not written; tags are written only when given as a
    list, any other shape is ignored. updatedAt is stamped on every write,
    createdAt only on creation.

    Raises:
        ContactValidationError: If email is missing, blank or not a string
    """
    email = payload.get("email")
    if isinstance(email, str):
        email = email.strip()
    if not email:
        raise ContactValidationError("email is required")
    if not isinstance(email, str):
        raise ContactValidationError("email must be a string")

    now = utc_now()
    fields_to_set: Dict[str, Any] = {}
    if payload.get("name"):
        fields_to_set["name"] = payload["name"]
    if payload.get("city"):
        fields_to_set["city"] = payload["city"]
    if isinstance(payload.get("tags"), list):
        fields_to_set["tags"] = list(payload["tags"])
    fields_to_set["updatedAt"] = now

    return {"email": email}, fields_to_set, {"createdAt": now}


@router.get("/list-contacts", response_model=ResultResponse)
def list_contacts(
    page: Optional[str] = Query(default=None, description="1-indexed page number"),
    page_size: Optional[str] = Query(default=None, alias="pageSize", description="Page size (1-100)"),
    city: Optional[str] = Query(default=None, description="Exact city match"),
    tag: Optional[str] = Query(default=None, description="Exact tag match"),
    gateway: ContactGatewayInterface = Depends(get_gateway),
):
    """List contacts sorted by email."""
    try:
        filter = build_contact_filter(city, tag)
        contact_page = gateway.list_page(filter, page=page, page_size=page_size)
        return {"ok": True, "result": contact_page.to_dict()}
    except Exception as e:
        return handle_route_error(e, "list-contacts")


@router.post(
    "/upsert-contact",
    response_model=ResultResponse,
    responses={400: {"model": ErrorResponse}},
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": UpsertContactRequest.model_json_schema()}},
        },
    },
)
async def upsert_contact(
    request: Request,
    gateway: ContactGatewayInterface = Depends(get_gateway),
):
    """
    Create or update a contact by email.

    The body is read leniently so that shape problems come back in the
    {ok: false, error} envelope instead of FastAPI's 422.
    """
    try:
        payload = parse_contact_payload(await request.body())
        filter, fields_to_set, insert_only = build_contact_upsert(payload)
        result = await asyncio.to_thread(
            gateway.upsert,
            filter,
            fields_to_set=fields_to_set,
            insert_only_fields=insert_only,
        )
        logger.info(f"Upserted contact {filter['email']} (created={result.created})")
        return {"ok": True, "result": result.to_dict()}
    except Exception as e:
        return handle_route_error(e, "upsert-contact")
