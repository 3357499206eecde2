"""
Demo and Dataset API Routes.

- POST /run-demo - Run the update vs. upsert script and return its report
- POST /clear-data - Delete every contact (irreversible)
- POST /insert-sample - Bulk-upsert the three sample contacts
"""

import logging

from fastapi import APIRouter, Depends

from contact_store import (
    ContactGatewayInterface,
    insert_sample_contacts,
    run_update_upsert_demo,
)

from ..dependencies import get_gateway
from ..models import DemoRunResponse, ErrorResponse, ResultResponse
from .common import handle_route_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["demo"], responses={500: {"model": ErrorResponse}})


@router.post("/run-demo", response_model=DemoRunResponse)
def run_demo(gateway: ContactGatewayInterface = Depends(get_gateway)):
    """Run the three-step update/upsert script."""
    try:
        report = run_update_upsert_demo(gateway)
        return {"ok": True, "results": report.to_dict()}
    except Exception as e:
        return handle_route_error(e, "run-demo")


@router.post("/clear-data", response_model=ResultResponse)
def clear_data(gateway: ContactGatewayInterface = Depends(get_gateway)):
    """Delete all contacts."""
    try:
        result = gateway.delete_all()
        return {"ok": True, "result": result}
    except Exception as e:
        return handle_route_error(e, "clear-data")


@router.post("/insert-sample", response_model=ResultResponse)
def insert_sample(gateway: ContactGatewayInterface = Depends(get_gateway)):
    """Insert the sample contacts that do not exist yet."""
    try:
        result = insert_sample_contacts(gateway)
        return {"ok": True, "result": result}
    except Exception as e:
        return handle_route_error(e, "insert-sample")
