"""
FastAPI dependencies shared by the route modules.
"""

from contact_store import ContactGatewayInterface, get_contact_gateway

from .config import get_settings


def get_gateway() -> ContactGatewayInterface:
    """Shared contact gateway built from the validated settings."""
    return get_contact_gateway(get_settings().store_config())
