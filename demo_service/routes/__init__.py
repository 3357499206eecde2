"""
Demo service route modules.

Each module handles a specific area of functionality.
"""

from .contacts import router as contacts_router
from .demo import router as demo_router

__all__ = [
    "contacts_router",
    "demo_router",
]
