"""
Run the demo service with uvicorn.

Usage:
    python -m demo_service
"""

import logging

import uvicorn

from .app import app, settings

logger = logging.getLogger(__name__)

ENDPOINTS = [
    "POST /run-demo",
    "POST /clear-data",
    "POST /insert-sample",
    "GET  /list-contacts",
    "POST /upsert-contact",
]


def main() -> None:
    logger.info(f"🚀 Server running on http://localhost:{settings.port}")
    for endpoint in ENDPOINTS:
        logger.info(f"➡️  {endpoint}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
