# backend/docqa/db/deps.py
from __future__ import annotations
import logging

from fastapi import HTTPException, Request, status

from docqa.container import AppContainer
from docqa.core.ports.store import IQARepository

logger = logging.getLogger("docqa.deps")


def get_container(request: Request) -> AppContainer:
    """FastAPI dependency returning the container built at startup."""
    container = getattr(request.app.state, "container", None)
    if container is None:
        logger.warning("Container not initialized; rejecting request.")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not ready")
    return container


def get_repository(request: Request) -> IQARepository:
    return get_container(request).repository
