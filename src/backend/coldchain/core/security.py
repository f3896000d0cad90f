"""Shared-secret authentication for the /api routes."""

import secrets
from typing import Annotated

import structlog
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from coldchain.core.config import Settings, get_settings

logger = structlog.get_logger()

API_KEY_HEADER = "x-api-key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def verify_api_key(
    request: Request,
    api_key: Annotated[str | None, Depends(api_key_header)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> None:
    """Reject requests whose x-api-key does not match the configured key.

    With no key configured the API is open (development mode).
    """
    if not settings.api_key:
        return

    client = request.client.host if request.client else None

    if not api_key:
        logger.warning("Request without API key", client=client, path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Acesso não autorizado. API Key ausente.",
        )

    if not secrets.compare_digest(api_key, settings.api_key):
        logger.warning("Request with invalid API key", client=client, path=request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Acesso não autorizado. API Key inválida.",
        )
