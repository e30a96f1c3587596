from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

logger = logging.getLogger(__name__)

API_KEY_HEADER = "api_key"

api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def verify_api_key(provided_key: Optional[str], expected_key: str) -> bool:
    """Comparaison en temps constant."""
    if not provided_key or not expected_key:
        return False
    return secrets.compare_digest(str(provided_key), str(expected_key))


async def require_api_key(request: Request, api_key: Optional[str] = Depends(api_key_header)) -> str:
    """
    Dépendance FastAPI : clé absente -> 401, clé invalide -> 403.
    La clé attendue vient des Settings injectés dans l'app, pas d'une constante.
    """
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: API key is required",
        )

    settings = request.app.state.settings
    if not verify_api_key(api_key, settings.API_KEY):
        logger.warning("clé API invalide", extra={"path": request.url.path})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden: Invalid API key",
        )
    return api_key
