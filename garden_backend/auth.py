import os
import logging
import secrets
from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

logger = logging.getLogger("garden_tracker.auth")

# Shared key for every /api endpoint, read from the environment
API_KEY = os.getenv("GARDEN_TRACKER_API_KEY", "your-secret-key-change-me")

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(request: Request, api_key: str = Security(api_key_header)):
    """
    Verify the X-API-Key header.

    Rejections are logged with the client address so fail2ban can match them.
    """
    if not api_key or not secrets.compare_digest(api_key, API_KEY):
        client = request.client.host if request.client else "unknown"
        logger.warning(f"Invalid or missing API key from {client} on {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key"
        )
    return api_key
