import logging
from fastapi import Depends
from fastapi.security import APIKeyHeader
from pydantic import BaseModel
from app.core.errors import Unauthorized
from app.core.security import InvalidToken, decode_access_token

logger = logging.getLogger(__name__)

# Clients send the token in a custom header rather than Authorization
# auto_error=False so a missing header produces our own 401 body
access_token_header = APIKeyHeader(name="X-Access-Token", auto_error=False)


class CurrentUser(BaseModel):
    """Identity carried by a verified access token"""
    user_id: int
    username: str


async def get_current_user(
    token: str | None = Depends(access_token_header),
) -> CurrentUser:
    """
    Get the authenticated identity from the X-Access-Token header.

    Attached to every protected router, so no protected handler runs for a
    request without a valid token. The identity comes from the token alone;
    handlers that need the stored row look it up themselves.
    """
    if not token:
        raise Unauthorized("authentication required")

    try:
        payload = decode_access_token(token)
    except InvalidToken as e:
        logger.info("Rejected access token: %s", e)
        raise Unauthorized("invalid access token")

    return CurrentUser(user_id=payload["userId"], username=payload["username"])
