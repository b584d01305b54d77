import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from ..config import settings
from ..errors import Unauthenticated, TokenExpired, TokenInvalid
from . import service as auth_service
from .schema import Identity

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def extract_token(cookie_token: Optional[str], bearer_token: Optional[str]) -> Optional[str]:
    """The cookie wins when both are present; the bearer header is a fallback for non-browser clients."""
    return cookie_token or bearer_token or None


async def get_current_identity(
    request: Request,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
) -> Identity:
    token = extract_token(request.cookies.get(settings.AUTH_COOKIE_NAME), bearer_token)
    if not token:
        raise Unauthenticated()

    try:
        return auth_service.decode_access_token(token)
    except auth_service.ExpiredToken:
        raise TokenExpired()
    except auth_service.MalformedToken:
        raise TokenInvalid()
    except Exception as e:
        logger.warning(f"Token verification failed unexpectedly: {e}")
        raise Unauthenticated("Authentication Failed")

CurrentIdentity = Depends(get_current_identity)
