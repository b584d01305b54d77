from fastapi import Response

from ..config import settings

COOKIE_MAX_AGE = 24 * 60 * 60


def _cookie_flags() -> dict:
    # SameSite=None is only honoured by browsers together with Secure
    if settings.is_production:
        return {"secure": True, "samesite": "none"}
    return {"secure": False, "samesite": "lax"}


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        **_cookie_flags(),
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        **_cookie_flags(),
    )
