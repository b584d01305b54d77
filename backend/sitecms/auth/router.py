import logging

from fastapi import APIRouter, Request, Response, status

from ..database import SessionDep
from ..errors import Unauthenticated
from ..models import Message
from ..users import service as user_service
from .cookies import set_auth_cookie, clear_auth_cookie
from .dependencies import CurrentIdentity
from .schema import Identity, LoginRequest, LoginResponse, RegisterResponse, VerifyResponse
from .service import authenticate_user, create_access_token, parse_registration

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


async def _json_object(request: Request) -> dict:
    """The body as a JSON object; anything unparseable reads as an empty one."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(request: Request, response: Response, db: SessionDep):
    # the body is read raw so a full site answers 403 whatever was sent
    slot = await user_service.ensure_registration_open(db)
    user_data = parse_registration(await _json_object(request))
    user = await user_service.create_user(user_data, db, slot=slot)

    set_auth_cookie(response, create_access_token(user.id, user.name))
    return {"user": user}


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, response: Response, db: SessionDep):
    user = await authenticate_user(db, body.email, body.password)
    if not user:
        logger.info("Rejected login with invalid credentials")
        raise Unauthenticated("Invalid Credentials")

    token = create_access_token(user.id, user.name)
    set_auth_cookie(response, token)
    logger.info(f"Login successful for user id={user.id}")
    return {"user": user, "token": token, "message": "Login Successful"}


@router.post("/logout", response_model=Message)
async def logout(response: Response):
    clear_auth_cookie(response)
    return {"message": "Logged out successfully"}


@router.get("/verify", response_model=VerifyResponse)
async def verify(db: SessionDep, identity: Identity = CurrentIdentity):
    user = await user_service.get_user_by_id(identity.user_id, db)
    if not user:
        raise Unauthenticated("User not found")
    return {"valid": True, "user": user}
