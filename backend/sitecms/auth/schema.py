from pydantic import ConfigDict, Field

from ..models import CustomModel
from ..users.schema import UserPublic, UserMe


class Identity(CustomModel):
    """Who is calling. Decoded from the access token and passed explicitly to services."""
    user_id: int
    name: str


class LoginRequest(CustomModel):
    model_config = ConfigDict(extra="ignore")

    email: str = Field(..., min_length=1, json_schema_extra={"example": "user@example.com"})
    password: str = Field(..., min_length=1, json_schema_extra={"example": "strongpassword123"})


class RegisterResponse(CustomModel):
    user: UserPublic


class LoginResponse(CustomModel):
    user: UserPublic
    token: str
    message: str


class VerifyResponse(CustomModel):
    valid: bool
    user: UserMe
