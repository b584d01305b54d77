from pydantic import EmailStr, Field

from ..models import CustomModel

class UserCreate(CustomModel):
    name: str = Field(..., min_length=1, max_length=50, json_schema_extra={"example": "Jane Doe"})
    email: EmailStr = Field(..., json_schema_extra={"example": "user@example.com"})
    password: str = Field(..., min_length=8, json_schema_extra={"example": "strongpassword123"})

class UserPublic(CustomModel):
    id: int = Field(..., json_schema_extra={"example": 1})
    name: str

class UserMe(UserPublic):
    email: EmailStr
