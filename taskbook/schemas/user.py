from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class RegisterRequest(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class ProfileUpdate(BaseModel):
    name: str = ""


class Principal(BaseModel):
    """The authenticated user an operation runs as."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(alias="userId")
    email: str
    session_id: Optional[str] = Field(default=None, alias="sessionId", exclude=True)


class UserRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    name: str
    email: str


class LoginResult(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRecord


class SessionResponse(BaseModel):
    user: Optional[Principal] = None
