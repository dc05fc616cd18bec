from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from ..config import ACCESS_TOKEN_EXPIRE_MINUTES
from ..dependencies import get_current_principal, get_identity_gateway, get_token
from ..gateways.identity import IdentityGateway
from ..schemas.user import (
    LoginRequest,
    LoginResult,
    Principal,
    ProfileUpdate,
    RegisterRequest,
    SessionResponse,
    UserRecord,
)

router = APIRouter()


@router.post("/register", response_model=UserRecord, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    """Create a new account and its profile."""
    return identity.register(payload.name, payload.email, payload.password)


@router.post("/login", response_model=LoginResult)
def login(
    payload: LoginRequest,
    response: Response,
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    """Sign in and get a bearer token."""
    result = identity.login(payload.email, payload.password)
    response.set_cookie(
        key="token",
        value=result.access_token,
        httponly=True,
        secure=False,  # Set to True in production with HTTPS
        samesite="lax",
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return result


@router.post("/logout")
def logout(
    response: Response,
    token: Optional[str] = Depends(get_token),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    """Sign out and clear session cookie."""
    identity.logout(token)
    response.delete_cookie(key="token")
    return {"success": True}


@router.get("/session", response_model=SessionResponse)
def get_session(principal: Optional[Principal] = Depends(get_current_principal)):
    """Get the currently authenticated user, if any."""
    return SessionResponse(user=principal)


@router.put("/profile", response_model=UserRecord)
def save_profile(
    payload: ProfileUpdate,
    principal: Optional[Principal] = Depends(get_current_principal),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    """Save the profile of the current user (recovers a partial registration)."""
    return identity.save_profile(principal, payload.name)
