"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from evolve_support.core.config import settings
from evolve_support.core.rate_limit import limiter
from evolve_support.dependencies import (
    CurrentUser,
    get_auth_service,
    get_current_user,
)
from evolve_support.schemas.auth_schema import (
    LoginResponse,
    LogoutRequest,
    MessageResponse,
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    RefreshRequest,
    TokenPayload,
    TokenResponse,
    UserResponse,
)
from evolve_support.schemas.response_schema import ApiResponse, success_response
from evolve_support.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


@router.post("/otp/request", response_model=ApiResponse[OtpRequestResponse])
@limiter.limit(settings.auth.otp_request_rate_limit)
async def request_otp(
    request: Request,
    body: OtpRequest,
    auth_service: AuthServiceDep,
) -> dict:
    """Send a one-time code to a mobile number."""
    result = await auth_service.request_otp(body)
    return success_response(result, message="Verification code sent")


@router.post("/otp/verify", response_model=ApiResponse[LoginResponse])
@limiter.limit(settings.auth.otp_verify_rate_limit)
async def verify_otp(
    request: Request,
    body: OtpVerifyRequest,
    auth_service: AuthServiceDep,
) -> dict:
    """Verify a one-time code and receive tokens."""
    result = await auth_service.verify_otp(body)
    return success_response(result)


@router.get("/me", response_model=ApiResponse[UserResponse])
async def me(
    auth_service: AuthServiceDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Return the authenticated user's profile."""
    result = await auth_service.get_user(current_user.id)
    return success_response(result)


@router.post("/logout", response_model=ApiResponse[MessageResponse])
async def logout(
    request: Request,
    body: LogoutRequest,
    auth_service: AuthServiceDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Revoke the current access token."""
    access_payload = TokenPayload(
        sub=str(current_user.id),
        phone=current_user.phone,
        role=current_user.role,
        type="access",
        jti=request.state.jti,
        exp=request.state.exp,
    )
    result = await auth_service.logout(access_payload, body)
    return success_response(result)


@router.post("/refresh", response_model=ApiResponse[TokenResponse])
async def refresh(
    body: RefreshRequest,
    auth_service: AuthServiceDep,
) -> dict:
    """Refresh an access token."""
    result = await auth_service.refresh(body)
    return success_response(result)
