"""Authentication request/response schemas."""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

PHONE_DIGITS = 10


class OtpRequest(BaseModel):
    """Request a one-time code for a mobile number."""

    phone: str = Field(description="10-digit mobile number")

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        digits = re.sub(r"[\s\-()]", "", v)
        if not re.fullmatch(rf"\d{{{PHONE_DIGITS}}}", digits):
            raise ValueError(f"Phone number must be {PHONE_DIGITS} digits")
        return digits


class OtpVerifyRequest(OtpRequest):
    """Verify a one-time code and log in."""

    code: str = Field(pattern=r"^\d{4,10}$", description="One-time code")


class OtpRequestResponse(BaseModel):
    """Result of requesting a one-time code."""

    model_config = ConfigDict(frozen=True)

    expires_in: int = Field(description="Code lifetime in seconds")
    debug_code: str | None = Field(
        default=None, description="The code itself; only outside production"
    )


class RefreshRequest(BaseModel):
    """Token refresh request."""

    refresh_token: str = Field(description="Refresh token")


class LogoutRequest(BaseModel):
    """Logout request."""

    refresh_token: str | None = Field(
        default=None, description="Optional refresh token to revoke"
    )


class TokenResponse(BaseModel):
    """Token pair response."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token TTL in seconds")


class UserResponse(BaseModel):
    """Public user representation."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    phone: str
    role: Literal["user", "admin"]
    is_active: bool
    created_at: datetime


class LoginResponse(BaseModel):
    """Login response with user info and tokens."""

    model_config = ConfigDict(frozen=True)

    user: UserResponse
    tokens: TokenResponse
    is_new_user: bool


class MessageResponse(BaseModel):
    """Simple message response."""

    model_config = ConfigDict(frozen=True)

    message: str


class TokenPayload(BaseModel):
    """Decoded JWT payload."""

    model_config = ConfigDict(frozen=True)

    sub: str
    phone: str
    role: str
    type: str
    jti: str
    exp: int
