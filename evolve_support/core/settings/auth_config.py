"""JWT and one-time code authentication configuration."""

from pydantic import BaseModel, SecretStr


class AuthConfig(BaseModel, frozen=True):
    """JWT and OTP authentication settings."""

    secret_key: SecretStr
    algorithm: str
    access_token_expire_minutes: int
    refresh_token_expire_days: int
    otp_length: int
    otp_expire_seconds: int
    otp_request_rate_limit: str
    otp_verify_rate_limit: str
