"""Authentication business logic (mobile number + one-time code)."""

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from evolve_support.core.config import settings
from evolve_support.core.exceptions import (
    AccountLockedError,
    AuthenticationError,
    InvalidOtpError,
    InvalidTokenError,
    TokenBlacklistedError,
    UserNotFoundError,
)
from evolve_support.core.security import DUMMY_HASH, generate_otp, hash_otp, verify_otp
from evolve_support.repositories.user_repo import UserRepository
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
from evolve_support.services.token_service import MAX_OTP_ATTEMPTS, TokenService

logger = structlog.get_logger()


class AuthService:
    """Orchestrates code issuing, verification, logout, and token refresh."""

    def __init__(
        self,
        user_repo: UserRepository,
        token_service: TokenService,
        session: AsyncSession,
    ) -> None:
        self._user_repo = user_repo
        self._token_service = token_service
        self._session = session

    async def request_otp(self, request: OtpRequest) -> OtpRequestResponse:
        """Issue a one-time code for the given phone number."""
        if await self._token_service.get_attempts(request.phone) >= MAX_OTP_ATTEMPTS:
            raise AccountLockedError

        code = generate_otp(settings.auth.otp_length)
        ttl = settings.auth.otp_expire_seconds
        await self._token_service.store_otp(request.phone, await hash_otp(code), ttl)
        logger.info("Verification code issued", phone=_mask(request.phone))

        return OtpRequestResponse(
            expires_in=ttl,
            debug_code=code if settings.app.exposes_otp_codes else None,
        )

    async def verify_otp(self, request: OtpVerifyRequest) -> LoginResponse:
        """Check a one-time code and log the user in, registering on first use."""
        attempts = await self._token_service.get_attempts(request.phone)
        if attempts >= MAX_OTP_ATTEMPTS:
            raise AccountLockedError

        stored = await self._token_service.get_otp(request.phone)
        if stored is None:
            await verify_otp(request.code, DUMMY_HASH)
            await self._token_service.record_failed_attempt(request.phone)
            raise InvalidOtpError

        if not await verify_otp(request.code, stored):
            await self._token_service.record_failed_attempt(request.phone)
            raise InvalidOtpError

        await self._token_service.consume_otp(request.phone)
        await self._token_service.reset_attempts(request.phone)

        user = await self._user_repo.find_by_phone(request.phone)
        is_new_user = user is None
        if user is None:
            user = await self._user_repo.create(phone=request.phone)
            await self._session.commit()
            logger.info("User registered", user_id=user.id)

        if not user.is_active:
            raise AuthenticationError(message="Account is disabled")

        logger.info("User logged in", user_id=user.id, role=user.role)
        return LoginResponse(
            user=UserResponse.model_validate(user),
            tokens=self._issue_tokens(user.id, user.phone, user.role),
            is_new_user=is_new_user,
        )

    async def get_user(self, user_id: int) -> UserResponse:
        """Return the public profile of the authenticated user."""
        user = await self._user_repo.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError
        return UserResponse.model_validate(user)

    async def logout(
        self, access_payload: TokenPayload, request: LogoutRequest
    ) -> MessageResponse:
        """Blacklist the access token and optionally the refresh token."""
        await self._token_service.blacklist_token(
            access_payload.jti, access_payload.exp
        )

        if request.refresh_token:
            try:
                refresh_payload = self._token_service.decode_token(
                    request.refresh_token
                )
                if refresh_payload.type != "refresh":
                    raise InvalidTokenError
                await self._token_service.blacklist_token(
                    refresh_payload.jti, refresh_payload.exp
                )
            except (InvalidTokenError, TokenBlacklistedError) as exc:
                logger.info(
                    "Refresh token not revoked",
                    user_id=access_payload.sub,
                    reason=exc.code,
                )

        logger.info("User logged out", user_id=access_payload.sub)
        return MessageResponse(message="Successfully logged out")

    async def refresh(self, request: RefreshRequest) -> TokenResponse:
        """Issue new tokens using a valid refresh token."""
        payload = self._token_service.decode_token(request.refresh_token)

        if payload.type != "refresh":
            raise InvalidTokenError

        if await self._token_service.is_blacklisted(payload.jti):
            raise TokenBlacklistedError

        if not await self._token_service.acquire_refresh_lock(payload.jti):
            raise InvalidTokenError

        try:
            await self._token_service.blacklist_token(payload.jti, payload.exp)

            user = await self._user_repo.find_by_id(int(payload.sub))
            if user is None or not user.is_active:
                raise AuthenticationError(message="Account is disabled")

            return self._issue_tokens(user.id, user.phone, user.role)
        finally:
            await self._token_service.release_refresh_lock(payload.jti)

    def _issue_tokens(self, user_id: int, phone: str, role: str) -> TokenResponse:
        """Create an access/refresh token pair."""
        return TokenResponse(
            access_token=self._token_service.create_access_token(user_id, phone, role),
            refresh_token=self._token_service.create_refresh_token(
                user_id, phone, role
            ),
            expires_in=settings.auth.access_token_expire_minutes * 60,
        )


def _mask(phone: str) -> str:
    return f"******{phone[-4:]}"
