"""JWT tokens, one-time codes, and Redis-backed blacklist management."""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
import redis.asyncio as redis

from evolve_support.core.config import settings
from evolve_support.core.exceptions import (
    InvalidTokenError,
    TokenExpiredError,
)
from evolve_support.schemas.auth_schema import TokenPayload

BLACKLIST_PREFIX = "token_blacklist:"
OTP_PREFIX = "otp:"
OTP_ATTEMPTS_PREFIX = "otp_attempts:"
REFRESH_LOCK_PREFIX = "refresh_lock:"

MAX_OTP_ATTEMPTS = 5
OTP_LOCKOUT_SECONDS = 300


class TokenService:
    """Manage JWT tokens, one-time codes, and the Redis blacklist."""

    def __init__(self, redis_client: redis.Redis) -> None:  # type: ignore[type-arg]
        self._redis = redis_client
        self._secret = settings.auth.secret_key.get_secret_value()
        self._algorithm = settings.auth.algorithm

    def create_access_token(self, user_id: int, phone: str, role: str) -> str:
        """Create a signed JWT access token."""
        expire = timedelta(minutes=settings.auth.access_token_expire_minutes)
        return self._encode(user_id, phone, role, "access", expire)

    def create_refresh_token(self, user_id: int, phone: str, role: str) -> str:
        """Create a signed JWT refresh token."""
        expire = timedelta(days=settings.auth.refresh_token_expire_days)
        return self._encode(user_id, phone, role, "refresh", expire)

    def _encode(
        self,
        user_id: int,
        phone: str,
        role: str,
        token_type: str,
        lifetime: timedelta,
    ) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "phone": phone,
            "role": role,
            "type": token_type,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError from e

        return TokenPayload(
            sub=payload["sub"],
            phone=payload["phone"],
            role=payload["role"],
            type=payload["type"],
            jti=payload["jti"],
            exp=payload["exp"],
        )

    # --- Blacklist ---

    async def blacklist_token(self, jti: str, exp: int) -> None:
        """Add a token to the blacklist until it expires."""
        ttl = exp - int(datetime.now(UTC).timestamp())
        if ttl > 0:
            await self._redis.setex(f"{BLACKLIST_PREFIX}{jti}", ttl, "1")

    async def is_blacklisted(self, jti: str) -> bool:
        """Check if a token is blacklisted."""
        result = await self._redis.get(f"{BLACKLIST_PREFIX}{jti}")
        return result is not None

    # --- One-time codes ---

    async def store_otp(self, phone: str, code_hash: str, ttl: int) -> None:
        """Store the hash of a freshly issued code, replacing any earlier one."""
        await self._redis.setex(f"{OTP_PREFIX}{phone}", ttl, code_hash)

    async def get_otp(self, phone: str) -> str | None:
        """Get the stored code hash, if a code is outstanding."""
        return await self._redis.get(f"{OTP_PREFIX}{phone}")

    async def consume_otp(self, phone: str) -> None:
        """Invalidate the outstanding code after successful use."""
        await self._redis.delete(f"{OTP_PREFIX}{phone}")

    # --- Verification attempts ---

    async def record_failed_attempt(self, phone: str) -> int:
        """Record a failed verification attempt, return total count."""
        key = f"{OTP_ATTEMPTS_PREFIX}{phone}"
        count = await self._redis.incr(key)
        if count == 1:
            await self._redis.expire(key, OTP_LOCKOUT_SECONDS)
        return int(count)

    async def reset_attempts(self, phone: str) -> None:
        """Clear failed attempts after successful verification."""
        await self._redis.delete(f"{OTP_ATTEMPTS_PREFIX}{phone}")

    async def get_attempts(self, phone: str) -> int:
        """Get current failed attempt count."""
        result = await self._redis.get(f"{OTP_ATTEMPTS_PREFIX}{phone}")
        return int(result) if result else 0

    # --- Refresh lock (prevent concurrent refresh) ---

    async def acquire_refresh_lock(self, jti: str) -> bool:
        """Acquire a lock for refresh token to prevent concurrent use."""
        key = f"{REFRESH_LOCK_PREFIX}{jti}"
        return bool(await self._redis.set(key, "1", ex=10, nx=True))

    async def release_refresh_lock(self, jti: str) -> None:
        """Release the refresh lock."""
        await self._redis.delete(f"{REFRESH_LOCK_PREFIX}{jti}")
