"""ASGI authentication middleware."""

import json
from typing import Any

import jwt
import structlog
from starlette.types import ASGIApp, Receive, Scope, Send

from evolve_support.core import redis as redis_state
from evolve_support.core.config import settings
from evolve_support.schemas.response_schema import error_response
from evolve_support.services.token_service import BLACKLIST_PREFIX

logger = structlog.get_logger()

PUBLIC_PATHS: set[str] = {
    "",
    "/",
    "/health",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/api/auth/otp/request",
    "/api/auth/otp/verify",
    "/api/auth/refresh",
}

PUBLIC_PREFIXES: tuple[str, ...] = ("/docs", "/redoc", "/files/")

# Identity is attached when a valid token is sent, otherwise the call is anonymous.
OPTIONAL_AUTH_PATHS: set[str] = {
    "/api/v1/chatbot",
}


class _AuthFailure(Exception):
    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class AuthMiddleware:
    """Pure ASGI middleware for JWT validation."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "")
        if method == "OPTIONS":
            await self.app(scope, receive, send)
            return

        path = scope["path"]
        normalized = path.rstrip("/") or "/"
        if normalized in PUBLIC_PATHS or path.startswith(PUBLIC_PREFIXES):
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        auth_header = headers.get(b"authorization", b"").decode()
        optional = normalized in OPTIONAL_AUTH_PATHS

        if not auth_header.startswith("Bearer "):
            if optional:
                await self.app(scope, receive, send)
                return
            await self._send_error(
                send, 401, "MISSING_TOKEN", "Authorization header required"
            )
            return

        try:
            payload = await self._authenticate(auth_header[7:])
        except _AuthFailure as failure:
            if optional:
                logger.info("Ignoring invalid credential", path=path, code=failure.code)
                await self.app(scope, receive, send)
                return
            await self._send_error(send, 401, failure.code, failure.message)
            return

        scope.setdefault("state", {})
        scope["state"]["user_id"] = int(payload["sub"])
        scope["state"]["phone"] = payload["phone"]
        scope["state"]["role"] = payload["role"]
        scope["state"]["jti"] = payload.get("jti", "")
        scope["state"]["exp"] = payload["exp"]

        await self.app(scope, receive, send)

    @staticmethod
    async def _authenticate(token: str) -> dict[str, Any]:
        """Decode an access token and reject revoked ones."""
        secret = settings.auth.secret_key.get_secret_value()
        algorithm = settings.auth.algorithm

        try:
            payload: dict[str, Any] = jwt.decode(token, secret, algorithms=[algorithm])
        except jwt.ExpiredSignatureError as e:
            raise _AuthFailure("TOKEN_EXPIRED", "Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise _AuthFailure("INVALID_TOKEN", "Invalid token") from e

        if payload.get("type") != "access":
            raise _AuthFailure("INVALID_TOKEN", "Invalid token type")

        jti = payload.get("jti", "")
        client = redis_state.redis_client
        if client is not None:
            is_blacklisted = await client.get(f"{BLACKLIST_PREFIX}{jti}")
            if is_blacklisted is not None:
                raise _AuthFailure("TOKEN_BLACKLISTED", "Token has been revoked")

        return payload

    @staticmethod
    async def _send_error(send: Send, status: int, code: str, message: str) -> None:
        """Send a JSON error response directly."""
        body = json.dumps(error_response(status, message, code)).encode()

        await send(
            {
                "type": "http.response.start",
                "status": status,
                "headers": [
                    [b"content-type", b"application/json"],
                    [b"content-length", str(len(body)).encode()],
                ],
            }
        )
        await send({"type": "http.response.body", "body": body})
