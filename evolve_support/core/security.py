"""One-time code generation and hashing utilities using bcrypt."""

import asyncio
import secrets
from concurrent.futures import ThreadPoolExecutor

import bcrypt

_executor = ThreadPoolExecutor(max_workers=4)

# Codes live for minutes, so a lower cost factor than for passwords is enough.
OTP_HASH_ROUNDS = 10

DUMMY_HASH = bcrypt.hashpw(b"000000", bcrypt.gensalt(rounds=OTP_HASH_ROUNDS)).decode()


def generate_otp(length: int = 6) -> str:
    """Generate a zero-padded numeric one-time code."""
    return str(secrets.randbelow(10**length)).zfill(length)


async def hash_otp(code: str) -> str:
    """Hash a one-time code using bcrypt."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        _executor,
        lambda: bcrypt.hashpw(
            code.encode(), bcrypt.gensalt(rounds=OTP_HASH_ROUNDS)
        ).decode(),
    )


async def verify_otp(plain: str, hashed: str) -> bool:
    """Verify a one-time code against a bcrypt hash."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        _executor,
        lambda: bcrypt.checkpw(plain.encode(), hashed.encode()),
    )
