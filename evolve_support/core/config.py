"""Environment-driven settings for the Evolve support service."""

from functools import cached_property
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from evolve_support.core.settings import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    FileUploadConfig,
    LLMConfig,
    RedisConfig,
    ServerConfig,
)


class Settings(BaseSettings):
    """Flat environment variables, exposed to the code as frozen groups.

    Read a value through its group (``settings.auth.otp_length``), never the
    flat field, so each subsystem only sees the knobs it owns.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="evolve-support", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment; production disables OTP echo",
    )
    debug: bool = Field(default=True, description="Debug mode")

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8004, ge=1, le=65535, description="Bind port")
    cors_allow_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # Persistence
    database_url: SecretStr = Field(
        description="Async database URL (mysql+aiomysql://... or sqlite+aiosqlite://...)",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis URL for tokens, one-time codes and attempt counters",
    )
    redis_socket_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Redis socket timeout in seconds",
    )

    # Sign-in: JWT pair
    jwt_secret_key: SecretStr = Field(description="JWT signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_token_expire_minutes: int = Field(
        default=30,
        ge=1,
        le=1440,
        description="Access token lifetime in minutes",
    )
    jwt_refresh_token_expire_days: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Refresh token lifetime in days",
    )

    # Sign-in: one-time codes
    otp_length: int = Field(
        default=6,
        ge=4,
        le=10,
        description="Number of digits in a one-time code",
    )
    otp_expire_seconds: int = Field(
        default=300,
        ge=30,
        le=3600,
        description="One-time code lifetime in seconds",
    )
    otp_request_rate_limit: str = Field(
        default="3/minute",
        description="slowapi limit for POST /api/auth/otp/request",
    )
    otp_verify_rate_limit: str = Field(
        default="5/minute",
        description="slowapi limit for POST /api/auth/otp/verify",
    )

    # Attachments
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Largest accepted attachment in MB",
    )
    storage_path: Path = Field(
        default=Path("./data/chatbot-files"),
        description="Root directory of the uploaded file store",
    )
    public_base_url: str = Field(
        default="http://localhost:8004",
        description="Public base URL used to build links to stored files",
    )

    # Chat completion
    llm_provider: Literal["openai", "anthropic"] = Field(
        default="openai",
        description="Which chat model provider answers support questions",
    )
    openai_api_key: SecretStr = Field(default=SecretStr(""), description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o-mini", description="OpenAI model name")
    anthropic_api_key: SecretStr = Field(
        default=SecretStr(""), description="Anthropic API key"
    )
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514", description="Anthropic model name"
    )
    llm_max_tokens: int = Field(
        default=500,
        ge=1,
        le=8192,
        description="Maximum tokens in a chatbot reply",
    )
    llm_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for chatbot replies",
    )

    @cached_property
    def app(self) -> AppConfig:
        return AppConfig(name=self.app_name, env=self.app_env, debug=self.debug)

    @cached_property
    def server(self) -> ServerConfig:
        return ServerConfig(
            host=self.host,
            port=self.port,
            cors_allow_origins=self.cors_allow_origins,
        )

    @cached_property
    def database(self) -> DatabaseConfig:
        return DatabaseConfig(url=self.database_url)

    @cached_property
    def redis(self) -> RedisConfig:
        return RedisConfig(url=self.redis_url, socket_timeout=self.redis_socket_timeout)

    @cached_property
    def auth(self) -> AuthConfig:
        """JWT pair lifetimes plus one-time code shape and rate limits."""
        return AuthConfig(
            secret_key=self.jwt_secret_key,
            algorithm=self.jwt_algorithm,
            access_token_expire_minutes=self.jwt_access_token_expire_minutes,
            refresh_token_expire_days=self.jwt_refresh_token_expire_days,
            otp_length=self.otp_length,
            otp_expire_seconds=self.otp_expire_seconds,
            otp_request_rate_limit=self.otp_request_rate_limit,
            otp_verify_rate_limit=self.otp_verify_rate_limit,
        )

    @cached_property
    def file_upload(self) -> FileUploadConfig:
        return FileUploadConfig(
            max_file_size_mb=self.max_file_size_mb,
            storage_path=self.storage_path,
            public_base_url=self.public_base_url,
        )

    @cached_property
    def llm(self) -> LLMConfig:
        """Provider choice, credentials and completion parameters."""
        return LLMConfig(
            provider=self.llm_provider,
            openai_api_key=self.openai_api_key,
            openai_model=self.openai_model,
            anthropic_api_key=self.anthropic_api_key,
            anthropic_model=self.anthropic_model,
            max_tokens=self.llm_max_tokens,
            temperature=self.llm_temperature,
        )


settings = Settings()
