"""Frozen configuration groups exposed by ``Settings``.

Each group is built once from the flat environment fields in
``evolve_support.core.config``.
"""

from evolve_support.core.settings.app_config import AppConfig
from evolve_support.core.settings.auth_config import AuthConfig
from evolve_support.core.settings.database_config import DatabaseConfig
from evolve_support.core.settings.file_upload_config import FileUploadConfig
from evolve_support.core.settings.llm_config import LLMConfig
from evolve_support.core.settings.redis_config import RedisConfig
from evolve_support.core.settings.server_config import ServerConfig

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "FileUploadConfig",
    "LLMConfig",
    "RedisConfig",
    "ServerConfig",
]
