from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Config(BaseSettings):
    """Centralized, type-safe configuration loaded from environment variables.

    Uses pydantic-settings to support .env files and runtime validation.
    """

    # Application bootstrap
    APP_CONFIG_PATH: str = Field(
        default="./application.yaml",
        description="Application file listing modules (name, path, provides_api) and autoload globs.",
    )

    MODULE_CONFIG_FILE: str = Field(
        default="module.config.yaml",
        description="File name of each module's config, relative to '<module>/config/'.",
    )

    DOC_FILE_NAME: str = Field(
        default="documentation.config.yaml",
        description="Documentation file name, looked up next to a module's config file.",
    )

    # Documentation building
    ROUTE_VERSION_PLACEHOLDER: str = Field(
        default="[/v:version]",
        description="Internal route segment stripped from route templates before display.",
    )

    DEFAULT_API_VERSION: str = Field(default="1", min_length=1)

    # API configuration
    API_CORS_ORIGINS: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        description="Allowed CORS origins for FastAPI (comma-separated env or JSON list).",
    )

    LOG_LEVEL: str = Field(default="INFO", description="Root log level for the CLI and API.")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("APP_CONFIG_PATH")
    @classmethod
    def normalize_app_config_path(cls, v: str) -> str:
        """
        Normalize APP_CONFIG_PATH to an absolute path.

        Relative paths are resolved from the project root (where config.py lives),
        not from the current working directory, so the CLI and the API read the
        same application file regardless of where they're started from.

        Examples:
            - "./application.yaml" → "/srv/apidocs/application.yaml"
            - "~/apps/shop.yaml" → "/home/me/apps/shop.yaml"
        """
        path = Path(v).expanduser()

        if not path.is_absolute():
            project_root = Path(__file__).parent
            path = (project_root / path).resolve()
        else:
            path = path.resolve()

        return str(path)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL must be a logging level name, got {v!r}")
        return level

    @field_validator("API_CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):  # type: ignore[no-redef]
        """
        Accept list[str], JSON array string, or comma-separated string.

        Examples:
            - None or "" → []
            - ["http://localhost:3000"] → ["http://localhost:3000"]
            - '["http://localhost:3000"]' → ["http://localhost:3000"]
            - "http://localhost:3000,http://127.0.0.1:5173" → ["http://localhost:3000", "http://127.0.0.1:5173"]
        """
        if v is None or v == "":
            return []
        if isinstance(v, list):
            return [str(s).strip() for s in v if str(s).strip()]
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                import json

                try:
                    arr = json.loads(s)
                    return [str(x).strip() for x in arr if str(x).strip()]
                except json.JSONDecodeError:
                    # Fall back to comma-separated parsing
                    pass
            return [p.strip() for p in s.split(",") if p.strip()]
        return [str(v).strip()]

    # Convenience helpers
    @property
    def app_config_path(self) -> Path:
        return Path(self.APP_CONFIG_PATH)

    @property
    def log_level(self) -> int:
        return logging.getLevelName(self.LOG_LEVEL)


# Eagerly load configuration at import time for convenience across modules
config = Config()
