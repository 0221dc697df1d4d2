"""
FastAPI dependency injection providers.

Centralizes dependencies (DI) to keep endpoints decoupled from global imports.
"""

import logging
from functools import lru_cache

from fastapi import Depends, HTTPException

from api_factory import ApiFactory
from config import Config
from config import config as global_config
from documentation import DocumentationCache
from loader import Application, ApplicationConfigError, load_application

logger = logging.getLogger(__name__)


def get_settings() -> Config:
    """
    FastAPI dependency to provide Config.

    Returns:
        Config: The global configuration instance.
    """
    return global_config


@lru_cache(maxsize=8)
def _load_cached(app_config_path: str, module_config_file: str) -> Application:
    return load_application(app_config_path, module_config_file)


def get_application(cfg: Config = Depends(get_settings)) -> Application:
    """
    FastAPI dependency to provide the loaded application (modules + merged config).

    The application is loaded once per (path, module config file) and reused,
    since the module list and merged config do not change while serving.

    Raises:
        HTTPException: 500 when the application file cannot be loaded
    """
    try:
        return _load_cached(cfg.APP_CONFIG_PATH, cfg.MODULE_CONFIG_FILE)
    except ApplicationConfigError as exc:
        logger.exception("Failed to load application", extra={"path": cfg.APP_CONFIG_PATH})
        raise HTTPException(status_code=500, detail=f"Failed to load application: {exc}") from exc


def get_api_factory(
    application: Application = Depends(get_application),
    cfg: Config = Depends(get_settings),
) -> ApiFactory:
    """
    FastAPI dependency to provide an ApiFactory for a single request.

    Each request gets its own DocumentationCache so documentation files are
    read at most once per request and never shared across requests.
    """
    docs = DocumentationCache(application.module_utils, cfg.DOC_FILE_NAME)
    return ApiFactory(
        application.module_manager,
        application.config,
        application.module_utils,
        docs=docs,
        route_placeholder=cfg.ROUTE_VERSION_PLACEHOLDER,
    )


def reset_application_cache() -> None:
    """Forget loaded applications so the next request re-reads them from disk."""
    _load_cached.cache_clear()
