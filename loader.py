"""Load an application: its modules and their merged configuration.

The application file lists modules in load order::

    modules:
      - name: Shop
        path: module/Shop
        provides_api: true
      - name: Admin
        path: module/Admin
    config_glob: config/autoload/*.yaml

Each module's ``config/<MODULE_CONFIG_FILE>`` is merged in module order, then
the autoload files in sorted order on top.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from api_factory import REST_KEY, RPC_KEY
from config import config as app_config
from modules import ApiModule, Module, ModuleManager, ModuleUtils

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_GLOB = "config/autoload/*.yaml"


class ApplicationConfigError(ValueError):
    """Raised when the application file or a module config cannot be used."""


@dataclass
class Application:
    module_manager: ModuleManager
    config: dict[str, Any]
    module_utils: ModuleUtils


def merge_config(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two config trees into a new dict.

    Mappings merge key by key, lists gain the override's items they do not
    already hold, and any other value is replaced by the override.
    """
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + [item for item in value if item not in current]
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ApplicationConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ApplicationConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def _build_module(entry: Any, base_dir: Path, app_path: Path) -> Module:
    if isinstance(entry, str):
        entry = {"name": entry}
    if not isinstance(entry, Mapping) or not entry.get("name"):
        raise ApplicationConfigError(f"Module entries in {app_path} need a 'name': {entry!r}")

    name = str(entry["name"])
    path = Path(entry.get("path") or Path("module") / name.replace("\\", "/")).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()

    module_cls = ApiModule if entry.get("provides_api") else Module
    return module_cls(name=name, path=path)


def load_application(path: Path | str | None = None, module_config_file: str | None = None) -> Application:
    """Load modules and merged configuration from an application file.

    Args:
        path: Application file (defaults to config.APP_CONFIG_PATH)
        module_config_file: Per-module config file name (defaults to config.MODULE_CONFIG_FILE)

    Returns:
        Application bundle with the module registry, merged config and path resolver

    Raises:
        ApplicationConfigError: if the application file is missing or malformed
    """
    app_path = Path(path) if path is not None else app_config.app_config_path
    if not app_path.is_file():
        raise ApplicationConfigError(f"Application file not found: {app_path}")

    app_data = _read_yaml(app_path)
    base_dir = app_path.parent

    module_entries = app_data.get("modules") or []
    if not isinstance(module_entries, list):
        raise ApplicationConfigError(f"'modules' in {app_path} must be a list")

    manager = ModuleManager(_build_module(entry, base_dir, app_path) for entry in module_entries)
    module_utils = ModuleUtils(manager, module_config_file)

    merged: dict[str, Any] = {}
    for name in manager.get_modules():
        module_config_path = module_utils.get_module_config_path(name)
        if not module_config_path.is_file():
            logger.debug(f"Module {name} has no config at {module_config_path}")
            continue
        merged = merge_config(merged, _read_yaml(module_config_path))

    globs = app_data.get("config_glob", DEFAULT_CONFIG_GLOB) or []
    if isinstance(globs, str):
        globs = [globs]
    for pattern in globs:
        for autoload_path in sorted(base_dir.glob(pattern)):
            logger.debug(f"Merging autoload config {autoload_path}")
            merged = merge_config(merged, _read_yaml(autoload_path))

    for key in (REST_KEY, RPC_KEY):
        if merged.get(key) is None:
            merged[key] = {}

    logger.info(
        f"Loaded {len(manager.get_modules())} modules from {app_path} "
        f"({len(merged[REST_KEY])} REST, {len(merged[RPC_KEY])} RPC services)"
    )
    return Application(module_manager=manager, config=merged, module_utils=module_utils)


__all__ = ["Application", "ApplicationConfigError", "load_application", "merge_config"]
