"""Module registry and module path resolution.

The host application registers modules in load order. Only modules carrying
the ``ApiProvider`` capability take part in API documentation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from config import config as app_config

logger = logging.getLogger(__name__)


class UnknownModuleError(ValueError):
    """Raised when a path is requested for a module that is not registered."""


class ApiProvider:
    """Capability marker: the module provides API documentation."""


@dataclass
class Module:
    name: str
    path: Path


@dataclass
class ApiModule(Module, ApiProvider):
    pass


def describes_api(module: object) -> ApiProvider | None:
    """Return the module as an ApiProvider handle, or None if it lacks the capability."""
    if isinstance(module, ApiProvider):
        return module
    return None


class ModuleManager:
    """Ordered registry of loaded modules."""

    def __init__(self, modules: Iterable[Module] = ()):
        self._modules: dict[str, Module] = {}
        for module in modules:
            self.add_module(module)

    def add_module(self, module: Module) -> None:
        if module.name in self._modules:
            logger.warning(f"Module {module.name} registered twice; keeping the last definition")
        self._modules[module.name] = module

    def get_modules(self) -> list[str]:
        return list(self._modules)

    def get_module(self, name: str) -> Module | None:
        return self._modules.get(name)


class ModuleUtils:
    """Resolve filesystem locations of registered modules."""

    def __init__(self, module_manager: ModuleManager, config_file_name: str | None = None):
        self.module_manager = module_manager
        self.config_file_name = config_file_name or app_config.MODULE_CONFIG_FILE

    def get_module_path(self, name: str) -> Path:
        module = self.module_manager.get_module(name)
        if module is None:
            raise UnknownModuleError(f"Module {name!r} is not registered")
        return Path(module.path)

    def get_module_config_path(self, name: str) -> Path:
        """Path of the module's config file: ``<module path>/config/<config file name>``."""
        return self.get_module_path(name) / "config" / self.config_file_name


__all__ = [
    "ApiModule",
    "ApiProvider",
    "Module",
    "ModuleManager",
    "ModuleUtils",
    "UnknownModuleError",
    "describes_api",
]
