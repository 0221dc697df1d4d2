"""Per-API documentation files.

Each API module may ship a YAML documentation file next to its module config::

    Shop\\V1\\Rest\\Order\\Controller:
      description: Orders placed by customers.
      collection:
        GET:
          description: List orders.
          request: null
          response: A paginated collection of orders.

A missing file is not an error: it reads as empty documentation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from config import config as app_config
from modules import ModuleUtils, UnknownModuleError

logger = logging.getLogger(__name__)


def load_documentation(path: Path) -> dict[str, Any]:
    """Load a documentation file, returning {} when it does not exist or is empty.

    Raises:
        ValueError: if the file holds something other than a mapping
    """
    if not path.is_file():
        logger.debug(f"No documentation file at {path}")
        return {}

    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Documentation file {path} must contain a mapping, got {type(data).__name__}")

    logger.info(f"Loaded documentation for {len(data)} services from {path}")
    return data


class DocumentationCache:
    """Memoizing documentation lookup keyed by API name.

    Owned by the caller; entries live as long as the cache instance. Not
    guarded for concurrent use, so share one only within a single request.
    """

    def __init__(self, module_utils: ModuleUtils, file_name: str | None = None):
        self.module_utils = module_utils
        self.file_name = file_name or app_config.DOC_FILE_NAME
        self._docs: dict[str, dict[str, Any]] = {}

    def path_for(self, api_name: str) -> Path:
        return self.module_utils.get_module_config_path(api_name).parent / self.file_name

    def get(self, api_name: str) -> dict[str, Any]:
        if api_name not in self._docs:
            try:
                path = self.path_for(api_name)
            except UnknownModuleError:
                logger.warning(f"API {api_name} is not a registered module; documenting it without descriptions")
                self._docs[api_name] = {}
            else:
                self._docs[api_name] = load_documentation(path)
        return self._docs[api_name]

    def clear(self) -> None:
        self._docs.clear()

    def __contains__(self, api_name: object) -> bool:
        return api_name in self._docs


__all__ = ["DocumentationCache", "load_documentation"]
