import os
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest
import yaml

from api_factory import ApiFactory
from modules import ApiModule, Module, ModuleManager, ModuleUtils

ORDER_V1 = "Shop\\V1\\Rest\\Order\\Controller"
ORDER_V2 = "Shop\\V2\\Rest\\Order\\Controller"
PING_V1 = "Shop\\V1\\Rpc\\Ping\\Controller"
USER_V1 = "Admin\\V1\\Rest\\User\\Controller"


class _ProgressReporter:
    """Pytest plugin that prints per-test start and end markers with timing."""

    def __init__(self):
        self._terminal = None
        self._starts: dict[str, float] = {}

    @pytest.hookimpl(tryfirst=True)
    def pytest_sessionstart(self, session: pytest.Session) -> None:
        if self._terminal is None:
            self._terminal = session.config.pluginmanager.get_plugin("terminalreporter")

    @pytest.hookimpl
    def pytest_runtest_logstart(self, nodeid: str, location) -> None:
        if self._terminal is None:
            return
        timestamp = datetime.now().strftime("%H:%M:%S")
        self._starts[nodeid] = time.monotonic()
        self._terminal.write_line(f"[{timestamp}] RUN    {nodeid}")

    @pytest.hookimpl
    def pytest_runtest_logreport(self, report: pytest.TestReport):
        if self._terminal is None or report.when != "call":
            return
        timestamp = datetime.now().strftime("%H:%M:%S")
        duration: float | None = None
        if report.nodeid in self._starts:
            duration = time.monotonic() - self._starts.pop(report.nodeid)
        duration_text = f" ({duration:.2f}s)" if duration is not None else ""
        outcome = report.outcome.upper()
        self._terminal.write_line(f"[{timestamp}] {outcome:6} {report.nodeid}{duration_text}")


def _progress_enabled(config: pytest.Config) -> bool:
    if config.getoption("progress", default=False):
        return True
    env_value = os.environ.get("PYTEST_PROGRESS", "")
    return env_value.lower() in {"1", "true", "yes", "on"}


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("apidocs")
    group.addoption(
        "--progress",
        action="store_true",
        help="Print test start/finish timestamps and durations to aid debugging long runs.",
    )


def pytest_configure(config: pytest.Config) -> None:
    if _progress_enabled(config):
        reporter = _ProgressReporter()
        config.pluginmanager.register(reporter, "apidocs-progress-reporter")


def write_yaml(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def shop_config() -> dict[str, Any]:
    """Merged config with REST and RPC services for Shop (v1, v2) and Admin (v1)."""
    return {
        "zf-rest": {
            ORDER_V1: {
                "service_name": "order",
                "route_name": "shop.rest.order",
                "collection_http_methods": ["GET", "POST"],
                "entity_http_methods": ["GET", "PATCH", "DELETE"],
            },
            ORDER_V2: {
                "service_name": "order",
                "route_name": "shop.rest.order",
                "http_methods": ["GET"],
            },
            USER_V1: {
                "service_name": "user",
                "route_name": "admin.rest.user",
                "http_methods": ["GET"],
            },
        },
        "zf-rpc": {
            PING_V1: {
                "service_name": "ping",
                "route_name": "shop.rpc.ping",
                "http_methods": ["GET"],
            },
        },
        "router": {
            "routes": {
                "shop.rest.order": {"options": {"route": "/order[/:order_id]"}},
                "shop.rpc.ping": {"options": {"route": "[/v:version]/ping"}},
                "admin.rest.user": {"options": {"route": "/user[/:user_id]"}},
            }
        },
        "zf-content-validation": {
            ORDER_V1: {"input_filter": "Shop\\V1\\Rest\\Order\\Validator"},
        },
        "input_filters": {
            "Shop\\V1\\Rest\\Order\\Validator": [
                {"name": "sku", "description": "Product SKU", "required": True},
                {"name": "quantity", "required": False},
            ],
        },
        "zf-content-negotiation": {
            "accept_whitelist": {
                ORDER_V1: ["application/vnd.shop.v1+json", "application/json"],
            },
            "content_type_whitelist": {
                ORDER_V1: ["application/json"],
            },
        },
    }


@pytest.fixture
def shop_docs() -> dict[str, Any]:
    return {
        ORDER_V1: {
            "description": "Orders placed by customers.",
            "collection": {
                "GET": {
                    "description": "List orders.",
                    "request": None,
                    "response": "A paginated collection of orders.",
                },
                "POST": {
                    "description": "Place an order.",
                    "request": "An order with sku and quantity.",
                    "response": "The created order.",
                },
            },
        },
        PING_V1: {"description": "Liveness probe."},
    }


@pytest.fixture
def module_root(tmp_path: Path) -> Path:
    """Directory holding one sub-directory per module."""
    root = tmp_path / "module"
    for name in ("Shop", "Admin"):
        (root / name / "config").mkdir(parents=True)
    return root


@pytest.fixture
def module_manager(module_root: Path) -> ModuleManager:
    return ModuleManager(
        [
            ApiModule(name="Shop", path=module_root / "Shop"),
            Module(name="Admin", path=module_root / "Admin"),
        ]
    )


@pytest.fixture
def make_factory(module_manager: ModuleManager) -> Callable[..., ApiFactory]:
    """Build an ApiFactory over the test module registry and a given config."""

    def _make(config: dict[str, Any], manager: ModuleManager | None = None) -> ApiFactory:
        manager = manager or module_manager
        return ApiFactory(manager, config, ModuleUtils(manager, "module.config.yaml"))

    return _make


@pytest.fixture
def app_file(tmp_path: Path, shop_config: dict[str, Any], shop_docs: dict[str, Any]) -> Path:
    """A complete on-disk application: modules, module configs, docs and autoload."""
    rest = shop_config["zf-rest"]
    routes = shop_config["router"]["routes"]

    write_yaml(
        tmp_path / "module" / "Shop" / "config" / "module.config.yaml",
        {
            "zf-rest": {ORDER_V1: rest[ORDER_V1], ORDER_V2: rest[ORDER_V2]},
            "zf-rpc": shop_config["zf-rpc"],
            "router": {
                "routes": {
                    "shop.rest.order": routes["shop.rest.order"],
                    "shop.rpc.ping": routes["shop.rpc.ping"],
                }
            },
            "zf-content-validation": shop_config["zf-content-validation"],
            "input_filters": shop_config["input_filters"],
        },
    )
    write_yaml(tmp_path / "module" / "Shop" / "config" / "documentation.config.yaml", shop_docs)
    write_yaml(
        tmp_path / "module" / "Admin" / "config" / "module.config.yaml",
        {
            "zf-rest": {USER_V1: rest[USER_V1]},
            "router": {"routes": {"admin.rest.user": routes["admin.rest.user"]}},
        },
    )
    write_yaml(
        tmp_path / "config" / "autoload" / "global.yaml",
        {"zf-content-negotiation": shop_config["zf-content-negotiation"]},
    )
    return write_yaml(
        tmp_path / "application.yaml",
        {
            "modules": [
                {"name": "Shop", "path": "module/Shop", "provides_api": True},
                {"name": "Admin", "path": "module/Admin"},
            ]
        },
    )
