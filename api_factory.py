"""Build API documentation metadata from the module registry and merged config.

Reads the already-merged application configuration:

- ``zf-rest`` / ``zf-rpc``: service identifier → {service_name, route_name,
  collection_http_methods | http_methods, entity_http_methods}
- ``router.routes.<route_name>.options.route``: route template
- ``zf-content-validation.<identifier>.input_filter``: input filter name
- ``input_filters.<name>``: ordered list of {name, description?, required}
- ``zf-content-negotiation.accept_whitelist`` / ``content_type_whitelist``

Lookups are optional-presence checks: anything missing degrades to an empty
value. The ``zf-rest`` and ``zf-rpc`` keys themselves must exist.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from config import config as app_config
from documentation import DocumentationCache
from ids import ServiceId, parse_service_id, version_token
from models import Api, ApiListEntry, InputField, Operation, Service
from modules import ModuleManager, ModuleUtils, describes_api

logger = logging.getLogger(__name__)

REST_KEY = "zf-rest"
RPC_KEY = "zf-rpc"


def _text(value: object) -> str:
    return "" if value is None else str(value)


def _lookup(data: Any, *keys: str) -> Any:
    """Walk nested mappings, returning None as soon as a key is missing."""
    for key in keys:
        if not isinstance(data, Mapping) or key not in data:
            return None
        data = data[key]
    return data


class ApiFactory:
    def __init__(
        self,
        module_manager: ModuleManager,
        config: Mapping[str, Any],
        module_utils: ModuleUtils,
        docs: DocumentationCache | None = None,
        route_placeholder: str | None = None,
    ):
        self.module_manager = module_manager
        self.config = config
        self.module_utils = module_utils
        self.docs = docs if docs is not None else DocumentationCache(module_utils)
        self.route_placeholder = (
            route_placeholder if route_placeholder is not None else app_config.ROUTE_VERSION_PLACEHOLDER
        )

    def _service_configs(self) -> dict[str, Mapping[str, Any]]:
        """REST services followed by RPC services; RPC wins on identical identifiers."""
        merged: dict[str, Mapping[str, Any]] = {}
        merged.update(self.config[REST_KEY] or {})
        merged.update(self.config[RPC_KEY] or {})
        return merged

    def _services_under(
        self, services: Mapping[str, Mapping[str, Any]], module_name: str
    ) -> Iterator[tuple[ServiceId, Mapping[str, Any]]]:
        for identifier, service_config in services.items():
            service_id = parse_service_id(identifier, module_name)
            if service_id is not None:
                yield service_id, service_config

    def create_api_list(self) -> list[ApiListEntry]:
        """List documented modules with the distinct versions their services declare.

        Versions keep first-seen order across the REST-then-RPC scan.
        """
        entries: list[ApiListEntry] = []
        for module_name in self.module_manager.get_modules():
            if describes_api(self.module_manager.get_module(module_name)) is None:
                logger.debug(f"Module {module_name} does not provide API documentation; skipping")
                continue

            versions: list[str] = []
            for service_id, _ in self._services_under(self._service_configs(), module_name):
                if service_id.version not in versions:
                    versions.append(service_id.version)

            entries.append(ApiListEntry(name=module_name, versions=versions))
        return entries

    def create_api(self, api_name: str, api_version: int | str = 1) -> Api:
        """Build the documentation tree for one version of an API module."""
        api = Api(name=api_name, version=version_token(api_version))

        for service_id, service_config in self._services_under(self._service_configs(), api.name):
            if service_id.version != api.version:
                continue
            service_name = service_config.get("service_name")
            if service_name is None or api.get_service(service_name) is not None:
                continue
            service = self.create_service(api, service_name)
            if service is not None:
                api.add_service(service)

        logger.debug(f"Built {api.name} v{api.version} with {len(api.services)} services")
        return api

    def _find_service(self, api: Api, service_name: str) -> tuple[str, Mapping[str, Any]] | None:
        # REST takes priority over RPC when both declare the same service name
        for key in (REST_KEY, RPC_KEY):
            for service_id, service_config in self._services_under(self.config[key] or {}, api.name):
                if service_id.version == api.version and service_config.get("service_name") == service_name:
                    return str(service_id), service_config
        return None

    def create_service(self, api: Api, service_name: str) -> Service | None:
        """Build one service of an API version, or None when no service matches."""
        found = self._find_service(api, service_name)
        if found is None:
            logger.debug(f"No service {service_name!r} in {api.name} v{api.version}")
            return None
        identifier, service_data = found

        service_docs = self.get_documentation_config(api.name).get(identifier)
        if not isinstance(service_docs, Mapping):
            service_docs = {}

        service = Service(
            name=service_data["service_name"],
            description=_text(service_docs.get("description")),
            route=self._route_for(service_data.get("route_name")),
        )

        collection_methods = service_data.get("collection_http_methods")
        if collection_methods is None:
            collection_methods = service_data.get("http_methods") or []
        service.operations = self._operations(collection_methods, service_docs)

        entity_methods = service_data.get("entity_http_methods")
        if entity_methods is not None:
            # Entity operations are documented from the "collection" key as well
            service.entity_operations = self._operations(entity_methods, service_docs)

        fields = self._fields_for(identifier)
        if fields is not None:
            service.fields = fields

        accept_types = _lookup(self.config, "zf-content-negotiation", "accept_whitelist", identifier)
        if accept_types is not None:
            service.request_accept_types = list(accept_types)

        content_types = _lookup(self.config, "zf-content-negotiation", "content_type_whitelist", identifier)
        if content_types is not None:
            service.request_content_types = list(content_types)

        return service

    def _route_for(self, route_name: str | None) -> str:
        if route_name is None:
            return ""
        route = _lookup(self.config, "router", "routes", route_name, "options", "route")
        if route is None:
            logger.debug(f"Route {route_name!r} is not configured")
            return ""
        if not self.route_placeholder:
            return str(route)
        return str(route).replace(self.route_placeholder, "")

    def _operations(self, http_methods: Sequence[str], service_docs: Mapping[str, Any]) -> list[Operation]:
        collection_docs = service_docs.get("collection")
        if not isinstance(collection_docs, Mapping):
            collection_docs = {}
        operations: list[Operation] = []
        for http_method in http_methods:
            operation = Operation(http_method=http_method)
            method_docs = collection_docs.get(http_method)
            if isinstance(method_docs, Mapping):
                operation.description = _text(method_docs.get("description"))
                operation.request_description = _text(method_docs.get("request"))
                operation.response_description = _text(method_docs.get("response"))
            operations.append(operation)
        return operations

    def _fields_for(self, identifier: str) -> list[InputField] | None:
        filter_name = _lookup(self.config, "zf-content-validation", identifier, "input_filter")
        if filter_name is None:
            return None

        filter_spec = _lookup(self.config, "input_filters", filter_name)
        if filter_spec is None:
            logger.debug(f"Input filter {filter_name!r} referenced by {identifier} is not defined")
            return None

        field_specs = filter_spec.values() if isinstance(filter_spec, Mapping) else filter_spec
        return [
            InputField(
                name=field_data["name"],
                description=_text(field_data.get("description")),
                required=bool(field_data.get("required", False)),
            )
            for field_data in field_specs
        ]

    def get_documentation_config(self, api_name: str) -> dict[str, Any]:
        """Documentation mapping for an API module (service identifier → docs)."""
        return self.docs.get(api_name)


__all__ = ["ApiFactory"]
