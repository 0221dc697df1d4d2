from __future__ import annotations

from pydantic import BaseModel, Field, ValidationError, field_validator


class Operation(BaseModel):
    http_method: str = Field(..., description="HTTP method, e.g. 'GET'")
    description: str = Field(default="", description="What the operation does")
    request_description: str = Field(default="", description="Expected request body")
    response_description: str = Field(default="", description="Returned response body")

    @field_validator("http_method")
    @classmethod
    def _normalize_method(cls, v: str) -> str:
        method = v.strip().upper()
        if not method:
            raise ValueError("http_method must be non-empty")
        return method


class InputField(BaseModel):
    """One input parameter documented for a service's input filter."""

    name: str
    description: str = ""
    required: bool = False


class Service(BaseModel):
    name: str = Field(..., description="Service display name (service_name in config)")
    description: str = ""
    route: str = Field(default="", description="Route template with the internal version segment removed")
    operations: list[Operation] = Field(default_factory=list, description="Collection-level operations")
    entity_operations: list[Operation] | None = Field(
        default=None,
        description="Entity-level operations; None when the service defines no entity methods",
    )
    fields: list[InputField] = Field(default_factory=list)
    request_accept_types: list[str] = Field(default_factory=list)
    request_content_types: list[str] = Field(default_factory=list)


class Api(BaseModel):
    name: str
    version: str = "1"
    services: list[Service] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, v: object) -> str:
        return str(v)

    def add_service(self, service: Service) -> None:
        self.services.append(service)

    def get_service(self, name: str) -> Service | None:
        for service in self.services:
            if service.name == name:
                return service
        return None


class ApiListEntry(BaseModel):
    """A documented module and the distinct versions its services declare."""

    name: str
    versions: list[str] = Field(default_factory=list)


__all__ = ["Api", "ApiListEntry", "InputField", "Operation", "Service", "ValidationError"]
