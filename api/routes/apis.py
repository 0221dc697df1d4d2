"""
Documentation endpoints.

Read-only APIs listing documented modules and returning the documentation
tree of an API version or of a single service.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api_factory import ApiFactory
from ids import version_token
from models import Api, ApiListEntry, Service

from ..deps import get_api_factory

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=list[ApiListEntry], summary="List documented APIs")
def list_apis(factory: ApiFactory = Depends(get_api_factory)) -> list[ApiListEntry]:
    """Return every documented module with the versions its services declare."""
    return factory.create_api_list()


@router.get("/{name}/v{version}", response_model=Api, summary="API version documentation")
def get_api(name: str, version: str, factory: ApiFactory = Depends(get_api_factory)) -> Api:
    """
    Return the services of one API version.

    An unknown API or version yields an Api with no services rather than 404,
    matching how the documentation builder treats missing services.
    """
    return factory.create_api(name, version_token(version))


@router.get("/{name}/v{version}/services/{service_name}", response_model=Service, summary="Service documentation")
def get_service(
    name: str,
    version: str,
    service_name: str,
    factory: ApiFactory = Depends(get_api_factory),
) -> Service:
    """
    Return the documentation of a single service.

    Raises:
        HTTPException: 404 when no REST or RPC service carries that name
    """
    api = Api(name=name, version=version_token(version))
    service = factory.create_service(api, service_name)
    if service is None:
        logger.info("Service not found", extra={"api": name, "version": version, "service": service_name})
        raise HTTPException(
            status_code=404,
            detail=f"Service '{service_name}' not found in {name} v{api.version}",
        )
    return service
