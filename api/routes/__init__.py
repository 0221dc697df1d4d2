"""
API route composition.

Provides a shared APIRouter instance for organizing route modules.
"""

from fastapi import APIRouter

from .apis import router as apis_router

# Shared router for all API routes
api_router = APIRouter()

# Documentation endpoints
api_router.include_router(apis_router, prefix="/apis", tags=["documentation"])
