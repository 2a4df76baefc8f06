"""
Route aggregator — mounts the template routers under the /api/v1 prefix.

The health router is exported separately for main.py to mount at root.
"""
from fastapi import APIRouter

from template_registry.routes.templates import router as templates_router
from template_registry.routes.health import router as health_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(templates_router)

__all__ = ["v1_router", "health_router"]
