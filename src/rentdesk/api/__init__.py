"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: The gate is applied per route (Depends(get_current_account) or
require_admin) rather than per router, because the auth and products
routers mix open and protected endpoints. Health and register/login are
open.
"""

from fastapi import APIRouter

from rentdesk.api.auth import router as auth_router
from rentdesk.api.health import router as health_router
from rentdesk.api.products import router as products_router
from rentdesk.api.users import router as users_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(users_router, tags=["user"])
api_router.include_router(products_router, tags=["products"])
