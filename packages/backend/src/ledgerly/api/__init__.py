"""API route aggregation.

All routers registered here get mounted in main.py.

Auth is applied at the include_router level using FastAPI's
dependencies parameter, so every resource route sits behind the
identity gate without relying on each handler to remember it. Health
and auth routers are open (no auth required); /api/auth/me checks the
token itself.
"""

from fastapi import APIRouter, Depends

from ledgerly.api.auth import router as auth_router
from ledgerly.api.categories import router as categories_router
from ledgerly.api.health import router as health_router
from ledgerly.api.resources import bills_router, goals_router, transactions_router
from ledgerly.auth.dependencies import get_current_user

# All resource routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])  # /api/auth, same prefix as everything else

# Protected routes — require a valid access token
api_router.include_router(categories_router, tags=["categories"], dependencies=_auth)
api_router.include_router(transactions_router, tags=["transactions"], dependencies=_auth)
api_router.include_router(goals_router, tags=["goals"], dependencies=_auth)
api_router.include_router(bills_router, tags=["bills"], dependencies=_auth)
