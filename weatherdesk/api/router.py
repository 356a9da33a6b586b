"""API router aggregator.

All endpoint routers are included here. Paths are unversioned to match the
web client: /auth/*, /me, /history, /api/*.
"""

from fastapi import APIRouter

from weatherdesk.api.routes import account, auth, weather

router = APIRouter()

# =============================================================================
# Authentication
# =============================================================================

router.include_router(auth.router, prefix="/auth", tags=["auth"])

# =============================================================================
# Signed-in user
# =============================================================================

router.include_router(account.me_router, prefix="/me", tags=["me"])
router.include_router(account.history_router, prefix="/history", tags=["history"])

# =============================================================================
# Weather proxy
# =============================================================================

router.include_router(weather.router, prefix="/api", tags=["weather"])
