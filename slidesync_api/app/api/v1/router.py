"""
Top‑level router for version 1 of the API.

This router aggregates domain‑specific routers (auth, slideshows,
media, catalog, ...) under a unified prefix.  When new endpoints are
added or when new domains are introduced, update this file to include
their routers.
"""

from fastapi import APIRouter

from .endpoints import (
    analytics,
    auth,
    catalog,
    enhance,
    media,
    payments,
    slideshows,
)

# Create a router for version 1 and include sub‑routers for each domain.
router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(slideshows.router, prefix="/slideshows", tags=["slideshows"])
router.include_router(media.router, prefix="/media", tags=["media"])
router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
router.include_router(enhance.router, prefix="/enhance", tags=["enhance"])
router.include_router(payments.router, prefix="/payments", tags=["payments"])
router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
