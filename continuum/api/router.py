"""API router configuration."""

from fastapi import APIRouter

from continuum.api.endpoints import (
    admin,
    admin_communications,
    admin_content,
    analytics,
    auth,
    blog,
    consent,
    inquiries,
    onboarding,
    portal,
)

router = APIRouter(prefix="/api")

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(consent.router, prefix="/consent", tags=["consent"])
router.include_router(analytics.router, prefix="/analytics", tags=["analytics"])
router.include_router(onboarding.router, prefix="/onboarding", tags=["onboarding"])
router.include_router(onboarding.history_router, prefix="/medical-history", tags=["onboarding"])
router.include_router(inquiries.appointments_router, prefix="/appointments", tags=["appointments"])
router.include_router(inquiries.contact_router, prefix="/contact", tags=["contact"])
router.include_router(blog.router, prefix="/blog", tags=["blog"])
router.include_router(portal.router, prefix="/portal", tags=["portal"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(admin_content.router, prefix="/admin", tags=["admin"])
router.include_router(admin_communications.router, prefix="/admin", tags=["admin"])
