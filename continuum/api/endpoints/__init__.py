"""API endpoint modules."""

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

__all__ = [
    "admin",
    "admin_communications",
    "admin_content",
    "analytics",
    "auth",
    "blog",
    "consent",
    "inquiries",
    "onboarding",
    "portal",
]
