"""HTTP adapters for the feature flag service."""

from .feature_flags_router import get_service, router

__all__ = ["get_service", "router"]
