"""
Feature Service - the public API for checking and managing feature flags.

Scopes are plain strings with no built-in meaning:

    'global'       -> everyone (the fallback)
    'beta'         -> a named opt-in group
    'plan:pro'     -> a subscription tier
    'tenant:abc'   -> a tenant in a multi-tenant app

Precedence for is_enabled():
1. Computed definition from the registry (never cached)
2. This instance's cache
3. Stored record with fallback to 'global', then False

Usage:
    service = create_feature_service()
    if service.is_enabled("dark_mode"):
        ...
    if service.bind_scope("beta").is_enabled("new_checkout"):
        ...
    service.bind_scope("plan:pro").enable("api_limit", value=1000)
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from featureflags.config import AppConfig, load_config
from featureflags.feature_mgmt.registry import DefinitionRegistry, Predicate, default_registry
from featureflags.feature_mgmt.resolver import FeatureResolver
from featureflags.storage.base import GLOBAL_SCOPE, FeatureRecord, RecordStore
from featureflags.storage.codec import JSONValue
from featureflags.storage.database import create_sql_store

logger = logging.getLogger(__name__)


class FeatureService:
    """
    Scoped feature flag evaluator.

    Features:
    - Scope fallback to 'global'
    - Computed definitions that override stored records
    - Per-instance cache of resolved booleans, invalidated on writes
      made through the same instance
    - Thread-safe cache access
    """

    def __init__(
        self,
        resolver: FeatureResolver,
        registry: Optional[DefinitionRegistry] = None,
        scope: str = GLOBAL_SCOPE,
    ):
        self._resolver = resolver
        self._registry = registry if registry is not None else default_registry
        self._scope = scope
        self._cache: Dict[Tuple[str, str], bool] = {}
        # Bumped on every write to a name; a lookup that raced a write is not cached
        self._generations: Dict[str, int] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Scope binding
    # ------------------------------------------------------------------

    def bind_scope(self, scope: str) -> "FeatureService":
        """
        Return a new service bound to scope, starting with an empty cache.

        The current instance is not modified.
        """
        return FeatureService(self._resolver, self._registry, scope)

    @property
    def scope(self) -> str:
        return self._scope

    @property
    def resolver(self) -> FeatureResolver:
        return self._resolver

    @property
    def registry(self) -> DefinitionRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Checking features
    # ------------------------------------------------------------------

    def is_enabled(self, name: str) -> bool:
        """Check whether a feature is enabled for the bound scope."""
        predicate = self._registry.lookup(name)
        if predicate is not None:
            return bool(predicate(self._scope))

        key = (name, self._scope)
        with self._lock:
            if key in self._cache:
                return self._cache[key]
            generation = self._generations.get(name, 0)

        enabled = self._resolver.is_enabled(name, self._scope)

        with self._lock:
            if self._generations.get(name, 0) == generation:
                self._cache[key] = enabled
        logger.debug(f"Resolved feature {name!r} for scope {self._scope!r}: {enabled}")
        return enabled

    def is_disabled(self, name: str) -> bool:
        return not self.is_enabled(name)

    def is_enabled_any(self, names: Iterable[str]) -> bool:
        """True if at least one of the features is enabled. False for no names."""
        return any(self.is_enabled(name) for name in names)

    def is_enabled_all(self, names: Iterable[str]) -> bool:
        """True only when every feature is enabled. True for no names."""
        return all(self.is_enabled(name) for name in names)

    def get_value(self, name: str, default: Any = None) -> Any:
        """
        Get the stored value for a feature.

        Falls back to the 'global' scope, then to default. Computed
        definitions do not apply to values.
        """
        return self._resolver.get_value(name, self._scope, default)

    def when(
        self,
        name: str,
        on_enabled: Callable[[str], Any],
        on_disabled: Optional[Callable[[str], Any]] = None,
    ) -> Any:
        """
        Call on_enabled(scope) when the feature is enabled, else on_disabled(scope).

        Returns the callback's result, or None when disabled without a fallback.
        """
        if self.is_enabled(name):
            return on_enabled(self._scope)
        if on_disabled is not None:
            return on_disabled(self._scope)
        return None

    # ------------------------------------------------------------------
    # Managing features
    # ------------------------------------------------------------------

    def enable(self, name: str, value: JSONValue = None) -> FeatureRecord:
        """Enable a feature for the bound scope, optionally storing a value."""
        try:
            return self._resolver.enable(name, self._scope, value)
        finally:
            self._invalidate(name)

    def disable(self, name: str) -> FeatureRecord:
        """Disable a feature for the bound scope."""
        try:
            return self._resolver.disable(name, self._scope)
        finally:
            self._invalidate(name)

    def remove(self, name: str) -> bool:
        """
        Remove the feature record for the bound scope entirely.

        After removal the 'global' record acts as the fallback again.
        """
        try:
            return self._resolver.remove(name, self._scope)
        finally:
            self._invalidate(name)

    def copy_to(self, to_scope: str, overwrite: bool = False) -> int:
        """Copy all features from the bound scope to to_scope."""
        return self._resolver.copy_scope(self._scope, to_scope, overwrite)

    def list_all(self) -> List[FeatureRecord]:
        """All features stored for the bound scope, ordered by name."""
        return self._resolver.list_by_scope(self._scope)

    # ------------------------------------------------------------------
    # Computed features
    # ------------------------------------------------------------------

    def define(self, name: str, predicate: Predicate) -> None:
        """Register a computed feature on this service's registry."""
        self._registry.define(name, predicate)

    def undefine(self, name: str) -> None:
        self._registry.undefine(name)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _invalidate(self, name: str) -> None:
        """Drop every cache entry for name in this instance."""
        with self._lock:
            self._generations[name] = self._generations.get(name, 0) + 1
            for key in [k for k in self._cache if k[0] == name]:
                del self._cache[key]

    def __repr__(self) -> str:
        return f"FeatureService(scope={self._scope!r})"


def create_feature_service(
    config: Optional[AppConfig] = None,
    store: Optional[RecordStore] = None,
    registry: Optional[DefinitionRegistry] = None,
    scope: str = GLOBAL_SCOPE,
) -> FeatureService:
    """Factory function to create a feature service."""
    if store is None:
        config = config or load_config()
        store = create_sql_store(config.database)
    return FeatureService(FeatureResolver(store), registry=registry, scope=scope)


_service: Optional[FeatureService] = None
_service_lock = threading.Lock()


def get_feature_service() -> FeatureService:
    """Process-wide service bound to 'global', created on first use."""
    global _service
    with _service_lock:
        if _service is None:
            _service = create_feature_service()
        return _service


def reset_feature_service() -> None:
    """Close and forget the process-wide service."""
    global _service
    with _service_lock:
        if _service is not None:
            _service.resolver.store.close()
        _service = None
