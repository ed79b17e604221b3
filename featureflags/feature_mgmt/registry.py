"""
Computed feature definitions.

A definition is a predicate ``fn(scope) -> bool`` registered under a feature
name. It is evaluated on every check and takes precedence over stored records.

Writers serialize on a lock and publish a new immutable snapshot; readers use
whatever snapshot is current, so they never observe a half-applied update.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional

from featureflags.core.exceptions import FeatureValidationError

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]


class DefinitionRegistry:
    """Mapping from feature name to a computed predicate."""

    def __init__(self):
        self._lock = threading.RLock()
        self._snapshot: Mapping[str, Predicate] = MappingProxyType({})

    def define(self, name: str, predicate: Predicate) -> None:
        """Register or replace the predicate for name."""
        if not callable(predicate):
            raise FeatureValidationError(
                f"Definition for {name!r} must be callable",
                details={"name": name, "type": type(predicate).__name__},
            )
        with self._lock:
            updated = dict(self._snapshot)
            replaced = name in updated
            updated[name] = predicate
            self._snapshot = MappingProxyType(updated)
        logger.debug(f"{'Replaced' if replaced else 'Defined'} computed feature {name!r}")

    def undefine(self, name: str) -> None:
        """Remove the predicate for name; no-op when absent."""
        with self._lock:
            if name not in self._snapshot:
                return
            updated = dict(self._snapshot)
            del updated[name]
            self._snapshot = MappingProxyType(updated)
        logger.debug(f"Removed computed feature {name!r}")

    def clear(self) -> None:
        """Remove every definition. Meant for test isolation."""
        with self._lock:
            self._snapshot = MappingProxyType({})

    def lookup(self, name: str) -> Optional[Predicate]:
        return self._snapshot.get(name)

    def names(self) -> List[str]:
        return sorted(self._snapshot)

    def __contains__(self, name: object) -> bool:
        return name in self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)


# Process-wide registry used when a service is built without one
default_registry = DefinitionRegistry()


def define(name: str, predicate: Predicate) -> None:
    """Register a computed feature on the default registry."""
    default_registry.define(name, predicate)


def undefine(name: str) -> None:
    """Remove a computed feature from the default registry."""
    default_registry.undefine(name)


def clear_definitions() -> None:
    """Clear the default registry (useful in tests)."""
    default_registry.clear()
