"""
Scope-fallback resolution against a record store.

Resolution order:
1. Exact (name, scope) record, unless the scope is already "global"
2. (name, "global") record
3. False / the caller's default

Storage failures are never turned into "disabled": they propagate as
StorageError so an outage cannot masquerade as a feature being off.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from featureflags.storage.base import GLOBAL_SCOPE, FeatureRecord, RecordStore
from featureflags.storage.codec import JSONValue

logger = logging.getLogger(__name__)


class FeatureResolver:
    """Reads and writes flag records with one-hop fallback to the global scope."""

    def __init__(self, store: RecordStore):
        self.store = store

    def _find(self, name: str, scope: str) -> Optional[FeatureRecord]:
        """Exact scope first, then global. Exactly one hop."""
        if scope != GLOBAL_SCOPE:
            record = self.store.find_exact(name, scope)
            if record is not None:
                return record
        return self.store.find_exact(name, GLOBAL_SCOPE)

    def is_enabled(self, name: str, scope: str = GLOBAL_SCOPE) -> bool:
        """
        Check whether a feature is enabled.

        An exact-scope record wins even when it says disabled.
        """
        record = self._find(name, scope)
        return record is not None and record.enabled

    def get_value(self, name: str, scope: str = GLOBAL_SCOPE, default: Any = None) -> Any:
        """Return the stored value, or default when absent or null."""
        record = self._find(name, scope)
        if record is None or record.value is None:
            return default
        return record.value

    def enable(self, name: str, scope: str = GLOBAL_SCOPE, value: JSONValue = None) -> FeatureRecord:
        """Enable a feature, replacing any previously stored value."""
        record = self.store.upsert(name, scope, True, value)
        logger.info(f"Enabled feature {name!r} for scope {scope!r}")
        return record

    def disable(self, name: str, scope: str = GLOBAL_SCOPE) -> FeatureRecord:
        """Disable a feature. Disabling always clears the stored value."""
        record = self.store.upsert(name, scope, False, None)
        logger.info(f"Disabled feature {name!r} for scope {scope!r}")
        return record

    def remove(self, name: str, scope: str = GLOBAL_SCOPE) -> bool:
        """
        Delete the record for (name, scope).

        Afterwards the scope falls back to whatever "global" holds.
        """
        removed = self.store.delete(name, scope) > 0
        if removed:
            logger.info(f"Removed feature {name!r} from scope {scope!r}")
        return removed

    def list_by_scope(self, scope: str) -> List[FeatureRecord]:
        """All records stored in exactly this scope, ordered by name. No fallback."""
        return self.store.list_by_scope(scope)

    def copy_scope(self, from_scope: str, to_scope: str, overwrite: bool = False) -> int:
        """
        Copy every record in from_scope to to_scope.

        Args:
            from_scope: Source scope
            to_scope: Target scope
            overwrite: Replace records that already exist in the target

        Returns:
            Number of records actually written
        """
        # Snapshot the source before writing so a self-copy cannot disturb iteration
        records = list(self.store.list_by_scope(from_scope))
        copied = 0

        for record in records:
            if not overwrite and self.store.exists(record.name, to_scope):
                continue
            self.store.upsert(record.name, to_scope, record.enabled, record.value)
            copied += 1

        logger.info(
            f"Copied {copied}/{len(records)} features from {from_scope!r} to {to_scope!r}"
            f" (overwrite={overwrite})"
        )
        return copied
