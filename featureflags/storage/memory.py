"""In-process record store for tests and ephemeral setups."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from featureflags.storage.base import FeatureRecord, RecordStore, utcnow, validate_key
from featureflags.storage.codec import JSONValue, decode_value, encode_value


@dataclass
class _Row:
    enabled: bool
    payload: Optional[str]
    created_at: datetime
    modified_at: datetime


class InMemoryFeatureStore(RecordStore):
    """Thread-safe dictionary store. Values are kept encoded, as in the database."""

    def __init__(self):
        self._rows: Dict[Tuple[str, str], _Row] = {}
        self._lock = threading.RLock()

    def _to_record(self, name: str, scope: str, row: _Row) -> FeatureRecord:
        return FeatureRecord(
            name=name,
            scope=scope,
            enabled=row.enabled,
            value=decode_value(row.payload),
            created_at=row.created_at,
            modified_at=row.modified_at,
        )

    def find_exact(self, name: str, scope: str) -> Optional[FeatureRecord]:
        with self._lock:
            row = self._rows.get((name, scope))
            return self._to_record(name, scope, row) if row is not None else None

    def upsert(self, name: str, scope: str, enabled: bool, value: JSONValue) -> FeatureRecord:
        validate_key(name, scope)
        payload = encode_value(value)
        now = utcnow()

        with self._lock:
            row = self._rows.get((name, scope))
            if row is None:
                row = _Row(enabled=enabled, payload=payload, created_at=now, modified_at=now)
                self._rows[(name, scope)] = row
            else:
                row.enabled = enabled
                row.payload = payload
                row.modified_at = now
            return self._to_record(name, scope, row)

    def delete(self, name: str, scope: str) -> int:
        with self._lock:
            return 1 if self._rows.pop((name, scope), None) is not None else 0

    def list_by_scope(self, scope: str) -> List[FeatureRecord]:
        with self._lock:
            matches = [
                self._to_record(name, row_scope, row)
                for (name, row_scope), row in self._rows.items()
                if row_scope == scope
            ]
        return sorted(matches, key=lambda r: r.name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
