"""
Record store contract and the persisted record type.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from featureflags.core.exceptions import FeatureValidationError
from featureflags.storage.codec import JSONValue

GLOBAL_SCOPE = "global"
MAX_KEY_LENGTH = 100


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the timezone-less datetime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def validate_key(name: str, scope: str) -> None:
    """Check name and scope at the write boundary."""
    for field_name, field_value in (("name", name), ("scope", scope)):
        if not isinstance(field_value, str):
            raise FeatureValidationError(
                f"Feature {field_name} must be a string, got {type(field_value).__name__}",
                details={field_name: repr(field_value)},
            )
        if not field_value.strip():
            raise FeatureValidationError(
                f"Feature {field_name} must not be empty",
                details={field_name: field_value},
            )
        if len(field_value) > MAX_KEY_LENGTH:
            raise FeatureValidationError(
                f"Feature {field_name} exceeds {MAX_KEY_LENGTH} characters",
                details={field_name: field_value[:MAX_KEY_LENGTH] + "..."},
            )


@dataclass
class FeatureRecord:
    """A persisted (name, scope) -> {enabled, value} record."""

    name: str
    scope: str
    enabled: bool = False
    value: JSONValue = None
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "scope": self.scope,
            "enabled": self.enabled,
            "value": self.value,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "modified_at": self.modified_at.isoformat() if self.modified_at else None,
        }


class RecordStore(ABC):
    """Durable (name, scope) keyed storage used by the resolver."""

    @abstractmethod
    def find_exact(self, name: str, scope: str) -> Optional[FeatureRecord]:
        """Return the record stored at exactly (name, scope), or None."""

    @abstractmethod
    def upsert(self, name: str, scope: str, enabled: bool, value: JSONValue) -> FeatureRecord:
        """Create or update the (name, scope) record and return it."""

    @abstractmethod
    def delete(self, name: str, scope: str) -> int:
        """Delete the (name, scope) record. Returns the number of rows removed."""

    @abstractmethod
    def list_by_scope(self, scope: str) -> List[FeatureRecord]:
        """All records in exactly this scope, ordered by name."""

    def exists(self, name: str, scope: str) -> bool:
        return self.find_exact(name, scope) is not None

    def close(self) -> None:
        """Release any underlying resources."""
