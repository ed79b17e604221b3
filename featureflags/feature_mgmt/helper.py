"""
Read-only feature checks for templates and views.

Authorization must still be enforced in request handlers; use this helper for
display logic only.

Usage (Jinja-style environment):
    env.globals.update(FeatureHelper(service).as_globals())

    {% if feature.is_enabled("dark_mode") %} ... {% endif %}
    {% if feature.bind_scope("beta").is_enabled("new_ui") %} ... {% endif %}
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

from featureflags.feature_mgmt.service import FeatureService


class FeatureHelper:
    """Proxy exposing only the read side of a FeatureService."""

    def __init__(self, service: FeatureService):
        self._service = service

    @property
    def scope(self) -> str:
        return self._service.scope

    def bind_scope(self, scope: str) -> "FeatureHelper":
        return FeatureHelper(self._service.bind_scope(scope))

    def is_enabled(self, name: str) -> bool:
        return self._service.is_enabled(name)

    def is_disabled(self, name: str) -> bool:
        return self._service.is_disabled(name)

    def is_enabled_any(self, names: Iterable[str]) -> bool:
        return self._service.is_enabled_any(names)

    def is_enabled_all(self, names: Iterable[str]) -> bool:
        return self._service.is_enabled_all(names)

    def get_value(self, name: str, default: Any = None) -> Any:
        return self._service.get_value(name, default)

    def as_globals(self, name: str = "feature") -> Dict[str, "FeatureHelper"]:
        """Mapping to merge into a template engine's globals."""
        return {name: self}
