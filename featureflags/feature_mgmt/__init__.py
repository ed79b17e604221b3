"""
Feature management module: scoped flag resolution and evaluation.

Provides:
- Scope-fallback resolution against a record store
- Computed definitions that override stored records
- A scoped, cached evaluator service
- A read-only helper for templates
"""

from .helper import FeatureHelper
from .registry import (
    DefinitionRegistry,
    Predicate,
    clear_definitions,
    default_registry,
    define,
    undefine,
)
from .resolver import FeatureResolver
from .service import (
    FeatureService,
    create_feature_service,
    get_feature_service,
    reset_feature_service,
)

__all__ = [
    "FeatureHelper",
    "DefinitionRegistry",
    "Predicate",
    "clear_definitions",
    "default_registry",
    "define",
    "undefine",
    "FeatureResolver",
    "FeatureService",
    "create_feature_service",
    "get_feature_service",
    "reset_feature_service",
]
