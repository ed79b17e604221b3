"""
Scope-based feature flags backed by a SQL record store.
"""

from featureflags.core.exceptions import (
    ConfigurationError,
    DecodeWarning,
    FeatureFlagError,
    FeatureValidationError,
    StorageError,
)
from featureflags.feature_mgmt import (
    DefinitionRegistry,
    FeatureHelper,
    FeatureResolver,
    FeatureService,
    clear_definitions,
    create_feature_service,
    default_registry,
    define,
    get_feature_service,
    undefine,
)
from featureflags.storage import (
    GLOBAL_SCOPE,
    FeatureRecord,
    InMemoryFeatureStore,
    RecordStore,
    SQLFeatureStore,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DecodeWarning",
    "FeatureFlagError",
    "FeatureValidationError",
    "StorageError",
    "DefinitionRegistry",
    "FeatureHelper",
    "FeatureResolver",
    "FeatureService",
    "clear_definitions",
    "create_feature_service",
    "default_registry",
    "define",
    "get_feature_service",
    "undefine",
    "GLOBAL_SCOPE",
    "FeatureRecord",
    "InMemoryFeatureStore",
    "RecordStore",
    "SQLFeatureStore",
]
