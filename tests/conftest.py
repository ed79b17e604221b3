"""Shared pytest fixtures for all tests."""

from __future__ import annotations

from typing import List, Optional

import pytest

from featureflags.config import DatabaseConfig
from featureflags.core.exceptions import StorageError
from featureflags.feature_mgmt import (
    DefinitionRegistry,
    FeatureResolver,
    FeatureService,
    clear_definitions,
)
from featureflags.storage import (
    FeatureDatabase,
    FeatureRecord,
    InMemoryFeatureStore,
    RecordStore,
    SQLFeatureStore,
)


class FailingStore(RecordStore):
    """Record store whose backend is always down."""

    def __init__(self):
        self.calls: List[str] = []

    def _fail(self, operation: str):
        self.calls.append(operation)
        raise StorageError("connection refused", details={"operation": operation})

    def find_exact(self, name: str, scope: str) -> Optional[FeatureRecord]:
        self._fail("find_exact")

    def upsert(self, name, scope, enabled, value) -> FeatureRecord:
        self._fail("upsert")

    def delete(self, name: str, scope: str) -> int:
        self._fail("delete")

    def list_by_scope(self, scope: str) -> List[FeatureRecord]:
        self._fail("list_by_scope")


class CountingStore(InMemoryFeatureStore):
    """In-memory store that counts lookups, to observe caching."""

    def __init__(self):
        super().__init__()
        self.lookups = 0

    def find_exact(self, name, scope):
        self.lookups += 1
        return super().find_exact(name, scope)


@pytest.fixture(autouse=True)
def isolate_default_registry():
    """Computed definitions on the process-wide registry never leak between tests."""
    clear_definitions()
    yield
    clear_definitions()


@pytest.fixture
def sql_store():
    """SQLAlchemy store on a private in-memory sqlite database."""
    database = FeatureDatabase(DatabaseConfig(url="sqlite://"))
    database.connect()
    store = SQLFeatureStore(database)
    yield store
    store.close()


@pytest.fixture
def memory_store():
    return InMemoryFeatureStore()


@pytest.fixture(params=["sql", "memory"])
def store(request):
    """Every behavioural test runs against both store implementations."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def counting_store():
    return CountingStore()


@pytest.fixture
def registry():
    return DefinitionRegistry()


@pytest.fixture
def resolver(store):
    return FeatureResolver(store)


@pytest.fixture
def service(resolver, registry):
    return FeatureService(resolver, registry=registry)


@pytest.fixture
def isolated_config(monkeypatch, tmp_path):
    """No config file, no env overrides, no cached config."""
    import featureflags.config as config_module

    for env_var in list(config_module.ENV_VAR_MAPPING) + ["FEATURE_FLAGS_CONFIG"]:
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "_cached_config", None)
    return tmp_path
