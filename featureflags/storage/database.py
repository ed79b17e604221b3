"""
Database Layer - SQLAlchemy record store.

Persists feature records in a single `features` table keyed by the unique
(name, scope) pair, with a secondary index on scope. Works with any
SQLAlchemy URL; sqlite is the default.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator, List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from featureflags.config import DatabaseConfig
from featureflags.core.exceptions import StorageError
from featureflags.storage.base import (
    GLOBAL_SCOPE,
    MAX_KEY_LENGTH,
    FeatureRecord,
    RecordStore,
    utcnow,
    validate_key,
)
from featureflags.storage.codec import JSONValue, decode_value, encode_value

logger = logging.getLogger(__name__)

Base = declarative_base()


# ============ SQLAlchemy Models ============


class FeatureModel(Base):
    """Feature flag record model."""

    __tablename__ = "features"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(MAX_KEY_LENGTH), nullable=False)
    scope = Column(String(MAX_KEY_LENGTH), nullable=False, default=GLOBAL_SCOPE)
    enabled = Column(Boolean, nullable=False, default=False)
    value = Column(Text, nullable=True)  # JSON-encoded payload
    created_at = Column(DateTime, nullable=False, default=utcnow)
    modified_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("name", "scope", name="uq_features_name_scope"),
        Index("ix_features_scope", "scope"),
    )

    def to_record(self) -> FeatureRecord:
        return FeatureRecord(
            name=self.name,
            scope=self.scope,
            enabled=bool(self.enabled),
            value=decode_value(self.value),
            created_at=self.created_at,
            modified_at=self.modified_at,
        )


class FeatureDatabase:
    """Engine and session management for the features table."""

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config = config or DatabaseConfig()
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Optional[Engine]:
        return self._engine

    def connect(self) -> None:
        """Create the engine and, when configured, the schema."""
        if self.config.is_sqlite:
            kwargs = {"connect_args": {"check_same_thread": False}}
            if self.config.is_memory:
                # One shared connection, otherwise each session sees an empty database
                kwargs["poolclass"] = StaticPool
        else:
            kwargs = {
                "poolclass": QueuePool,
                "pool_size": self.config.pool_size,
                "max_overflow": self.config.max_overflow,
                "pool_pre_ping": True,
            }

        try:
            self._engine = create_engine(self.config.url, echo=self.config.echo, **kwargs)
            self._session_factory = sessionmaker(bind=self._engine)
            if self.config.create_tables:
                self.create_tables()
        except SQLAlchemyError as e:
            self._engine = None
            self._session_factory = None
            raise StorageError(
                f"Failed to connect to feature store: {e}",
                details={"operation": "connect"},
            ) from e

        logger.info(f"Connected to feature store: {self._engine.url.render_as_string(hide_password=True)}")

    def create_tables(self) -> None:
        """Create all tables."""
        Base.metadata.create_all(self._engine)
        logger.debug("Feature tables created")

    def drop_tables(self) -> None:
        """Drop all tables (use with caution)."""
        Base.metadata.drop_all(self._engine)
        logger.warning("Feature tables dropped")

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Get database session context."""
        if self._session_factory is None:
            raise StorageError(
                "Feature store is not connected",
                details={"operation": "session"},
            )
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close database connection."""
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Feature store connection closed")
        self._engine = None
        self._session_factory = None


class SQLFeatureStore(RecordStore):
    """Record store backed by a SQLAlchemy database."""

    def __init__(self, database: FeatureDatabase):
        self.database = database

    @contextmanager
    def _storage_errors(self, operation: str, **key) -> Generator[None, None, None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Feature store {operation} failed for {key}: {e}")
            raise StorageError(
                f"Feature store {operation} failed: {e.__class__.__name__}",
                details={"operation": operation, **key},
            ) from e

    def find_exact(self, name: str, scope: str) -> Optional[FeatureRecord]:
        with self._storage_errors("find_exact", name=name, scope=scope):
            with self.database.session() as session:
                model = (
                    session.query(FeatureModel)
                    .filter(FeatureModel.name == name, FeatureModel.scope == scope)
                    .first()
                )
                return model.to_record() if model is not None else None

    def upsert(self, name: str, scope: str, enabled: bool, value: JSONValue) -> FeatureRecord:
        validate_key(name, scope)
        payload = encode_value(value)

        with self._storage_errors("upsert", name=name, scope=scope):
            with self.database.session() as session:
                model = (
                    session.query(FeatureModel)
                    .filter(FeatureModel.name == name, FeatureModel.scope == scope)
                    .first()
                )
                if model is not None:
                    model.enabled = enabled
                    model.value = payload
                    model.modified_at = utcnow()
                else:
                    model = FeatureModel(name=name, scope=scope, enabled=enabled, value=payload)
                    session.add(model)
                session.flush()
                record = model.to_record()

        logger.debug(f"Upserted feature {name!r} in scope {scope!r} (enabled={enabled})")
        return record

    def delete(self, name: str, scope: str) -> int:
        with self._storage_errors("delete", name=name, scope=scope):
            with self.database.session() as session:
                count = (
                    session.query(FeatureModel)
                    .filter(FeatureModel.name == name, FeatureModel.scope == scope)
                    .delete(synchronize_session=False)
                )
        return count

    def list_by_scope(self, scope: str) -> List[FeatureRecord]:
        with self._storage_errors("list_by_scope", scope=scope):
            with self.database.session() as session:
                query = (
                    session.query(FeatureModel)
                    .filter(FeatureModel.scope == scope)
                    .order_by(FeatureModel.name.asc())
                )
                return [m.to_record() for m in query.all()]

    def close(self) -> None:
        self.database.close()


def create_sql_store(config: Optional[DatabaseConfig] = None) -> SQLFeatureStore:
    """Factory function to create a connected SQL feature store."""
    database = FeatureDatabase(config)
    database.connect()
    return SQLFeatureStore(database)
