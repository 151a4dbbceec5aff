"""Append-only storage for exposure and event logs.

The logs are the single source of truth for results; aggregates are always
recomputed from them. Writers only append, so the backends only need an
append that is safe under concurrent writers:

- memory: a process-local list guarded by a lock
- sql: one short transaction per record (default)
- redis: RPUSH, which is atomic, onto one list per log
"""
import threading
from abc import ABC, abstractmethod
from datetime import timezone
from functools import lru_cache
from typing import List, Optional

import redis
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from splitlab.config import get_settings
from splitlab.database import SessionLocal
from splitlab.models.event import EventLog
from splitlab.models.exposure import ExposureLog
from splitlab.schemas.records import EventRecord, ExposureRecord


class ExperimentStoreError(Exception):
    """Raised when the underlying log storage cannot append or scan."""
    pass


class ExperimentLogStore(ABC):
    """Interface shared by all log backends."""

    @abstractmethod
    def append_exposure(self, record: ExposureRecord) -> None:
        ...

    @abstractmethod
    def append_event(self, record: EventRecord) -> None:
        ...

    @abstractmethod
    def list_exposures(self) -> List[ExposureRecord]:
        ...

    @abstractmethod
    def list_events(self) -> List[EventRecord]:
        ...


class InMemoryLogStore(ExperimentLogStore):
    """Process-local log. Lost on restart; used for tests and single-process demos."""

    def __init__(self):
        self._lock = threading.Lock()
        self._exposures: List[ExposureRecord] = []
        self._events: List[EventRecord] = []

    def append_exposure(self, record: ExposureRecord) -> None:
        with self._lock:
            self._exposures.append(record)

    def append_event(self, record: EventRecord) -> None:
        with self._lock:
            self._events.append(record)

    def list_exposures(self) -> List[ExposureRecord]:
        with self._lock:
            return list(self._exposures)

    def list_events(self) -> List[EventRecord]:
        with self._lock:
            return list(self._events)


def _as_utc(value):
    # SQLite drops tzinfo on the way back out
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlLogStore(ExperimentLogStore):
    """SQLAlchemy-backed log using the experiment_exposures / experiment_events tables."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _append(self, row) -> None:
        session = self.session_factory()
        try:
            session.add(row)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise ExperimentStoreError(f"Could not append {row.__tablename__} row: {e}") from e
        finally:
            session.close()

    def _scan(self, model) -> list:
        session = self.session_factory()
        try:
            return session.scalars(select(model).order_by(model.id)).all()
        except SQLAlchemyError as e:
            raise ExperimentStoreError(f"Could not scan {model.__tablename__}: {e}") from e
        finally:
            session.close()

    def append_exposure(self, record: ExposureRecord) -> None:
        self._append(ExposureLog(**record.model_dump()))

    def append_event(self, record: EventRecord) -> None:
        self._append(EventLog(**record.model_dump()))

    def list_exposures(self) -> List[ExposureRecord]:
        return [
            ExposureRecord(
                user_or_session_id=row.user_or_session_id,
                test_id=row.test_id,
                variant=row.variant,
                timestamp=_as_utc(row.timestamp)
            )
            for row in self._scan(ExposureLog)
        ]

    def list_events(self) -> List[EventRecord]:
        return [
            EventRecord(
                user_or_session_id=row.user_or_session_id,
                event_name=row.event_name,
                test_id=row.test_id,
                variant=row.variant,
                timestamp=_as_utc(row.timestamp)
            )
            for row in self._scan(EventLog)
        ]


class RedisLogStore(ExperimentLogStore):
    """Redis-backed log shared across workers; one JSON document per list entry."""

    def __init__(self, redis_client: redis.Redis, prefix: str = "splitlab"):
        self.redis = redis_client
        self.prefix = prefix

    def _key(self, log_name: str) -> str:
        return f"{self.prefix}:experiments:{log_name}"

    def _push(self, log_name: str, payload: str) -> None:
        try:
            self.redis.rpush(self._key(log_name), payload)
        except redis.RedisError as e:
            raise ExperimentStoreError(f"Could not append to {log_name}: {e}") from e

    def _range(self, log_name: str) -> list:
        try:
            return self.redis.lrange(self._key(log_name), 0, -1)
        except redis.RedisError as e:
            raise ExperimentStoreError(f"Could not scan {log_name}: {e}") from e

    def append_exposure(self, record: ExposureRecord) -> None:
        self._push("exposures", record.model_dump_json())

    def append_event(self, record: EventRecord) -> None:
        self._push("events", record.model_dump_json())

    def _decode(self, log_name: str, model):
        try:
            return [model.model_validate_json(item) for item in self._range(log_name)]
        except ValidationError as e:
            raise ExperimentStoreError(f"Corrupt entry in {log_name}: {e}") from e

    def list_exposures(self) -> List[ExposureRecord]:
        return self._decode("exposures", ExposureRecord)

    def list_events(self) -> List[EventRecord]:
        return self._decode("events", EventRecord)


def create_log_store(backend: str, redis_client: Optional[redis.Redis] = None) -> ExperimentLogStore:
    """
    Build a log store for the configured backend name.

    Raises:
        ValueError: If the backend name is unknown
    """
    settings = get_settings()

    if backend == "memory":
        return InMemoryLogStore()
    if backend == "sql":
        return SqlLogStore(SessionLocal)
    if backend == "redis":
        client = redis_client or redis.from_url(settings.redis_url)
        return RedisLogStore(client, prefix=settings.redis_key_prefix)

    raise ValueError(f"Unknown log store backend: {backend!r}")


@lru_cache()
def get_log_store() -> ExperimentLogStore:
    """Process-wide log store for the configured backend."""
    return create_log_store(get_settings().log_store_backend)
