"""
Workflow Store - keyed storage for workflows and integrations.

Every component that needs storage receives a ``Repository`` instead of
reaching for module-level state:

- InMemoryRepository: dict-backed, lives as long as the process
- SqlRepository: SQLAlchemy-backed, entity stored as a JSON payload

Absence is a normal outcome (``None`` / ``False``), never an exception.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import sessionmaker

from ..config import Settings
from ..database import create_session_factory, get_db
from ..models import IntegrationRecord, WorkflowRecord
from .integrations.models import Integration
from .workflow import Workflow

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Repository(ABC, Generic[T]):
    """Storage interface shared by the manager, executor and tester."""

    @abstractmethod
    def put(self, entity: T) -> None:
        """Insert or overwrite by ``entity.id``."""

    @abstractmethod
    def get(self, entity_id: str) -> Optional[T]:
        """Return the entity, or None if it does not exist."""

    @abstractmethod
    def list(self) -> List[T]:
        """Return all entities in storage order."""

    @abstractmethod
    def delete(self, entity_id: str) -> bool:
        """Remove the entity. True if it existed."""


class InMemoryRepository(Repository[T]):
    """
    Dict-backed repository.

    ``get`` returns the stored object itself, not a copy. There is no
    locking: concurrent writers to the same id race.
    """

    def __init__(self) -> None:
        self._items: Dict[str, T] = {}

    def put(self, entity: T) -> None:
        self._items[entity.id] = entity

    def get(self, entity_id: str) -> Optional[T]:
        return self._items.get(entity_id)

    def list(self) -> List[T]:
        return list(self._items.values())

    def delete(self, entity_id: str) -> bool:
        return self._items.pop(entity_id, None) is not None

    def __len__(self) -> int:
        return len(self._items)


class SqlRepository(Repository[T]):
    """
    SQLAlchemy-backed repository.

    One short-lived session per call. Entities are (de)serialized with
    pydantic, so every ``get`` returns a fresh object.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        record_cls: Type,
        model_cls: Type[T],
    ) -> None:
        self._session_factory = session_factory
        self._record_cls = record_cls
        self._model_cls = model_cls

    def put(self, entity: T) -> None:
        payload = entity.model_dump(mode="json")
        with get_db(self._session_factory) as db:
            record = db.get(self._record_cls, entity.id)
            if record is None:
                db.add(self._record_cls(id=entity.id, name=entity.name, payload=payload))
            else:
                record.name = entity.name
                record.payload = payload
            db.commit()

    def get(self, entity_id: str) -> Optional[T]:
        with get_db(self._session_factory) as db:
            record = db.get(self._record_cls, entity_id)
            if record is None:
                return None
            return self._model_cls.model_validate(record.payload)

    def list(self) -> List[T]:
        with get_db(self._session_factory) as db:
            records = db.query(self._record_cls).order_by(self._record_cls.created_at).all()
            return [self._model_cls.model_validate(r.payload) for r in records]

    def delete(self, entity_id: str) -> bool:
        with get_db(self._session_factory) as db:
            record = db.get(self._record_cls, entity_id)
            if record is None:
                return False
            db.delete(record)
            db.commit()
            return True


def build_repositories(
    settings: Settings,
) -> Tuple[Repository[Workflow], Repository[Integration]]:
    """
    Create the workflow and integration repositories for the configured backend.

    Returns:
        (workflow_repository, integration_repository)
    """
    if settings.store_backend == "sql":
        session_factory = create_session_factory(settings.database_url)
        logger.info("Using SQL store", extra={"backend": "sql"})
        return (
            SqlRepository(session_factory, WorkflowRecord, Workflow),
            SqlRepository(session_factory, IntegrationRecord, Integration),
        )

    logger.info("Using in-memory store", extra={"backend": "memory"})
    return InMemoryRepository(), InMemoryRepository()
