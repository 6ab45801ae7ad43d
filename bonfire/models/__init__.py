"""
Models module - SQLAlchemy tables backing the SQL store.

Entities are persisted as their JSON dump in a ``payload`` column; the
pydantic models in ``bonfire.core`` remain the source of truth.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import models after Base is defined to avoid circular imports
from .workflow import WorkflowRecord  # noqa: E402
from .integration import IntegrationRecord  # noqa: E402

__all__ = ["Base", "WorkflowRecord", "IntegrationRecord"]
