"""
Workflow Record
Database row for a serialized workflow
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, JSON, DateTime
from . import Base


def _utcnow():
    return datetime.now(timezone.utc)


class WorkflowRecord(Base):
    """
    Workflow Record

    ``payload`` holds the full workflow (nodes, integrations, timestamps)
    as produced by ``Workflow.model_dump(mode="json")``.
    """
    __tablename__ = "workflows"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    payload = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<WorkflowRecord(id='{self.id}', name='{self.name}')>"
