"""
Integration Record
Database row for a serialized integration
"""

from sqlalchemy import Column, String, JSON, DateTime
from . import Base
from .workflow import _utcnow


class IntegrationRecord(Base):
    """
    Integration Record

    Credentials live inside ``payload`` in plaintext, same as in memory.
    """
    __tablename__ = "integrations"

    id = Column(String(64), primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    payload = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<IntegrationRecord(id='{self.id}', name='{self.name}')>"
