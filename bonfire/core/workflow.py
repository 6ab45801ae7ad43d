"""
Workflow Data Model

A Workflow is a named, ordered list of nodes plus the integrations its
``integration`` nodes may reference. Node order is execution order;
``connections`` are stored for the canvas but never consulted when running.
"""

import random
import string
import time
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from .integrations.models import Integration
from .nodes import WorkflowNode

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_id() -> str:
    """
    Generate an entity id: ``<epoch-ms>-<9 base36 chars>``.

    Uniqueness relies on the timestamp plus random suffix; there is no counter.
    """
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{int(time.time() * 1000)}-{suffix}"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Workflow(BaseModel):
    """A named automation: ordered nodes and scoped integrations."""

    id: str = Field(default_factory=generate_id)
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    nodes: List[WorkflowNode] = Field(default_factory=list)
    integrations: List[Integration] = Field(default_factory=list)
    active: bool = False
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    def touch(self) -> None:
        """Update the ``updated_at`` timestamp."""
        self.updated_at = utc_now()

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_integration(self, integration_id: Optional[str]) -> Optional[Integration]:
        for integration in self.integrations:
            if integration.id == integration_id:
                return integration
        return None
