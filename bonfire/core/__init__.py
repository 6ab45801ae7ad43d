"""
BonFire workflow core.

Architecture:
    store        - Repository interface, in-memory and SQL backends
    workflow     - Workflow model and id generation
    nodes        - Node models and per-type execution handlers
    manager      - Graph mutation API and integration CRUD
    engine       - Sequential executor
    integrations - Integration configs and connectivity checks
"""

from .exceptions import (
    BonfireException,
    NotFoundError,
    WorkflowNotFoundError,
    NodeNotFoundError,
    IntegrationNotFoundError,
)
from .nodes import NodeSpec, WorkflowNode, Position, NodeHandler, register_node_handler
from .workflow import Workflow, generate_id
from .store import Repository, InMemoryRepository, SqlRepository, build_repositories
from .manager import WorkflowManager
from .engine import WorkflowExecutor
from .integrations import Integration, IntegrationTester

__all__ = [
    "BonfireException",
    "NotFoundError",
    "WorkflowNotFoundError",
    "NodeNotFoundError",
    "IntegrationNotFoundError",
    "NodeSpec",
    "WorkflowNode",
    "Position",
    "NodeHandler",
    "register_node_handler",
    "Workflow",
    "generate_id",
    "Repository",
    "InMemoryRepository",
    "SqlRepository",
    "build_repositories",
    "WorkflowManager",
    "WorkflowExecutor",
    "Integration",
    "IntegrationTester",
]
