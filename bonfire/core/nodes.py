"""
Node System for BonFire Workflow Engine

This module defines:
- NodeSpec / WorkflowNode: the node data placed on the workflow canvas
- NodeHandler: per-type execution behaviour, one subclass per node kind
- NodeHandlerRegistry: maps a node ``type`` to its handler

Node kinds:
- trigger: starts the workflow (acknowledgement only)
- action: echoes its config back as executed
- integration: confirms the referenced integration exists in the workflow
- code / api: generic echo (handled by the fallback handler)

New kinds are added by subclassing NodeHandler and decorating the class
with ``@register_node_handler``; the executor never switches on type.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from .exceptions import IntegrationNotFoundError

if TYPE_CHECKING:
    from .workflow import Workflow

logger = logging.getLogger(__name__)


NodeKind = Literal["trigger", "action", "integration", "code", "api"]


class Position(BaseModel):
    """Canvas coordinate. Layout only, no meaning for execution."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class NodeSpec(BaseModel):
    """Everything needed to place a node, except its id."""

    type: NodeKind
    name: str = Field(..., min_length=1, description="Display label")
    config: Dict[str, Any] = Field(default_factory=dict)
    position: Position = Field(default_factory=Position)
    connections: List[str] = Field(
        default_factory=list,
        description="Outgoing edges as target node ids (not validated)"
    )


class WorkflowNode(NodeSpec):
    """A node instance inside a workflow."""

    id: str = Field(..., min_length=1, description="Unique node identifier")


# =============================================================================
# Handlers
# =============================================================================


class NodeHandler(ABC):
    """
    Execution behaviour for one node kind.

    ``execute`` returns the node's result payload. Raising marks the node
    as failed and stops the workflow run.
    """

    node_type: str = ""

    @abstractmethod
    async def execute(self, node: WorkflowNode, workflow: "Workflow") -> Dict[str, Any]:
        ...


class NodeHandlerRegistry:
    """Handlers keyed by node type, with a fallback for unregistered types."""

    def __init__(self, fallback: Optional[NodeHandler] = None) -> None:
        self._handlers: Dict[str, NodeHandler] = {}
        self._fallback = fallback

    def register(self, handler: NodeHandler) -> None:
        if not handler.node_type:
            raise ValueError(f"{type(handler).__name__} has no node_type")
        self._handlers[handler.node_type] = handler

    def get(self, node_type: str) -> NodeHandler:
        handler = self._handlers.get(node_type, self._fallback)
        if handler is None:
            raise ValueError(
                f"No handler for node type '{node_type}'. "
                f"Registered types: {self.list_types()}"
            )
        return handler

    def list_types(self) -> List[str]:
        return sorted(self._handlers)


class DefaultNodeHandler(NodeHandler):
    """Generic echo for node kinds without a dedicated handler."""

    node_type = "*"

    async def execute(self, node: WorkflowNode, workflow: "Workflow") -> Dict[str, Any]:
        return {"message": "Node executed", "type": node.type}


_registry = NodeHandlerRegistry(fallback=DefaultNodeHandler())


def get_node_registry() -> NodeHandlerRegistry:
    """Return the global handler registry."""
    return _registry


def register_node_handler(cls):
    """Class decorator: instantiate the handler and add it to the global registry."""
    _registry.register(cls())
    return cls


@register_node_handler
class TriggerNodeHandler(NodeHandler):
    """No trigger condition is evaluated; reaching the node is the trigger."""

    node_type = "trigger"

    async def execute(self, node: WorkflowNode, workflow: "Workflow") -> Dict[str, Any]:
        return {"message": "Workflow triggered"}


@register_node_handler
class ActionNodeHandler(NodeHandler):
    node_type = "action"

    async def execute(self, node: WorkflowNode, workflow: "Workflow") -> Dict[str, Any]:
        return {"message": "Action executed", "config": node.config}


@register_node_handler
class IntegrationNodeHandler(NodeHandler):
    """
    Resolve ``config.integrationId`` against the workflow's own integrations.

    Only the reference is checked; the remote service is not called.

    Raises:
        IntegrationNotFoundError: If the id is absent from ``workflow.integrations``
    """

    node_type = "integration"

    async def execute(self, node: WorkflowNode, workflow: "Workflow") -> Dict[str, Any]:
        integration_id = node.config.get("integrationId", node.config.get("integration_id"))
        integration = workflow.get_integration(integration_id)
        if integration is None:
            raise IntegrationNotFoundError(integration_id)

        logger.debug(f"Node {node.id} resolved integration {integration.id} ({integration.type})")
        return {"message": "Integration called", "integration": integration.type}
