"""
Workflow Manager - the graph mutation API.

Builds and evolves workflows (create, add node, connect, update, delete)
and manages stored integrations. All state goes through the injected
repositories; each call is an independent point mutation.

Example:
    manager = WorkflowManager(InMemoryRepository(), InMemoryRepository())

    workflow = manager.create_workflow("Notify", "Post to Slack on deploy")
    start = manager.add_node(workflow.id, {"type": "trigger", "name": "Start"})
    send = manager.add_node(workflow.id, {"type": "action", "name": "Send"})
    manager.connect_nodes(workflow.id, start.id, send.id)
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .exceptions import IntegrationNotFoundError, NodeNotFoundError, WorkflowNotFoundError
from .integrations.models import Integration, parse_integration_config
from .nodes import NodeSpec, WorkflowNode
from .store import Repository
from .workflow import Workflow, generate_id

logger = logging.getLogger(__name__)

# Fields a partial update may never replace
_IMMUTABLE_FIELDS = ("id", "created_at")


class WorkflowManager:
    """Graph mutation API plus integration CRUD."""

    def __init__(
        self,
        workflows: Repository[Workflow],
        integrations: Repository[Integration],
    ) -> None:
        self.workflows = workflows
        self.integrations = integrations

    # ========================================================================
    # Workflows
    # ========================================================================

    def create_workflow(self, name: str, description: Optional[str] = None) -> Workflow:
        """Create an empty, inactive workflow."""
        workflow = Workflow(id=generate_id(), name=name, description=description)
        self.workflows.put(workflow)
        logger.info(f"Workflow created: {workflow.name} ({workflow.id})")
        return workflow

    def get_workflow(self, workflow_id: str) -> Optional[Workflow]:
        return self.workflows.get(workflow_id)

    def list_workflows(self) -> List[Workflow]:
        return self.workflows.list()

    def add_node(
        self,
        workflow_id: str,
        node_spec: Union[NodeSpec, Mapping[str, Any]],
    ) -> WorkflowNode:
        """
        Append a node with a freshly generated id.

        Any ``id`` present in ``node_spec`` is ignored.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
            pydantic.ValidationError: If the node spec is invalid
        """
        workflow = self._require_workflow(workflow_id)

        if isinstance(node_spec, NodeSpec):
            data = node_spec.model_dump()
        else:
            data = dict(node_spec)
        data["id"] = generate_id()
        node = WorkflowNode.model_validate(data)

        workflow.nodes.append(node)
        workflow.touch()
        self.workflows.put(workflow)

        logger.info(f"Node added to workflow {workflow_id}: {node.name} ({node.type}, {node.id})")
        return node

    def connect_nodes(self, workflow_id: str, source_id: str, target_id: str) -> None:
        """
        Add ``target_id`` to the source node's connections.

        Idempotent: an existing connection is left as is and ``updated_at``
        is not bumped. The target id is not checked against the workflow.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
            NodeNotFoundError: If the source node does not exist
        """
        workflow = self._require_workflow(workflow_id)

        source = workflow.get_node(source_id)
        if source is None:
            raise NodeNotFoundError(source_id, workflow_id=workflow_id)

        if target_id in source.connections:
            return

        source.connections.append(target_id)
        workflow.touch()
        self.workflows.put(workflow)
        logger.debug(f"Connected {source_id} -> {target_id} in workflow {workflow_id}")

    def update_workflow(self, workflow_id: str, updates: Mapping[str, Any]) -> Optional[Workflow]:
        """
        Merge ``updates`` over the stored workflow.

        ``id`` and ``created_at`` are preserved whatever ``updates`` says.

        Returns:
            The updated workflow, or None if it does not exist
        """
        workflow = self.workflows.get(workflow_id)
        if workflow is None:
            return None

        merged = workflow.model_dump()
        merged.update({k: v for k, v in updates.items() if k not in _IMMUTABLE_FIELDS})
        merged["id"] = workflow.id

        updated = Workflow.model_validate(merged)
        updated.touch()
        self.workflows.put(updated)

        logger.info(f"Workflow updated: {updated.name} ({updated.id})")
        return updated

    def delete_workflow(self, workflow_id: str) -> bool:
        """Delete a workflow. Its integrations are left untouched."""
        deleted = self.workflows.delete(workflow_id)
        if deleted:
            logger.info(f"Workflow deleted: {workflow_id}")
        return deleted

    def attach_integration(self, workflow_id: str, integration_id: str) -> Workflow:
        """
        Copy a stored integration into the workflow's integration list.

        A later change to the stored integration is not reflected in the
        copy. Attaching the same id twice is a no-op.

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
            IntegrationNotFoundError: If the integration does not exist
        """
        workflow = self._require_workflow(workflow_id)
        integration = self.integrations.get(integration_id)
        if integration is None:
            raise IntegrationNotFoundError(integration_id)

        if workflow.get_integration(integration_id) is None:
            workflow.integrations.append(integration.model_copy(deep=True))
            workflow.touch()
            self.workflows.put(workflow)
            logger.info(f"Integration {integration_id} attached to workflow {workflow_id}")

        return workflow

    # ========================================================================
    # Integrations
    # ========================================================================

    def create_integration(
        self,
        name: str,
        config: Union[Mapping[str, Any], Any],
        credentials: Optional[Dict[str, str]] = None,
    ) -> Integration:
        """
        Store a new integration with status ``disconnected``.

        ``config`` is either a config model or a mapping whose ``type``
        selects the variant (slack, jira, github, database, mcp, custom_api).
        """
        if isinstance(config, Mapping):
            config = parse_integration_config(dict(config))

        integration = Integration(
            id=generate_id(),
            name=name,
            config=config,
            status="disconnected",
            credentials=credentials,
        )
        self.integrations.put(integration)
        logger.info(f"Integration created: {integration.name} ({integration.type}, {integration.id})")
        return integration

    def get_integration(self, integration_id: str) -> Optional[Integration]:
        return self.integrations.get(integration_id)

    def list_integrations(self) -> List[Integration]:
        return self.integrations.list()

    def delete_integration(self, integration_id: str) -> bool:
        """Delete a stored integration. Node configs referencing it are not rewritten."""
        deleted = self.integrations.delete(integration_id)
        if deleted:
            logger.info(f"Integration deleted: {integration_id}")
        return deleted

    # ========================================================================
    # Internal helpers
    # ========================================================================

    def _require_workflow(self, workflow_id: str) -> Workflow:
        workflow = self.workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow
