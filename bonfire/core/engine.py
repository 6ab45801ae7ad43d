"""
Workflow Executor for BonFire

Runs a stored workflow's nodes one after another, in the order they were
added, and reports a per-node result trace:
1. Load the workflow from the repository
2. For each node, pick the handler registered for its type
3. Record success (with the handler's payload) or failure (with the message)
4. Stop at the first failure; later nodes are never attempted

``connections`` are not consulted: this is a linear pass, not a graph walk.

Example:
    executor = WorkflowExecutor(workflows)
    report = await executor.execute_workflow(workflow.id)

    report["results"]
    # [{"node_id": "...", "success": True, "result": {"message": "Workflow triggered"}}, ...]
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .exceptions import WorkflowNotFoundError
from .logging_config import log_context
from .nodes import NodeHandlerRegistry, WorkflowNode, get_node_registry
from .store import Repository
from .workflow import Workflow

logger = logging.getLogger(__name__)


class WorkflowExecutor:
    """
    Sequential executor.

    Args:
        workflows: Repository to load workflows from
        registry: Node handler registry (default: the global registry)
    """

    def __init__(
        self,
        workflows: Repository[Workflow],
        registry: Optional[NodeHandlerRegistry] = None,
    ) -> None:
        self.workflows = workflows
        self.registry = registry or get_node_registry()

    async def execute_workflow(self, workflow_id: str) -> Dict[str, Any]:
        """
        Execute a workflow.

        Returns:
            Execution report with:
            - workflow_id
            - executed_at: ISO 8601 timestamp (UTC)
            - status: "success" or "failed"
            - failed_at_node: id of the failing node, or None
            - results: one entry per attempted node, in node order

        Raises:
            WorkflowNotFoundError: If the workflow does not exist
        """
        workflow = self.workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)

        results: List[Dict[str, Any]] = []
        failed_at_node: Optional[str] = None

        with log_context(workflow_id=workflow.id):
            logger.info(f"Starting workflow execution: {workflow.name}, {len(workflow.nodes)} nodes")

            for node in workflow.nodes:
                with log_context(node_id=node.id):
                    entry = await self._execute_node(node, workflow)
                results.append(entry)

                if not entry["success"]:
                    failed_at_node = node.id
                    logger.error(
                        f"Workflow execution failed at node {node.id}: {entry['error']}",
                        extra={"node_id": node.id},
                    )
                    break

            if failed_at_node is None:
                logger.info(f"Workflow execution completed successfully ({len(results)} nodes executed)")

        return {
            "workflow_id": workflow.id,
            "executed_at": datetime.now(timezone.utc).isoformat(),
            "status": "failed" if failed_at_node else "success",
            "failed_at_node": failed_at_node,
            "results": results,
        }

    async def _execute_node(self, node: WorkflowNode, workflow: Workflow) -> Dict[str, Any]:
        """Run one node; any exception from its handler becomes a failed entry."""
        start_time = time.time()
        logger.info(f"Executing node: {node.name} ({node.type})")

        try:
            handler = self.registry.get(node.type)
            result = await handler.execute(node, workflow)
        except Exception as e:
            logger.warning(f"Node {node.id} ({node.type}) failed: {e}")
            return {"node_id": node.id, "success": False, "error": str(e)}
        finally:
            execution_time = time.time() - start_time
            logger.debug(f"Node {node.id} finished in {execution_time:.3f}s")

        return {"node_id": node.id, "success": True, "result": result}
