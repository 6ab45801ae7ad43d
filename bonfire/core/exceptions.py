"""
Custom Exceptions for BonFire

This module defines the exception types raised by the workflow core.

Exception Hierarchy:
- BonfireException (base)
  - NotFoundError (don't retry)
    - WorkflowNotFoundError
    - NodeNotFoundError
    - IntegrationNotFoundError
  - IntegrationError
    - ConfigurationMissingError (don't retry)
    - TransportError (retry)

Nothing in the core retries on its own; ``retry_allowed`` tells callers
whether trying the same operation again can succeed.
"""

from typing import Iterable, Optional


class BonfireException(Exception):
    """Base exception for all BonFire errors"""

    def __init__(self, message: str, retry_allowed: bool = True):
        super().__init__(message)
        self.message = message
        self.retry_allowed = retry_allowed


# ============================================================================
# LOOKUP ERRORS
# ============================================================================

class NotFoundError(BonfireException):
    """
    An id did not resolve to a workflow, node or integration.
    Should NOT be retried - the id is wrong.
    """

    def __init__(self, message: str):
        super().__init__(message, retry_allowed=False)


class WorkflowNotFoundError(NotFoundError):
    """Workflow id does not resolve"""

    def __init__(self, workflow_id: str):
        super().__init__(f"Workflow not found: {workflow_id}")
        self.workflow_id = workflow_id


class NodeNotFoundError(NotFoundError):
    """Node id does not resolve inside its workflow"""

    def __init__(self, node_id: str, workflow_id: Optional[str] = None):
        super().__init__(f"Source node not found: {node_id}")
        self.node_id = node_id
        self.workflow_id = workflow_id


class IntegrationNotFoundError(NotFoundError):
    """Integration id does not resolve"""

    def __init__(self, integration_id: Optional[str]):
        super().__init__(f"Integration not found: {integration_id}")
        self.integration_id = integration_id


# ============================================================================
# INTEGRATION ERRORS
# ============================================================================

class IntegrationError(BonfireException):
    """Base class for connectivity-check errors"""
    pass


class ConfigurationMissingError(IntegrationError):
    """
    Integration config lacks the fields its check needs.
    Should NOT be retried - fix the integration config.
    """

    def __init__(self, integration_type: str, fields: Iterable[str]):
        self.fields = list(fields)
        super().__init__(
            f"{integration_type} integration is missing required fields: "
            f"{', '.join(self.fields)}",
            retry_allowed=False,
        )
        self.integration_type = integration_type


class TransportError(IntegrationError):
    """
    Network error, timeout or non-success response from the remote service.
    Should be retried.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, retry_allowed=True)
        self.status_code = status_code
