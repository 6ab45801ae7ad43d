"""
Pydantic schemas for API request/response validation
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.integrations.models import Integration, IntegrationConfig
from ..core.nodes import WorkflowNode


# ============================================================================
# WORKFLOW SCHEMAS
# ============================================================================

class WorkflowCreate(BaseModel):
    """Schema for creating a new workflow"""
    name: str = Field(..., min_length=1, max_length=255, description="Workflow name")
    description: Optional[str] = Field(None, description="Workflow description")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Notify",
                "description": "Post deploy notifications to Slack",
            }
        }


class WorkflowUpdate(BaseModel):
    """Schema for updating a workflow. Only provided fields are applied."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    active: Optional[bool] = None
    nodes: Optional[List[WorkflowNode]] = None
    integrations: Optional[List[Integration]] = None


class ConnectionCreate(BaseModel):
    """Schema for connecting two nodes"""
    source_node_id: str = Field(..., min_length=1)
    target_node_id: str = Field(..., min_length=1)


# ============================================================================
# INTEGRATION SCHEMAS
# ============================================================================

class IntegrationCreate(BaseModel):
    """Schema for creating an integration. ``config.type`` selects the kind."""
    name: str = Field(..., min_length=1, max_length=255)
    config: IntegrationConfig
    credentials: Optional[Dict[str, str]] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Team Slack",
                "config": {
                    "type": "slack",
                    "webhook_url": "https://hooks.slack.com/services/T000/B000/XXXX",
                    "channel": "#deploys",
                },
            }
        }


class IntegrationTestResponse(BaseModel):
    """Connectivity test outcome"""
    success: bool
    status: str


# ============================================================================
# EXECUTION SCHEMAS
# ============================================================================

class NodeResult(BaseModel):
    """Outcome of one node"""
    node_id: str
    success: bool
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class ExecutionReport(BaseModel):
    """Schema for execution response"""
    workflow_id: str
    executed_at: str
    status: str
    failed_at_node: Optional[str] = None
    results: List[NodeResult]


# ============================================================================
# GENERIC SCHEMAS
# ============================================================================

class SuccessResponse(BaseModel):
    """Generic acknowledgement"""
    success: bool = True
