"""
FastAPI main application
REST API endpoints for BonFire workflows and integrations
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .. import __version__
from ..config import Settings, get_settings
from ..core.engine import WorkflowExecutor
from ..core.exceptions import NotFoundError
from ..core.integrations.models import Integration, IntegrationPreset, PRESET_INTEGRATIONS
from ..core.integrations.tester import IntegrationTester
from ..core.logging_config import setup_logging, set_request_id, clear_request_id
from ..core.manager import WorkflowManager
from ..core.nodes import NodeSpec, WorkflowNode
from ..core.store import build_repositories
from ..core.workflow import Workflow
from .schemas import (
    ConnectionCreate,
    ExecutionReport,
    IntegrationCreate,
    IntegrationTestResponse,
    SuccessResponse,
    WorkflowCreate,
    WorkflowUpdate,
)

# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

settings = get_settings()

setup_logging(
    level=settings.log_level,
    json_logs=settings.json_logs,
    log_file=settings.log_file,
)

logger = logging.getLogger(__name__)

# ============================================================================
# FASTAPI APP CONFIGURATION
# ============================================================================

app = FastAPI(
    title="BonFire API",
    description="""
# BonFire Workflow API

Build automations as ordered lists of nodes, attach integrations, test
connectivity and run workflows.

## Execution model

Nodes run in the order they were added. `connections` are kept for the
canvas but do not change execution order. The run stops at the first
failing node and the report lists every attempted node.
    """,
    version=__version__,
    openapi_tags=[
        {"name": "health", "description": "Health checks"},
        {"name": "workflows", "description": "Workflow CRUD and graph editing"},
        {"name": "execution", "description": "Run a workflow and get its node trace"},
        {"name": "integrations", "description": "Integration CRUD and connectivity tests"},
    ]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# DEPENDENCIES
# ============================================================================

@dataclass
class Services:
    """Components shared by all requests"""
    manager: WorkflowManager
    executor: WorkflowExecutor
    tester: IntegrationTester


def build_services(config: Settings) -> Services:
    workflows, integrations = build_repositories(config)
    return Services(
        manager=WorkflowManager(workflows, integrations),
        executor=WorkflowExecutor(workflows),
        tester=IntegrationTester(integrations, timeout=config.integration_timeout),
    )


_services: Optional[Services] = None


def get_services() -> Services:
    """Return the process-wide Services, built on first use."""
    global _services
    if _services is None:
        _services = build_services(settings)
    return _services


def get_manager(services: Services = Depends(get_services)) -> WorkflowManager:
    return services.manager


def get_executor(services: Services = Depends(get_services)) -> WorkflowExecutor:
    return services.executor


def get_tester(services: Services = Depends(get_services)) -> IntegrationTester:
    return services.tester


# ============================================================================
# MIDDLEWARE - Request ID Tracking
# ============================================================================

@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """
    Tag every request with an id for log correlation.

    Uses the incoming X-Request-ID header if present and echoes it back.
    """
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    set_request_id(request_id)

    logger.info(
        f"{request.method} {request.url.path}",
        extra={
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        }
    )

    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(f"Response {response.status_code}", extra={"status_code": response.status_code})
        return response

    except Exception as e:
        logger.exception("Unhandled exception in request", extra={"error": str(e)})
        raise

    finally:
        clear_request_id()


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "status_code": exc.status_code}
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"error": exc.message, "status_code": 404}
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request, exc: ValidationError):
    """A merged update or node that fails model validation is a client error"""
    details = [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={"error": "Validation failed", "status_code": 422, "details": details}
    )


# ============================================================================
# ROOT & HEALTH
# ============================================================================

@app.get("/", tags=["health"], summary="API root")
def root():
    return {
        "name": "BonFire API",
        "version": __version__,
        "status": "healthy",
        "docs": "/docs",
    }


@app.get("/health", tags=["health"], summary="Health check")
def health_check():
    return {"status": "healthy", "service": "BonFire API", "version": __version__}


# ============================================================================
# WORKFLOWS
# ============================================================================

@app.post("/workflows", response_model=Workflow, status_code=201, tags=["workflows"])
def create_workflow(payload: WorkflowCreate, manager: WorkflowManager = Depends(get_manager)):
    """Create an empty workflow"""
    return manager.create_workflow(payload.name, payload.description)


@app.get("/workflows", response_model=List[Workflow], tags=["workflows"])
def list_workflows(manager: WorkflowManager = Depends(get_manager)):
    return manager.list_workflows()


@app.get("/workflows/{workflow_id}", response_model=Workflow, tags=["workflows"])
def get_workflow(workflow_id: str, manager: WorkflowManager = Depends(get_manager)):
    workflow = manager.get_workflow(workflow_id)
    if workflow is None:
        raise HTTPException(status_code=404, detail=f"Workflow not found: {workflow_id}")
    return workflow


@app.put("/workflows/{workflow_id}", response_model=Workflow, tags=["workflows"])
def update_workflow(
    workflow_id: str,
    payload: WorkflowUpdate,
    manager: WorkflowManager = Depends(get_manager),
):
    """Update a workflow. Only provided fields are applied; the id never changes."""
    workflow = manager.update_workflow(workflow_id, payload.model_dump(exclude_unset=True))
    if workflow is None:
        raise HTTPException(status_code=404, detail=f"Workflow not found: {workflow_id}")
    return workflow


@app.delete("/workflows/{workflow_id}", response_model=SuccessResponse, tags=["workflows"])
def delete_workflow(workflow_id: str, manager: WorkflowManager = Depends(get_manager)):
    if not manager.delete_workflow(workflow_id):
        raise HTTPException(status_code=404, detail=f"Workflow not found: {workflow_id}")
    return {"success": True}


@app.post("/workflows/{workflow_id}/nodes", response_model=WorkflowNode, status_code=201, tags=["workflows"])
def add_node(workflow_id: str, node: NodeSpec, manager: WorkflowManager = Depends(get_manager)):
    """Append a node; its id is generated"""
    return manager.add_node(workflow_id, node)


@app.post("/workflows/{workflow_id}/connections", response_model=SuccessResponse, tags=["workflows"])
def connect_nodes(
    workflow_id: str,
    payload: ConnectionCreate,
    manager: WorkflowManager = Depends(get_manager),
):
    """Connect source → target. Repeating a connection is a no-op."""
    manager.connect_nodes(workflow_id, payload.source_node_id, payload.target_node_id)
    return {"success": True}


@app.post(
    "/workflows/{workflow_id}/integrations/{integration_id}",
    response_model=Workflow,
    tags=["workflows"],
)
def attach_integration(
    workflow_id: str,
    integration_id: str,
    manager: WorkflowManager = Depends(get_manager),
):
    """Make a stored integration available to this workflow's integration nodes"""
    return manager.attach_integration(workflow_id, integration_id)


# ============================================================================
# EXECUTION
# ============================================================================

@app.post("/workflows/{workflow_id}/execute", response_model=ExecutionReport, tags=["execution"])
async def execute_workflow(workflow_id: str, executor: WorkflowExecutor = Depends(get_executor)):
    """Run the workflow's nodes in order, stopping at the first failure"""
    return await executor.execute_workflow(workflow_id)


# ============================================================================
# INTEGRATIONS
# ============================================================================

@app.get("/integrations/presets", response_model=Dict[str, IntegrationPreset], tags=["integrations"])
def list_presets():
    return PRESET_INTEGRATIONS


@app.post("/integrations", response_model=Integration, status_code=201, tags=["integrations"])
def create_integration(payload: IntegrationCreate, manager: WorkflowManager = Depends(get_manager)):
    return manager.create_integration(payload.name, payload.config, payload.credentials)


@app.get("/integrations", response_model=List[Integration], tags=["integrations"])
def list_integrations(manager: WorkflowManager = Depends(get_manager)):
    return manager.list_integrations()


@app.get("/integrations/{integration_id}", response_model=Integration, tags=["integrations"])
def get_integration(integration_id: str, manager: WorkflowManager = Depends(get_manager)):
    integration = manager.get_integration(integration_id)
    if integration is None:
        raise HTTPException(status_code=404, detail=f"Integration not found: {integration_id}")
    return integration


@app.post("/integrations/{integration_id}/test", response_model=IntegrationTestResponse, tags=["integrations"])
async def run_integration_test(
    integration_id: str,
    tester: IntegrationTester = Depends(get_tester),
):
    """Run the live connectivity check; the integration's status is updated"""
    success = await tester.test(integration_id)
    return {"success": success, "status": "connected" if success else "error"}


@app.delete("/integrations/{integration_id}", response_model=SuccessResponse, tags=["integrations"])
def delete_integration(integration_id: str, manager: WorkflowManager = Depends(get_manager)):
    if not manager.delete_integration(integration_id):
        raise HTTPException(status_code=404, detail=f"Integration not found: {integration_id}")
    return {"success": True}
