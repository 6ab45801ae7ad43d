"""
Pytest fixtures for BonFire tests

This module provides shared fixtures for all tests:
- Repository fixtures (in-memory and SQLite-backed)
- Manager / executor wiring
- Sample workflows and integrations
"""

import pytest

from bonfire.core.integrations.models import Integration, SlackConfig
from bonfire.core.manager import WorkflowManager
from bonfire.core.engine import WorkflowExecutor
from bonfire.core.store import InMemoryRepository, SqlRepository
from bonfire.database import create_session_factory
from bonfire.models import IntegrationRecord, WorkflowRecord
from bonfire.core.workflow import Workflow


# ============================================================================
# STORE FIXTURES
# ============================================================================

@pytest.fixture
def workflow_repo():
    return InMemoryRepository()


@pytest.fixture
def integration_repo():
    return InMemoryRepository()


@pytest.fixture(scope="function")
def session_factory():
    """
    In-memory SQLite database for testing.
    Each test gets a fresh database that's torn down after the test.
    """
    factory = create_session_factory("sqlite:///:memory:")
    try:
        yield factory
    finally:
        factory.kw["bind"].dispose()


@pytest.fixture
def sql_workflow_repo(session_factory):
    return SqlRepository(session_factory, WorkflowRecord, Workflow)


@pytest.fixture
def sql_integration_repo(session_factory):
    return SqlRepository(session_factory, IntegrationRecord, Integration)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def manager(workflow_repo, integration_repo):
    return WorkflowManager(workflow_repo, integration_repo)


@pytest.fixture
def executor(workflow_repo):
    return WorkflowExecutor(workflow_repo)


# ============================================================================
# WORKFLOW FIXTURES
# ============================================================================

@pytest.fixture
def notify_workflow(manager):
    """
    Trigger → Action workflow, connected:
    Start → Send
    """
    workflow = manager.create_workflow("Notify", "desc")
    trigger = manager.add_node(workflow.id, {
        "type": "trigger",
        "name": "Start",
        "config": {},
        "position": {"x": 0, "y": 0, "z": 0},
        "connections": [],
    })
    action = manager.add_node(workflow.id, {
        "type": "action",
        "name": "Send",
        "config": {"msg": "hi"},
        "position": {"x": 1, "y": 0, "z": 0},
        "connections": [],
    })
    manager.connect_nodes(workflow.id, trigger.id, action.id)
    return manager.get_workflow(workflow.id), trigger, action


@pytest.fixture
def slack_integration(manager):
    return manager.create_integration(
        "Team Slack",
        {"type": "slack", "webhook_url": "https://hooks.slack.com/services/T0/B0/XYZ"},
    )


@pytest.fixture
def empty_slack_integration(manager):
    return manager.create_integration("Empty Slack", SlackConfig())


# ============================================================================
# UTILITY FIXTURES
# ============================================================================

@pytest.fixture
def capture_logs(caplog):
    """
    Fixture to capture logs for testing
    """
    import logging
    caplog.set_level(logging.DEBUG)
    return caplog
