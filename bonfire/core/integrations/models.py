"""
Integration Models

An Integration is a named connector configuration (Slack, Jira, GitHub,
database, MCP provider, custom HTTP API). Its ``config`` is a tagged union:
the variant's ``type`` literal is the tag, so an integration always carries
exactly the settings of its own kind.

Example:
    >>> integration = Integration(
    ...     id="1700000000000-abc123def",
    ...     name="Team Slack",
    ...     config={"type": "slack", "webhook_url": "https://hooks.slack.com/..."},
    ... )
    >>> integration.type
    'slack'
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, computed_field


IntegrationStatus = Literal["connected", "disconnected", "error"]


class SlackConfig(BaseModel):
    type: Literal["slack"] = "slack"
    webhook_url: Optional[str] = None
    token: Optional[str] = None
    channel: Optional[str] = None


class JiraConfig(BaseModel):
    type: Literal["jira"] = "jira"
    base_url: Optional[str] = None
    email: Optional[str] = None
    api_token: Optional[str] = None
    project: Optional[str] = None


class GitHubConfig(BaseModel):
    type: Literal["github"] = "github"
    token: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None


class DatabaseConfig(BaseModel):
    type: Literal["database"] = "database"
    engine: Literal["postgres", "mysql", "mongodb", "redis"] = "postgres"
    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class MCPConfig(BaseModel):
    type: Literal["mcp"] = "mcp"
    provider: Literal["anthropic", "openai", "gemini"] = "anthropic"
    api_key: Optional[str] = None
    model: Optional[str] = None


class CustomAPIAuth(BaseModel):
    """Auth block for custom APIs. Only bearer and api_key are applied to requests."""
    type: Literal["bearer", "basic", "api_key"]
    token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class CustomAPIConfig(BaseModel):
    type: Literal["custom_api"] = "custom_api"
    base_url: Optional[str] = None
    method: Literal["GET", "POST", "PUT", "DELETE", "PATCH"] = "GET"
    headers: Dict[str, str] = Field(default_factory=dict)
    auth: Optional[CustomAPIAuth] = None


IntegrationConfig = Annotated[
    Union[
        SlackConfig,
        JiraConfig,
        GitHubConfig,
        DatabaseConfig,
        MCPConfig,
        CustomAPIConfig,
    ],
    Field(discriminator="type"),
]

INTEGRATION_TYPES = ("slack", "jira", "github", "database", "mcp", "custom_api")

_config_adapter = TypeAdapter(IntegrationConfig)


def parse_integration_config(data: Dict[str, Any]) -> IntegrationConfig:
    """
    Build the config variant selected by ``data["type"]``.

    Raises:
        pydantic.ValidationError: If the tag is unknown or a field is invalid
    """
    return _config_adapter.validate_python(data)


class Integration(BaseModel):
    """A typed connector configuration, testable for connectivity."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    config: IntegrationConfig
    status: IntegrationStatus = "disconnected"
    # Stored as given; there is no encryption at rest
    credentials: Optional[Dict[str, str]] = None

    @computed_field
    @property
    def type(self) -> str:
        return self.config.type


class IntegrationPreset(BaseModel):
    """Quick-setup template shown to users when creating an integration."""
    name: str
    type: str
    description: str
    required_fields: List[str]


PRESET_INTEGRATIONS: Dict[str, IntegrationPreset] = {
    "slack": IntegrationPreset(
        name="Slack",
        type="slack",
        description="Send messages and notifications to Slack channels",
        required_fields=["webhook_url", "channel"],
    ),
    "jira": IntegrationPreset(
        name="Jira",
        type="jira",
        description="Create and manage Jira issues",
        required_fields=["base_url", "email", "api_token", "project"],
    ),
    "github": IntegrationPreset(
        name="GitHub",
        type="github",
        description="Interact with GitHub repositories",
        required_fields=["token"],
    ),
    "postgres": IntegrationPreset(
        name="PostgreSQL",
        type="database",
        description="Connect to PostgreSQL database",
        required_fields=["host", "port", "database", "username", "password"],
    ),
    "anthropic": IntegrationPreset(
        name="Anthropic Claude (MCP)",
        type="mcp",
        description="AI-powered automation with Claude",
        required_fields=["api_key"],
    ),
}
