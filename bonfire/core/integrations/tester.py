"""
Integration Tester

Runs a live connectivity check for a stored integration and records the
outcome in its ``status``. One ``IntegrationCheck`` subclass per integration
kind, selected from a registry by the config's ``type`` tag.

Every failure mode (missing config, unsendable request, network error, timeout, non-2xx
response) is reported as ``False``; the cause is only logged.

Example:
    async with httpx.AsyncClient(timeout=10) as client:
        tester = IntegrationTester(integrations, client=client)
        ok = await tester.test(integration.id)
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, List, Optional, Type

import httpx

from ..exceptions import (
    ConfigurationMissingError,
    IntegrationError,
    IntegrationNotFoundError,
    TransportError,
)
from ..logging_config import log_context
from .models import (
    CustomAPIConfig,
    DatabaseConfig,
    GitHubConfig,
    Integration,
    JiraConfig,
    MCPConfig,
    SlackConfig,
)

if TYPE_CHECKING:
    from ..store import Repository

logger = logging.getLogger(__name__)

USER_AGENT = "BonFire"
SLACK_TEST_MESSAGE = {"text": "BonFire connection test"}
SLACK_AUTH_TEST_URL = "https://slack.com/api/auth.test"
GITHUB_USER_URL = "https://api.github.com/user"

MCP_PROVIDER_ENDPOINTS = {
    "anthropic": "https://api.anthropic.com/v1/models",
    "openai": "https://api.openai.com/v1/models",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/models",
}


# =============================================================================
# Checks
# =============================================================================


class IntegrationCheck(ABC):
    """
    Connectivity check for one integration kind.

    ``run`` raises ConfigurationMissingError before any request when
    required fields are absent, and TransportError for a failed request.
    """

    integration_type: str = ""

    @abstractmethod
    async def run(self, config, client: httpx.AsyncClient) -> bool:
        ...

    @staticmethod
    def require(integration_type: str, **fields) -> None:
        missing = [name for name, value in fields.items() if not value]
        if missing:
            raise ConfigurationMissingError(integration_type, missing)

    @staticmethod
    async def send(client: httpx.AsyncClient, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await client.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        except (ValueError, TypeError) as e:
            # Raised while building the request, e.g. a non-ASCII header value
            raise TransportError(f"{method} {url} could not be sent: {e}") from e

        if not response.is_success:
            raise TransportError(
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
            )
        return response


_CHECKS: Dict[str, IntegrationCheck] = {}


def register_check(cls: Type[IntegrationCheck]) -> Type[IntegrationCheck]:
    """Class decorator: add the check to the registry under its integration_type."""
    _CHECKS[cls.integration_type] = cls()
    return cls


def get_check(integration_type: str) -> Optional[IntegrationCheck]:
    return _CHECKS.get(integration_type)


def list_check_types() -> List[str]:
    return sorted(_CHECKS)


@register_check
class SlackCheck(IntegrationCheck):
    """Post a test message to the webhook, or call auth.test with the bot token."""

    integration_type = "slack"

    async def run(self, config: SlackConfig, client: httpx.AsyncClient) -> bool:
        if not config.webhook_url and not config.token:
            raise ConfigurationMissingError("slack", ["webhook_url or token"])

        if config.webhook_url:
            await self.send(client, "POST", config.webhook_url, json=SLACK_TEST_MESSAGE)
            return True

        response = await self.send(
            client,
            "POST",
            SLACK_AUTH_TEST_URL,
            headers={"Authorization": f"Bearer {config.token}"},
        )
        # Slack reports auth failures with HTTP 200 and ok=false
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(f"Slack auth.test returned invalid JSON: {e}") from e
        return isinstance(body, dict) and body.get("ok") is True


@register_check
class JiraCheck(IntegrationCheck):
    integration_type = "jira"

    async def run(self, config: JiraConfig, client: httpx.AsyncClient) -> bool:
        self.require(
            "jira",
            base_url=config.base_url,
            email=config.email,
            api_token=config.api_token,
        )
        await self.send(
            client,
            "GET",
            f"{config.base_url.rstrip('/')}/rest/api/3/myself",
            auth=(config.email, config.api_token),
            headers={"Content-Type": "application/json"},
        )
        return True


@register_check
class GitHubCheck(IntegrationCheck):
    integration_type = "github"

    async def run(self, config: GitHubConfig, client: httpx.AsyncClient) -> bool:
        self.require("github", token=config.token)
        await self.send(
            client,
            "GET",
            GITHUB_USER_URL,
            headers={
                "Authorization": f"token {config.token}",
                "User-Agent": USER_AGENT,
            },
        )
        return True


@register_check
class DatabaseCheck(IntegrationCheck):
    """Placeholder: only checks that connection details are present, no connection is opened."""

    integration_type = "database"

    async def run(self, config: DatabaseConfig, client: httpx.AsyncClient) -> bool:
        self.require("database", host=config.host, database=config.database)
        return True


@register_check
class MCPCheck(IntegrationCheck):
    """List the provider's models with the configured key."""

    integration_type = "mcp"

    async def run(self, config: MCPConfig, client: httpx.AsyncClient) -> bool:
        self.require("mcp", api_key=config.api_key)

        url = MCP_PROVIDER_ENDPOINTS[config.provider]
        if config.provider == "anthropic":
            kwargs = {"headers": {"x-api-key": config.api_key, "anthropic-version": "2023-06-01"}}
        elif config.provider == "openai":
            kwargs = {"headers": {"Authorization": f"Bearer {config.api_key}"}}
        else:
            kwargs = {"params": {"key": config.api_key}}

        await self.send(client, "GET", url, **kwargs)
        return True


@register_check
class CustomAPICheck(IntegrationCheck):
    integration_type = "custom_api"

    async def run(self, config: CustomAPIConfig, client: httpx.AsyncClient) -> bool:
        self.require("custom_api", base_url=config.base_url)
        await self.send(
            client,
            config.method,
            config.base_url,
            headers=build_custom_api_headers(config),
        )
        return True


def build_custom_api_headers(config: CustomAPIConfig) -> Dict[str, str]:
    """
    Configured headers plus the auth header for bearer / api_key schemes.

    ``basic`` auth is accepted in the config but not applied.
    """
    headers = dict(config.headers)
    auth = config.auth
    if auth is not None and auth.token:
        if auth.type == "bearer":
            headers["Authorization"] = f"Bearer {auth.token}"
        elif auth.type == "api_key":
            headers["X-API-Key"] = auth.token
    return headers


# =============================================================================
# Tester
# =============================================================================


class IntegrationTester:
    """
    Test stored integrations and persist the resulting status.

    Args:
        integrations: Repository holding the integrations
        client: Shared httpx.AsyncClient (a private one is created per call if omitted)
        timeout: Request timeout in seconds for the private client
    """

    def __init__(
        self,
        integrations: "Repository[Integration]",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self.integrations = integrations
        self.client = client
        self.timeout = timeout

    async def test(self, integration_id: str) -> bool:
        """
        Run the connectivity check for an integration.

        Status becomes ``connected`` on success and ``error`` on failure.

        Raises:
            IntegrationNotFoundError: If the id does not resolve
        """
        integration = self.integrations.get(integration_id)
        if integration is None:
            raise IntegrationNotFoundError(integration_id)

        with log_context(integration_id=integration.id):
            if self.client is not None:
                ok = await self._check(integration, self.client)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    ok = await self._check(integration, client)

            integration.status = "connected" if ok else "error"
            self.integrations.put(integration)

            logger.info(
                f"Integration {integration.name} ({integration.type}) test "
                f"{'passed' if ok else 'failed'}"
            )
        return ok

    async def _check(self, integration: Integration, client: httpx.AsyncClient) -> bool:
        check = get_check(integration.type)
        if check is None:
            logger.warning(f"No connectivity check for integration type '{integration.type}'")
            return False

        try:
            return await check.run(integration.config, client)
        except ConfigurationMissingError as e:
            logger.warning(f"Integration {integration.id} not tested: {e}")
            return False
        except IntegrationError as e:
            logger.warning(f"Integration {integration.id} unreachable: {e}")
            return False
