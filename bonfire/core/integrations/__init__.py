"""
Integrations: typed connector configs and their connectivity checks.
"""

from .models import (
    Integration,
    IntegrationConfig,
    IntegrationPreset,
    PRESET_INTEGRATIONS,
    parse_integration_config,
)
from .tester import IntegrationTester, IntegrationCheck, register_check

__all__ = [
    "Integration",
    "IntegrationConfig",
    "IntegrationPreset",
    "PRESET_INTEGRATIONS",
    "parse_integration_config",
    "IntegrationTester",
    "IntegrationCheck",
    "register_check",
]
