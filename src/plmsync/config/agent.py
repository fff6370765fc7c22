"""Configuration for the external dependency-extraction agent."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import NO_RETRY_POLICY, ResilienceConfig

BEPRODUCT_APP_URL = "https://hk.beproduct.com"
AGENT_TIMEOUT_SECONDS = 5.0
AGENT_READ_TIMEOUT_SECONDS = 0.5


@dataclass(frozen=True)
class DependencyAgentConfig:
    """Where dependency requests are sent and where results are delivered back."""

    webhook_url: str
    callback_url: str
    tracking_base_url: str
    company: str
    resilience: ResilienceConfig

    def tracking_url(self, *, folder_id: str, plan_id: str) -> str:
        return (
            f"{self.tracking_base_url.rstrip('/')}/{self.company}/Tracking#/Tracking/"
            f"{folder_id}/Style/plan/{plan_id}/setup?useFavorite=true"
        )


def default_agent_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="dependency-agent",
        timeout_seconds=AGENT_TIMEOUT_SECONDS,
        retry=NO_RETRY_POLICY,
        cache=None,
    )


def get_dependency_agent_config(
    *, resilience: ResilienceConfig | None = None
) -> DependencyAgentConfig:
    values = require_env_vars(
        ("DEPENDENCY_AGENT_WEBHOOK_URL", "DEPENDENCY_CALLBACK_URL", "BEPRODUCT_COMPANY")
    )
    return DependencyAgentConfig(
        webhook_url=values["DEPENDENCY_AGENT_WEBHOOK_URL"],
        callback_url=values["DEPENDENCY_CALLBACK_URL"],
        tracking_base_url=optional_env_var("BEPRODUCT_APP_URL", BEPRODUCT_APP_URL)
        or BEPRODUCT_APP_URL,
        company=values["BEPRODUCT_COMPANY"],
        resilience=resilience or default_agent_resilience(),
    )
