"""BeProduct API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import (
    SINGLE_RETRY_POLICY,
    CacheConfig,
    RateLimit,
    ResilienceConfig,
)

BEPRODUCT_BASE_URL = "https://developers.beproduct.com"
BEPRODUCT_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True)
class BeProductConfig:
    """Holds BeProduct public API configuration values.

    The bearer token is acquired outside of plmsync; it is handed in through the
    environment or a token provider.
    """

    base_url: str
    company: str
    access_token: str | None
    resilience: ResilienceConfig

    def api_url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/api/{self.company}/{path.lstrip('/')}"


def default_beproduct_resilience(base_url: str = BEPRODUCT_BASE_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="beproduct",
        base_url=base_url,
        timeout_seconds=BEPRODUCT_TIMEOUT_SECONDS,
        retry=SINGLE_RETRY_POLICY,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        cache=CacheConfig(backend="memory", default_ttl_seconds=300.0),
        default_headers={"Accept": "application/json"},
    )


def get_beproduct_config(*, resilience: ResilienceConfig | None = None) -> BeProductConfig:
    values = require_env_vars(("BEPRODUCT_COMPANY",))
    base_url = optional_env_var("BEPRODUCT_BASE_URL", BEPRODUCT_BASE_URL) or BEPRODUCT_BASE_URL
    return BeProductConfig(
        base_url=base_url,
        company=values["BEPRODUCT_COMPANY"],
        access_token=optional_env_var("BEPRODUCT_ACCESS_TOKEN"),
        resilience=resilience or default_beproduct_resilience(base_url),
    )
