"""HTTP client that hands dependency requests to the extraction agent."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from plmsync.adapters.http_resilience import ResilientClient
from plmsync.config.agent import AGENT_READ_TIMEOUT_SECONDS

if TYPE_CHECKING:
    from collections.abc import Callable

    from plmsync.config.agent import DependencyAgentConfig
    from plmsync.config.http_resilience import ResilienceConfig
    from plmsync.domain.ports import DependencyRequest

log = getLogger(__name__)


class DependencyAgentClient:
    """Post ``{url, callback_url, plan_id}`` to the agent's webhook and move on.

    The agent answers through the callback URL, so the reply is not awaited:
    reads time out almost immediately and the status code is only logged. The
    request counts as handed over once it was sent. Only a failure to send it
    returns ``False``.
    """

    def __init__(
        self,
        *,
        config: DependencyAgentConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        read_timeout: float = AGENT_READ_TIMEOUT_SECONDS,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._timeout = httpx.Timeout(config.resilience.timeout_seconds, read=read_timeout)

    def __call__(self, request: DependencyRequest) -> bool:
        body = {
            "url": self._config.tracking_url(folder_id=request.folder_id, plan_id=request.plan_id),
            "callback_url": self._config.callback_url,
            "plan_id": request.plan_id,
        }
        log.info("Requesting dependencies for plan %s", request.plan_id)
        try:
            asyncio.run(self._post(body, request.plan_id))
        except httpx.ReadTimeout:
            log.debug("Agent did not answer plan %s before the read timeout", request.plan_id)
        except Exception:
            log.exception("Dependency request for plan %s could not be sent", request.plan_id)
            return False
        return True

    async def _post(self, body: dict[str, str], plan_id: str) -> None:
        async with self._client_factory(self._resilience) as client:
            response = await client.post(
                self._config.webhook_url, json=body, timeout=self._timeout
            )
        if response.is_error:
            log.warning("Agent answered %s for plan %s", response.status_code, plan_id)
