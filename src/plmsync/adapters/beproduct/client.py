"""BeProduct public API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import ValidationError

from plmsync.adapters.http_resilience import ResilientClient
from plmsync.domain.ports import SourceError

from .schema import MasterdataResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from plmsync.config.beproduct import BeProductConfig
    from plmsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

type TokenProvider = Callable[[], str | None]


class BeProductAPIError(SourceError):
    """Raised when the BeProduct API fails or returns an unexpected response."""


class BeProductClient:
    """Low-level HTTP client for the BeProduct API."""

    def __init__(
        self,
        *,
        config: BeProductConfig,
        token_provider: TokenProvider | None = None,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._token_provider = token_provider or (lambda: config.access_token)
        self._client_factory = client_factory or ResilientClient

    def fetch_plan(self, plan_id: str) -> dict[str, object]:
        """Return the raw plan document including its timeline schema."""

        return asyncio.run(self._fetch_plan_async(plan_id))

    def list_folders(self) -> list[dict[str, object]]:
        return asyncio.run(self._list_folders_async())

    def fetch_masterdata(self, field_id: str) -> MasterdataResponse:
        return asyncio.run(self._fetch_masterdata_async(field_id))

    async def _fetch_plan_async(self, plan_id: str) -> dict[str, object]:
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client, method="POST", path=f"Tracking/Plan/{plan_id}", json={}
            )
        if not isinstance(payload, dict):
            raise BeProductAPIError(f"Unexpected plan payload for {plan_id}")
        return cast(dict[str, object], payload)

    async def _list_folders_async(self) -> list[dict[str, object]]:
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client, method="GET", path="Tracking/Folders"
            )
        if not isinstance(payload, list):
            raise BeProductAPIError("Unexpected tracking folders payload")
        items = cast(list[object], payload)
        return [cast(dict[str, object], item) for item in items if isinstance(item, dict)]

    async def _fetch_masterdata_async(self, field_id: str) -> MasterdataResponse:
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(
                client=client, method="GET", path=f"MasterData/{field_id}"
            )
        if not isinstance(payload, dict):
            raise BeProductAPIError(f"Unexpected masterdata payload for {field_id}")
        try:
            return MasterdataResponse.model_validate(payload)
        except ValidationError as exc:
            raise BeProductAPIError(f"Invalid masterdata payload for {field_id}: {exc}") from exc

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        method: str,
        path: str,
        json: object | None = None,
    ) -> object:
        token = self._token_provider()
        if not token:
            raise BeProductAPIError("Missing BeProduct access token")
        headers = {"Authorization": f"Bearer {token}"}
        url = self._config.api_url(path)
        try:
            if json is None:
                response = await client.request(method, url, headers=headers)
            else:
                response = await client.request(method, url, headers=headers, json=json)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            log.warning("BeProduct %s %s returned %s", method, path, exc.response.status_code)
            raise BeProductAPIError(
                f"BeProduct {method} {path} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BeProductAPIError(f"BeProduct {method} {path} failed: {exc}") from exc
        except ValueError as exc:
            raise BeProductAPIError(f"BeProduct {method} {path} returned invalid JSON") from exc
