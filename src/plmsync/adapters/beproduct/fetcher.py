"""BeProduct-backed implementations of the plan and masterdata source ports."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from pydantic import ValidationError

from .client import BeProductAPIError, BeProductClient
from .translator import folder_snapshot, masterdata_choices, plan_snapshot

if TYPE_CHECKING:
    from plmsync.config.beproduct import BeProductConfig
    from plmsync.domain.model import FolderSnapshot, MasterdataChoice, PlanSnapshot

    from .schema import MasterdataResponse

log = getLogger(__name__)


class BeProductLookupClient(Protocol):
    def fetch_plan(self, plan_id: str) -> dict[str, object]: ...

    def list_folders(self) -> list[dict[str, object]]: ...

    def fetch_masterdata(self, field_id: str) -> MasterdataResponse: ...


class BeProductPlanSource:
    """Fetch tracking plans and folders through the BeProduct API."""

    def __init__(
        self,
        *,
        config: BeProductConfig,
        client: BeProductLookupClient | None = None,
    ) -> None:
        self._client = client or BeProductClient(config=config)

    def fetch_plan(self, plan_id: str) -> PlanSnapshot:
        payload = self._client.fetch_plan(plan_id)
        try:
            return plan_snapshot(payload, plan_id=plan_id)
        except ValidationError as exc:
            raise BeProductAPIError(f"Invalid plan payload for {plan_id}: {exc}") from exc

    def fetch_folder(self, folder_id: str) -> FolderSnapshot | None:
        try:
            folders = self._client.list_folders()
        except BeProductAPIError as exc:
            log.warning("BeProduct folder lookup failed for %s: %s", folder_id, exc)
            return None
        for raw in folders:
            snapshot = folder_snapshot(raw)
            if snapshot is not None and snapshot.folder_id == folder_id:
                return snapshot
        log.info("Folder %s not found in BeProduct tracking folders", folder_id)
        return None


class BeProductMasterdataSource:
    """Fetch the choice list of one masterdata field."""

    def __init__(
        self,
        *,
        config: BeProductConfig,
        client: BeProductLookupClient | None = None,
    ) -> None:
        self._client = client or BeProductClient(config=config)

    def __call__(self, field_id: str) -> list[MasterdataChoice]:
        response = self._client.fetch_masterdata(field_id)
        choices = masterdata_choices(response)
        log.info("Fetched %d choices for masterdata field %s", len(choices), field_id)
        return choices
