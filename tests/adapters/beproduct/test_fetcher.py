from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from plmsync.adapters.beproduct import (
    BeProductAPIError,
    BeProductMasterdataSource,
    BeProductPlanSource,
)
from plmsync.adapters.beproduct.schema import MasterdataResponse
from plmsync.config.beproduct import BeProductConfig
from plmsync.domain.ports import MasterdataSource, PlanSource, SourceError
from tests.helpers.http import TEST_RESILIENCE
from tests.helpers.payloads import load_fixture, load_fixture_list

if TYPE_CHECKING:
    from collections.abc import Sequence

CONFIG = BeProductConfig(
    base_url="https://api.example.test",
    company="acme",
    access_token="secret",
    resilience=TEST_RESILIENCE,
)


class StubLookupClient:
    def __init__(
        self,
        *,
        plan: dict[str, object] | None = None,
        folders: Sequence[dict[str, object]] | BeProductAPIError = (),
        masterdata: dict[str, object] | None = None,
    ) -> None:
        self.plan = plan
        self.folders = folders
        self.masterdata = masterdata

    def fetch_plan(self, plan_id: str) -> dict[str, object]:
        if self.plan is None:
            raise BeProductAPIError(f"BeProduct POST Tracking/Plan/{plan_id} failed")
        return self.plan

    def list_folders(self) -> list[dict[str, object]]:
        if isinstance(self.folders, BeProductAPIError):
            raise self.folders
        return list(self.folders)

    def fetch_masterdata(self, field_id: str) -> MasterdataResponse:
        return MasterdataResponse.model_validate(self.masterdata or {"fieldId": field_id})


def test_sources_satisfy_ports() -> None:
    client = StubLookupClient()

    assert isinstance(BeProductPlanSource(config=CONFIG, client=client), PlanSource)
    assert isinstance(BeProductMasterdataSource(config=CONFIG, client=client), MasterdataSource)


def test_fetch_plan_returns_snapshot() -> None:
    source = BeProductPlanSource(
        config=CONFIG, client=StubLookupClient(plan=load_fixture("plan.json"))
    )

    plan = source.fetch_plan("plan-1")

    assert plan.plan_id == "plan-1"
    assert set(plan.templates) == {"tmpl-1", "tmpl-2"}


def test_fetch_plan_failure_is_a_source_error() -> None:
    source = BeProductPlanSource(config=CONFIG, client=StubLookupClient())

    with pytest.raises(SourceError):
        source.fetch_plan("plan-1")


def test_fetch_folder_matches_by_id() -> None:
    source = BeProductPlanSource(
        config=CONFIG, client=StubLookupClient(folders=load_fixture_list("folders.json"))
    )

    folder = source.fetch_folder("tf-1")

    assert folder is not None
    assert folder.name == "GREYSON MENS"
    assert source.fetch_folder("tf-404") is None


def test_fetch_folder_failure_returns_none() -> None:
    source = BeProductPlanSource(
        config=CONFIG, client=StubLookupClient(folders=BeProductAPIError("down"))
    )

    assert source.fetch_folder("tf-1") is None


def test_masterdata_source_returns_choices() -> None:
    source = BeProductMasterdataSource(
        config=CONFIG,
        client=StubLookupClient(masterdata=load_fixture("masterdata_product_type.json")),
    )

    choices = source("product_type")

    assert [choice.value for choice in choices] == ["Tops", "Bottoms", "Outerwear", "Orphan"]
