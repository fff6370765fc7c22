from __future__ import annotations

from plmsync.adapters.beproduct.schema import MasterdataResponse
from plmsync.adapters.beproduct.translator import masterdata_choices
from plmsync.domain.data_integration import config_rows, sync_masterdata
from plmsync.domain.model import MasterdataChoice
from tests.helpers.fakes import FIXED_NOW, FakeMasterdataSource, InMemoryStore, fixed_clock
from tests.helpers.payloads import load_fixture


def _product_types() -> list[MasterdataChoice]:
    response = MasterdataResponse.model_validate(load_fixture("masterdata_product_type.json"))
    return masterdata_choices(response)


def test_config_rows_key_by_code_then_id() -> None:
    rows = config_rows("product_type", _product_types(), synced_at=FIXED_NOW)

    assert [(row["key"], row["value"], row["is_active"]) for row in rows] == [
        ("TOP", "Tops", True),
        ("BTM", "Bottoms", False),
        ("c-3", "Outerwear", True),
    ]
    assert rows[0]["allowed_for"] == ["MENS", "WOMENS"]
    assert rows[1]["allowed_for"] is None
    assert rows[0]["last_synced_at"] == FIXED_NOW


def test_config_rows_last_duplicate_wins() -> None:
    rows = config_rows(
        "season",
        [
            MasterdataChoice(id="1", code="SP", value="Spring"),
            MasterdataChoice(id="2", code="SP", value="Spring 2"),
        ],
        synced_at=FIXED_NOW,
    )

    assert [row["value"] for row in rows] == ["Spring 2"]


def test_sync_masterdata_upserts_into_app_config(memory_store: InMemoryStore) -> None:
    source = FakeMasterdataSource(choices={"product_type": _product_types()})

    result = sync_masterdata(
        ["product_type"], source=source, store=memory_store, clock=fixed_clock
    )

    assert result.ok
    assert result.synced == 3
    assert {row["key"] for row in memory_store.table("app_config")} == {"TOP", "BTM", "c-3"}


def test_sync_masterdata_is_idempotent(memory_store: InMemoryStore) -> None:
    source = FakeMasterdataSource(choices={"product_type": _product_types()})

    sync_masterdata(["product_type"], source=source, store=memory_store)
    sync_masterdata(["product_type"], source=source, store=memory_store)

    assert len(memory_store.table("app_config")) == 3


def test_failing_field_does_not_stop_the_rest(memory_store: InMemoryStore) -> None:
    source = FakeMasterdataSource(choices={"product_type": _product_types()})

    result = sync_masterdata(["missing", "product_type"], source=source, store=memory_store)

    assert not result.ok
    assert result.fields["missing"].errors == ["Unknown masterdata field missing"]
    assert result.fields["product_type"].synced == 3


def test_failing_upsert_is_reported_per_field(memory_store: InMemoryStore) -> None:
    memory_store.fail("upsert", "app_config")
    source = FakeMasterdataSource(choices={"product_type": _product_types()})

    result = sync_masterdata(["product_type"], source=source, store=memory_store)

    assert result.fields["product_type"].errors[0].startswith("Batch upsert failed")


def test_empty_choice_list_syncs_nothing(memory_store: InMemoryStore) -> None:
    result = sync_masterdata(
        ["gender"], source=FakeMasterdataSource(choices={"gender": []}), store=memory_store
    )

    assert result.ok
    assert result.synced == 0

