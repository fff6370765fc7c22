from __future__ import annotations

from datetime import date

import pytest

from plmsync.adapters.sqlalchemy import SqlAlchemyStore
from plmsync.adapters.sqlalchemy.store import normalize_rows
from plmsync.domain.column_types import ColumnType
from plmsync.domain.ports import StorageError, StoragePort


def _seed_material(store: SqlAlchemyStore) -> int:
    store.upsert(
        "material",
        [{"beproduct_material_id": "mat-1", "header_number": "M-1", "header_name": "Twill"}],
        ("beproduct_material_id",),
    )
    (row,) = store.fetch("material", {"beproduct_material_id": "mat-1"}, ("id",))
    material_id = row["id"]
    assert isinstance(material_id, int)
    return material_id


def test_store_satisfies_port(sqlite_store: SqlAlchemyStore) -> None:
    assert isinstance(sqlite_store, StoragePort)
    assert sqlite_store.dialect == "sqlite"


def test_normalize_rows_unions_keys() -> None:
    assert normalize_rows([{"a": 1}, {"b": 2}]) == [{"a": 1, "b": None}, {"a": None, "b": 2}]


def test_get_columns_reads_base_tables(sqlite_store: SqlAlchemyStore) -> None:
    columns = sqlite_store.get_columns("material")

    assert {"id", "beproduct_material_id", "header_number", "deleted"} <= columns


def test_add_column_extends_table(sqlite_store: SqlAlchemyStore) -> None:
    sqlite_store.fetch("material", {})

    sqlite_store.add_column("material", "weight_gsm", ColumnType.INTEGER)
    sqlite_store.add_column("material", "care_notes", ColumnType.JSON)
    material_id = _seed_material(sqlite_store)
    sqlite_store.update(
        "material", {"weight_gsm": 240, "care_notes": {"wash": "cold"}}, {"id": material_id}
    )

    (row,) = sqlite_store.fetch("material", {"id": material_id}, ("weight_gsm", "care_notes"))
    assert row == {"weight_gsm": 240, "care_notes": {"wash": "cold"}}


def test_add_existing_column_is_noop(sqlite_store: SqlAlchemyStore) -> None:
    sqlite_store.add_column("material", "header_name", ColumnType.TEXT)

    assert "header_name" in sqlite_store.get_columns("material")


def test_add_column_to_unknown_table_raises_storage_error(sqlite_store: SqlAlchemyStore) -> None:
    with pytest.raises(StorageError):
        sqlite_store.add_column("nope", "x", ColumnType.TEXT)


def test_upsert_updates_only_written_columns(sqlite_store: SqlAlchemyStore) -> None:
    material_id = _seed_material(sqlite_store)

    sqlite_store.upsert(
        "material",
        [{"beproduct_material_id": "mat-1", "header_name": "Stretch Twill"}],
        ("beproduct_material_id",),
    )

    (row,) = sqlite_store.fetch("material", {"beproduct_material_id": "mat-1"})
    assert row["id"] == material_id
    assert row["header_name"] == "Stretch Twill"
    assert row["header_number"] == "M-1"


def test_replacing_upsert_clears_columns_missing_from_the_row(
    sqlite_store: SqlAlchemyStore,
) -> None:
    material_id = _seed_material(sqlite_store)
    sqlite_store.add_column("material_colorway", "pantone_code", ColumnType.TEXT)
    key = ("material_id", "colorway_id")
    sqlite_store.upsert(
        "material_colorway",
        [
            {
                "material_id": material_id,
                "colorway_id": "c1",
                "name": "Black",
                "pantone_code": "19-4005",
            }
        ],
        key,
    )

    sqlite_store.upsert(
        "material_colorway",
        [{"material_id": material_id, "colorway_id": "c1", "code": "BLK"}],
        key,
        replace=True,
    )

    (row,) = sqlite_store.fetch("material_colorway", {"material_id": material_id})
    assert row["code"] == "BLK"
    assert row["name"] is None
    assert row["pantone_code"] is None
    assert row["deleted"] is False
    assert row["created_at"] is not None


def test_upsert_with_only_key_columns_does_nothing_on_conflict(
    sqlite_store: SqlAlchemyStore,
) -> None:
    rows = [{"timeline_id": "tl-1", "assignee_id": "u-1"}]

    sqlite_store.upsert("tracking_timeline_assignment", rows, ("timeline_id", "assignee_id"))
    sqlite_store.upsert("tracking_timeline_assignment", rows, ("timeline_id", "assignee_id"))

    assert len(sqlite_store.fetch("tracking_timeline_assignment", {})) == 1


def test_upsert_child_rows_on_composite_key(sqlite_store: SqlAlchemyStore) -> None:
    material_id = _seed_material(sqlite_store)
    key = ("material_id", "colorway_id")

    sqlite_store.upsert(
        "material_colorway",
        [
            {"material_id": material_id, "colorway_id": "cw-1", "name": "Black"},
            {"material_id": material_id, "colorway_id": "cw-2"},
        ],
        key,
    )
    sqlite_store.upsert(
        "material_colorway",
        [{"material_id": material_id, "colorway_id": "cw-1", "name": "Ink"}],
        key,
    )

    rows = sqlite_store.fetch("material_colorway", {"material_id": material_id})
    assert sorted((row["colorway_id"], row["name"]) for row in rows) == [
        ("cw-1", "Ink"),
        ("cw-2", None),
    ]
    assert all(row["deleted"] is False for row in rows)


def test_fetch_and_delete_filters(sqlite_store: SqlAlchemyStore) -> None:
    sqlite_store.insert(
        "tracking_plan_dependencies",
        [
            {"plan_id": "plan-1", "action_description": "A", "depends_on": None},
            {"plan_id": "plan-1", "action_description": "B", "depends_on": "A"},
            {"plan_id": "plan-1", "action_description": "C", "depends_on": "B"},
            {"plan_id": "plan-2", "action_description": "A"},
        ],
    )

    roots = sqlite_store.fetch("tracking_plan_dependencies", {"depends_on": None})
    picked = sqlite_store.fetch(
        "tracking_plan_dependencies",
        {"plan_id": "plan-1", "action_description": ["B", "C"]},
        ("action_description",),
    )
    removed = sqlite_store.delete(
        "tracking_plan_dependencies", {"plan_id": "plan-1", "action_description": ("A", "B")}
    )

    assert len(roots) == 2
    assert sorted(row["action_description"] for row in picked) == ["B", "C"]
    assert removed == 2
    assert len(sqlite_store.fetch("tracking_plan_dependencies", {})) == 2


def test_update_returns_rowcount(sqlite_store: SqlAlchemyStore) -> None:
    sqlite_store.insert("tracking_folder", [{"id": "tf-1", "name": "GREYSON MENS"}])
    sqlite_store.insert("tracking_plan", [{"id": "plan-1", "folder_id": "tf-1"}])

    changed = sqlite_store.update(
        "tracking_plan", {"start_date": date(2025, 1, 15)}, {"id": "plan-1"}
    )
    missing = sqlite_store.update("tracking_plan", {"name": "x"}, {"id": "plan-404"})

    assert changed == 1
    assert missing == 0
    (plan,) = sqlite_store.fetch("tracking_plan", {"id": "plan-1"}, ("start_date", "active"))
    assert plan == {"start_date": date(2025, 1, 15), "active": True}


def test_replace_swaps_rows_in_one_go(sqlite_store: SqlAlchemyStore) -> None:
    sqlite_store.insert(
        "tracking_plan_dependencies",
        [
            {"plan_id": "plan-1", "action_description": "Old"},
            {"plan_id": "plan-2", "action_description": "Other"},
        ],
    )

    stored = sqlite_store.replace(
        "tracking_plan_dependencies",
        {"plan_id": "plan-1"},
        [
            {"plan_id": "plan-1", "action_description": "START DATE", "row_number": 0},
            {"plan_id": "plan-1", "action_description": "Proto"},
        ],
    )

    assert stored == 2
    rows = sqlite_store.fetch("tracking_plan_dependencies", {}, ("plan_id", "action_description"))
    assert sorted((row["plan_id"], row["action_description"]) for row in rows) == [
        ("plan-1", "Proto"),
        ("plan-1", "START DATE"),
        ("plan-2", "Other"),
    ]


def test_failed_replace_keeps_previous_rows(sqlite_store: SqlAlchemyStore) -> None:
    sqlite_store.insert(
        "tracking_plan_dependencies", [{"plan_id": "plan-1", "action_description": "Old"}]
    )

    with pytest.raises(StorageError):
        sqlite_store.replace(
            "tracking_plan_dependencies",
            {"plan_id": "plan-1"},
            [{"plan_id": "plan-1", "action_description": None}],
        )

    rows = sqlite_store.fetch("tracking_plan_dependencies", {"plan_id": "plan-1"})
    assert [row["action_description"] for row in rows] == ["Old"]


def test_unknown_table_raises_storage_error(sqlite_store: SqlAlchemyStore) -> None:
    with pytest.raises(StorageError, match="Unknown table"):
        sqlite_store.fetch("nope", {})


def test_unknown_filter_column_raises_storage_error(sqlite_store: SqlAlchemyStore) -> None:
    with pytest.raises(StorageError, match="Unknown column"):
        sqlite_store.fetch("material", {"nope": 1})


def test_constraint_violation_raises_storage_error(sqlite_store: SqlAlchemyStore) -> None:
    with pytest.raises(StorageError) as excinfo:
        sqlite_store.insert("beproduct_sync_log", [{"entity_type": "material"}])

    assert excinfo.value.table == "beproduct_sync_log"


def test_empty_writes_are_noops(sqlite_store: SqlAlchemyStore) -> None:
    assert sqlite_store.upsert("material", [], ("beproduct_material_id",)) == 0
    assert sqlite_store.insert("material", []) == 0
    assert sqlite_store.update("material", {}, {"id": 1}) == 0
