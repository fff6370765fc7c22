"""Base tables of the store.

Only the columns every deployment needs are declared here; webhook payloads add
further columns at runtime through :class:`~plmsync.domain.schema_evolution.SchemaEvolution`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
    false,
    func,
    true,
)
from sqlalchemy.dialects.postgresql import JSONB

from plmsync.domain.column_types import ColumnType
from plmsync.domain.model import layout as tables

if TYPE_CHECKING:
    from sqlalchemy.types import TypeEngine

JSONType = JSON().with_variant(JSONB(), "postgresql")

# sqlite only autoincrements INTEGER PRIMARY KEY
IdType = BigInteger().with_variant(Integer(), "sqlite")

COLUMN_TYPES: dict[ColumnType, TypeEngine[object]] = {
    ColumnType.BOOLEAN: Boolean(),
    ColumnType.INTEGER: BigInteger(),
    ColumnType.DECIMAL: Numeric(asdecimal=False),
    ColumnType.JSON: JSONType,
    ColumnType.TEXT: Text(),
}


def sql_type(column_type: ColumnType) -> TypeEngine[object]:
    return COLUMN_TYPES[column_type]


def _timestamps() -> list[Column[object]]:
    return [
        Column("created_at", DateTime(timezone=True), server_default=func.now()),
        Column("updated_at", DateTime(timezone=True), server_default=func.now()),
    ]


def _header(metadata: MetaData, name: str, key_column: str, *columns: Column[object]) -> Table:
    return Table(
        name,
        metadata,
        Column("id", IdType, primary_key=True, autoincrement=True),
        Column(key_column, String(64), nullable=False, unique=True),
        Column("header_number", Text),
        Column("header_name", Text),
        Column("beproduct_folder_id", String(64)),
        Column("folder_name", Text),
        Column("brand", Text),
        *columns,
        Column("created_by", Text),
        Column("modified_by", Text),
        Column("beproduct_created_at", DateTime(timezone=True)),
        Column("beproduct_modified_at", DateTime(timezone=True)),
        Column("deleted", Boolean, nullable=False, server_default=false()),
        Column("raw_beproduct_data", JSONType),
        *_timestamps(),
    )


def _child(
    metadata: MetaData,
    name: str,
    *,
    parent: Table,
    parent_column: str,
    unique_key: str,
    columns: tuple[Column[object], ...] = (),
) -> Table:
    return Table(
        name,
        metadata,
        Column("id", IdType, primary_key=True, autoincrement=True),
        Column(
            parent_column,
            IdType,
            ForeignKey(parent.c.id, ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        Column(unique_key, Text, nullable=False),
        *columns,
        Column("deleted", Boolean, nullable=False, server_default=false()),
        Column("raw_beproduct_data", JSONType),
        *_timestamps(),
        UniqueConstraint(parent_column, unique_key, name=f"uq_{name}_{unique_key}"),
    )


def build_metadata(schema: str | None = None) -> MetaData:
    """Return a fresh ``MetaData`` with every base table of the store."""

    metadata = MetaData(schema=schema)

    material = _header(
        metadata,
        tables.MATERIAL,
        "beproduct_material_id",
        Column("main_image_preview", Text),
        Column("main_image_url", Text),
        Column("detail_image_preview", Text),
        Column("detail_image_url", Text),
    )
    _child(
        metadata,
        tables.MATERIAL_COLORWAY,
        parent=material,
        parent_column="material_id",
        unique_key="colorway_id",
        columns=(Column("name", Text), Column("code", Text), Column("hex", Text)),
    )
    _child(
        metadata,
        tables.MATERIAL_SIZE_RANGE,
        parent=material,
        parent_column="material_id",
        unique_key="size_range_id",
        columns=(Column("name", Text), Column("sizes", JSONType)),
    )
    _child(
        metadata,
        tables.MATERIAL_SUPPLIER,
        parent=material,
        parent_column="material_id",
        unique_key="supplier_id",
        columns=(
            Column("name", Text),
            Column("code", Text),
            Column("is_primary", Boolean, nullable=False, server_default=false()),
        ),
    )
    _child(
        metadata,
        tables.MATERIAL_TAG,
        parent=material,
        parent_column="material_id",
        unique_key="tag",
        columns=(Column("name", Text),),
    )
    _child(
        metadata,
        tables.MATERIAL_PLAN_LINK,
        parent=material,
        parent_column="material_id",
        unique_key="plan_id",
    )

    style = _header(
        metadata,
        tables.STYLE,
        "beproduct_style_id",
        Column("front_image_preview", Text),
        Column("front_image_url", Text),
    )
    _child(
        metadata,
        tables.STYLE_COLORWAY,
        parent=style,
        parent_column="style_id",
        unique_key="beproduct_colorway_id",
        columns=(
            Column("color_number", Text),
            Column("color_name", Text),
            Column("primary_hex", Text),
            Column("secondary_hex", Text),
        ),
    )
    _child(
        metadata,
        tables.STYLE_SIZE_CLASS,
        parent=style,
        parent_column="style_id",
        unique_key="size_class_name",
        columns=(
            Column("beproduct_size_class_id", Text),
            Column("is_default", Boolean),
            Column("sizes", JSONType),
            Column("size_class_fields", JSONType),
        ),
    )

    folder = Table(
        tables.TRACKING_FOLDER,
        metadata,
        Column("id", String(64), primary_key=True),
        Column("name", Text),
        Column("brand", Text),
        Column("style_folder_id", String(64)),
        Column("style_folder_name", Text),
        Column("active", Boolean, nullable=False, server_default=true()),
        Column("raw_payload", JSONType),
        *_timestamps(),
    )
    plan = Table(
        tables.TRACKING_PLAN,
        metadata,
        Column("id", String(64), primary_key=True),
        Column("folder_id", String(64), ForeignKey(folder.c.id), index=True),
        Column("name", Text),
        Column("description", Text),
        Column("start_date", Date),
        Column("end_date", Date),
        Column("template_id", String(64)),
        Column("active", Boolean, nullable=False, server_default=true()),
        Column("raw_payload", JSONType),
        Column("created_by", Text),
        Column("updated_by", Text),
        *_timestamps(),
    )
    plan_style = Table(
        tables.TRACKING_PLAN_STYLE,
        metadata,
        Column("id", String(64), primary_key=True),
        Column("plan_id", String(64), ForeignKey(plan.c.id, ondelete="CASCADE"), index=True),
        Column("style_header_id", String(64)),
        Column("color_id", String(64)),
        Column("style_number", Text),
        Column("style_name", Text),
        Column("color_name", Text),
        Column("supplier_name", Text),
        Column("active", Boolean, nullable=False, server_default=true()),
        Column("raw_payload", JSONType),
        *_timestamps(),
    )
    Table(
        tables.TRACKING_TIMELINE,
        metadata,
        Column("id", String(64), primary_key=True),
        Column(
            "plan_style_id",
            String(64),
            ForeignKey(plan_style.c.id, ondelete="CASCADE"),
            index=True,
        ),
        Column("template_item_id", String(64)),
        Column("status", String(64), nullable=False, server_default="Not Started"),
        Column("plan_date", Date),
        Column("rev_date", Date),
        Column("final_date", Date),
        Column("due_date", Date),
        Column("start_date", Date),
        Column("late", Boolean),
        Column("milestone_name", Text),
        Column("milestone_short_name", Text),
        Column("dept_customer", Text),
        Column("milestone_page_name", Text),
        Column("offset_days", Float),
        Column("calendar_days", Float),
        Column("calendar_name", Text),
        Column("group_task", Text),
        Column("when_rule", Text),
        Column("share_when_rule", Text),
        Column("activity_description", Text),
        Column("revised_days", Float),
        Column("default_status", String(64)),
        Column("auto_share_linked_page", Boolean),
        Column("sync_with_group_task", Boolean),
        Column("external_share_with", JSONType),
        Column("shared_with", JSONType),
        Column("submits_quantity", Float),
        Column("row_number", Integer),
        Column("depends_on", String(64)),
        Column("dependency_uuid", String(64)),
        Column("relationship", String(16)),
        Column("raw_payload", JSONType),
        *_timestamps(),
    )
    Table(
        tables.TRACKING_DEPENDENCIES,
        metadata,
        Column("id", IdType, primary_key=True, autoincrement=True),
        Column("plan_id", String(64), nullable=False, index=True),
        Column("row_number", Integer),
        Column("action_description", Text, nullable=False),
        Column("department", Text),
        Column("short_description", Text),
        Column("share_with", Text),
        Column("page", Text),
        Column("days", Float),
        Column("depends_on", Text),
        Column("duration", Float),
        Column("duration_unit", String(32)),
        Column("relationship", String(16)),
        Column("created_at", DateTime(timezone=True), server_default=func.now()),
    )
    Table(
        tables.TRACKING_ASSIGNMENT,
        metadata,
        Column("id", IdType, primary_key=True, autoincrement=True),
        Column("timeline_id", String(64), nullable=False, index=True),
        Column("assignee_id", String(128), nullable=False),
        Column("source_user_id", String(128)),
        *_timestamps(),
        UniqueConstraint("timeline_id", "assignee_id", name="uq_timeline_assignee"),
    )
    Table(
        tables.SYNC_LOG,
        metadata,
        Column("id", IdType, primary_key=True, autoincrement=True),
        Column("entity_type", String(64), nullable=False),
        Column("entity_id", String(64)),
        Column("action", String(64), nullable=False),
        Column("payload", JSONType),
        Column("processed_at", DateTime(timezone=True), server_default=func.now()),
    )
    Table(
        tables.APP_CONFIG,
        metadata,
        Column("id", IdType, primary_key=True, autoincrement=True),
        Column("category", String(128), nullable=False),
        Column("key", String(256), nullable=False),
        Column("value", Text),
        Column("is_active", Boolean, nullable=False, server_default=true()),
        Column("allowed_for", JSONType),
        Column("config_type", String(32)),
        Column("data_type", String(32)),
        Column("last_synced_at", DateTime(timezone=True)),
        *_timestamps(),
        UniqueConstraint("category", "key", name="uq_app_config_category_key"),
    )
    return metadata
