"""Translate BeProduct payloads into domain change records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, cast

from plmsync.domain.data_integration import MATERIAL_HEADER, STYLE_HEADER, folder_brand
from plmsync.domain.identifiers import sanitize_identifier
from plmsync.domain.model import (
    CollectionChange,
    EventType,
    FolderSnapshot,
    HeaderChange,
    MasterdataChoice,
    MilestoneSnapshot,
    PlanSnapshot,
    TimelineItemChange,
    TimelineTemplate,
    TrackingEvent,
    normalize_timeline_status,
)
from plmsync.domain.model import layout as tables

from .schema import (
    ChangeEventEnvelope,
    ColorwayPayload,
    FolderPayload,
    MaterialPayload,
    PlanLinkPayload,
    PlanPayload,
    SizeClassPayload,
    SizeRangePayload,
    StylePayload,
    SupplierPayload,
    TagPayload,
    TimelineMilestonePayload,
    TimelineSchemaPayload,
    TrackingEventEnvelope,
    TrackingRecordPayload,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from plmsync.domain.model import HeaderDescriptor, Row

    from .schema import (
        AssignedUserPayload,
        CollectionItemPayload,
        HeaderPayload,
        MasterdataResponse,
    )

type Flatten = Callable[[object], Row]

_SCALARS = (str, int, float, bool)


def _as_mapping(value: object) -> dict[str, object]:
    if isinstance(value, Mapping):
        return dict(cast(Mapping[str, object], value))
    return {}


def _with_extra_fields(row: Row, item: CollectionItemPayload) -> Row:
    """Add scalar entries of an item's ``fields`` under sanitized, non-colliding names."""

    for key, value in (item.extra_fields or {}).items():
        if value is None or not isinstance(value, _SCALARS):
            continue
        column = sanitize_identifier(key)
        if column and column not in row:
            row[column] = value
    return row


def _flatten_items(items: list[object] | None, flatten: Flatten) -> list[Row] | None:
    """Flatten a header's child items; a re-sent child is no longer soft-deleted."""

    if items is None:
        return None
    return [{**flatten(item), "deleted": False} for item in items]


# ---------------------------------------------------------------------------
# Nested collections


def material_colorway_row(item: object) -> Row:
    colorway = ColorwayPayload.model_validate(_as_mapping(item))
    row: Row = {
        "colorway_id": colorway.id,
        "name": colorway.color_name,
        "code": colorway.color_number,
        "hex": colorway.primary_color,
        "comments": colorway.comments,
        "image": colorway.image,
        "hide_colorway": colorway.hide_colorway,
        "primary_color": colorway.primary_color,
        "secondary_color": colorway.secondary_color,
        "secondary_color_name": colorway.secondary_color_name,
        "secondary_color_number": colorway.secondary_color_number,
        "color_source_id": colorway.color_source_id,
        "image_header_id": colorway.image_header_id,
        "raw_beproduct_data": item,
    }
    return _with_extra_fields(row, colorway)


def material_size_range_row(item: object) -> Row:
    size_range = SizeRangePayload.model_validate(_as_mapping(item))
    row: Row = {
        "size_range_id": size_range.name,
        "name": size_range.name,
        "sizes": item,
    }
    return _with_extra_fields(row, size_range)


def material_supplier_row(item: object) -> Row:
    supplier = SupplierPayload.model_validate(_as_mapping(item))
    row: Row = {
        "supplier_id": supplier.id or supplier.code or supplier.value,
        "name": supplier.name or supplier.value,
        "code": supplier.code,
        "is_primary": bool(supplier.is_primary),
        "raw_beproduct_data": item,
    }
    return _with_extra_fields(row, supplier)


def material_tag_row(item: object) -> Row:
    tag = TagPayload.model_validate(item if isinstance(item, _SCALARS) else _as_mapping(item))
    row: Row = {"tag": tag.value, "name": tag.name}
    return _with_extra_fields(row, tag)


def material_plan_link_row(item: object) -> Row:
    link = PlanLinkPayload.model_validate(item if isinstance(item, _SCALARS) else _as_mapping(item))
    row: Row = {"plan_id": link.id}
    return _with_extra_fields(row, link)


def style_colorway_row(item: object) -> Row:
    colorway = ColorwayPayload.model_validate(_as_mapping(item))
    fields = colorway.extra_fields or {}
    row: Row = {
        "beproduct_colorway_id": colorway.id,
        "color_number": colorway.color_number,
        "color_name": colorway.color_name,
        "primary_hex": colorway.primary_color,
        "secondary_hex": colorway.secondary_color,
        "secondary_color_number": colorway.secondary_color_number,
        "secondary_color_name": colorway.secondary_color_name,
        "comments": colorway.comments,
        "hide_colorway": colorway.hide_colorway,
        "image_header_id": colorway.image_header_id,
        "color_source_id": colorway.color_source_id,
        "brand_marketing_name": fields.get("marketing_name"),
        "marketing_name": fields.get("marketing_name"),
        "color_reference": fields.get("color_reference"),
        "color_number_ls": fields.get("color_number_ls"),
        "bulk_order_qty": fields.get("bulk_order_qty"),
        "core_colorway_main_material": fields.get("core_colorway_main_material"),
        "raw_beproduct_data": item,
    }
    return _with_extra_fields(row, colorway)


def style_size_class_row(item: object) -> Row:
    size_class = SizeClassPayload.model_validate(_as_mapping(item))
    return {
        "beproduct_size_class_id": size_class.id,
        "size_class_name": size_class.name,
        "is_default": size_class.is_default,
        "sizes": size_class.size_range,
        "size_class_fields": size_class.extra_fields,
        "raw_beproduct_data": item,
    }


# ---------------------------------------------------------------------------
# Headers


def _header_row(envelope: ChangeEventEnvelope, header: HeaderPayload) -> Row:
    return {
        "beproduct_folder_id": envelope.folder_id,
        "folder_name": envelope.folder_name,
        "brand": header.field_value("brand_1"),
        "created_by": (header.created_by.name if header.created_by else None)
        or header.field_value("created_by"),
        "beproduct_created_at": header.created_at,
        "modified_by": (header.modified_by.name if header.modified_by else None)
        or header.field_value("modified_by"),
        "beproduct_modified_at": header.modified_at,
    }


def _dynamic_fields(header: HeaderPayload, fixed: Row) -> Row:
    fields: Row = {}
    for key, value in header.wrapped_fields().items():
        column = sanitize_identifier(key)
        if column and column not in fixed:
            fields[column] = value
    return fields


def _header_change(
    envelope: ChangeEventEnvelope,
    descriptor: HeaderDescriptor,
    *,
    after: HeaderPayload | None,
    row: Row,
    collections: list[CollectionChange],
    payload: Mapping[str, object],
) -> HeaderChange:
    fallback_id = after.extra.get("id") if after is not None else None
    header_number = envelope.header_number
    header_name = envelope.header_name
    if after is not None:
        header_number = header_number or _optional_str(after.extra.get("headerNumber"))
        header_name = header_name or _optional_str(after.extra.get("headerName"))
    return HeaderChange(
        descriptor=descriptor,
        event_type=EventType.parse(envelope.event_type),
        raw_event_type=envelope.event_type,
        external_id=envelope.header_id or _optional_str(fallback_id),
        header_number=header_number,
        header_name=header_name,
        has_after=after is not None,
        row=row,
        dynamic_fields=_dynamic_fields(after, row) if after is not None else {},
        collections=collections,
        payload=payload,
    )


def _optional_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return None


def material_change(payload: Mapping[str, object]) -> HeaderChange:
    """Flatten a material webhook payload.

    Collections missing from ``after`` are left alone; deletions are only planned
    for collections that also appear in ``before``.
    """

    envelope = ChangeEventEnvelope.model_validate(payload)
    raw_after = envelope.data.after
    after = MaterialPayload.model_validate(raw_after) if raw_after is not None else None
    before = (
        MaterialPayload.model_validate(envelope.data.before)
        if envelope.data.before is not None
        else None
    )

    row: Row = {}
    collections: list[CollectionChange] = []
    if after is not None:
        row = {
            **_header_row(envelope, after),
            "main_image_preview": after.main_image.preview if after.main_image else None,
            "main_image_url": after.main_image.origin if after.main_image else None,
            "detail_image_preview": after.detail_image.preview if after.detail_image else None,
            "detail_image_url": after.detail_image.origin if after.detail_image else None,
            "deleted": bool(after.is_deleted),
            "raw_beproduct_data": raw_after,
        }
        specs: list[tuple[str, str, Flatten, str]] = [
            (tables.MATERIAL_COLORWAY, "colorway_id", material_colorway_row, "colorways"),
            (tables.MATERIAL_SIZE_RANGE, "size_range_id", material_size_range_row, "size_range"),
            (tables.MATERIAL_SUPPLIER, "supplier_id", material_supplier_row, "suppliers"),
            (tables.MATERIAL_TAG, "tag", material_tag_row, "tags"),
            (tables.MATERIAL_PLAN_LINK, "plan_id", material_plan_link_row, "plan_ids"),
        ]
        collections = [
            CollectionChange(
                table=table,
                unique_key=unique_key,
                current=_flatten_items(getattr(after, attribute), flatten),
                previous=_flatten_items(getattr(before, attribute), flatten) if before else None,
            )
            for table, unique_key, flatten, attribute in specs
        ]
    return _header_change(
        envelope,
        MATERIAL_HEADER,
        after=after,
        row=row,
        collections=collections,
        payload=payload,
    )


def style_change(payload: Mapping[str, object]) -> HeaderChange:
    """Flatten a style webhook payload."""

    envelope = ChangeEventEnvelope.model_validate(payload)
    raw_after = envelope.data.after
    after = StylePayload.model_validate(raw_after) if raw_after is not None else None
    before = (
        StylePayload.model_validate(envelope.data.before)
        if envelope.data.before is not None
        else None
    )

    row: Row = {}
    collections: list[CollectionChange] = []
    if after is not None:
        row = {
            **_header_row(envelope, after),
            "front_image_preview": after.front_image.preview if after.front_image else None,
            "front_image_url": after.front_image.origin if after.front_image else None,
            "deleted": bool(after.deleted),
            "raw_beproduct_data": raw_after,
        }
        collections = [
            CollectionChange(
                table=tables.STYLE_COLORWAY,
                unique_key="beproduct_colorway_id",
                current=_flatten_items(after.colorways, style_colorway_row),
                previous=_flatten_items(before.colorways, style_colorway_row) if before else None,
            ),
            CollectionChange(
                table=tables.STYLE_SIZE_CLASS,
                unique_key="size_class_name",
                current=_flatten_items(after.size_classes, style_size_class_row),
                previous=_flatten_items(before.size_classes, style_size_class_row)
                if before
                else None,
            ),
        ]
    return _header_change(
        envelope,
        STYLE_HEADER,
        after=after,
        row=row,
        collections=collections,
        payload=payload,
    )


# ---------------------------------------------------------------------------
# Tracking


def _assignments(users: list[AssignedUserPayload] | None) -> list[Row]:
    return [
        {"assignee_id": user.code, "source_user_id": user.code}
        for user in users or []
        if user.code
    ]


def milestone_snapshot(item: object, *, plan_style_id: str) -> MilestoneSnapshot | None:
    milestone = TimelineMilestonePayload.model_validate(_as_mapping(item))
    if not milestone.id:
        return None
    row: Row = {
        "id": milestone.id,
        "plan_style_id": plan_style_id,
        "template_item_id": milestone.timeline_id,
        "status": normalize_timeline_status(milestone.status).value,
        "plan_date": milestone.project_date,
        "rev_date": milestone.rev,
        "final_date": milestone.final,
        "due_date": milestone.due_date,
        "late": milestone.late,
        "raw_payload": item,
    }
    return MilestoneSnapshot(
        timeline_id=milestone.id,
        template_item_id=milestone.timeline_id,
        row=row,
        assignments=_assignments(milestone.assigned_to),
    )


def _plan_style_row(
    envelope: TrackingEventEnvelope, record: TrackingRecordPayload, plan_id: str | None
) -> Row:
    color = record.color or record.style_color
    return {
        "id": record.id,
        "plan_id": plan_id,
        "style_header_id": envelope.header_id or record.header_id,
        "color_id": color.id if color else None,
        "style_number": envelope.header_number,
        "style_name": envelope.header_name,
        "color_name": color.suggested_name if color else None,
        "supplier_name": record.supplier_name,
        "active": True,
        "raw_payload": envelope.data.after,
    }


def _item_change(
    data_timeline_id: str | None,
    raw_item: object,
    before: TrackingRecordPayload | None,
    after: TrackingRecordPayload | None,
) -> TimelineItemChange | None:
    old = before.timeline_item if before else None
    new = after.timeline_item if after else None
    if old is None or new is None:
        return None
    timeline_id = new.id or data_timeline_id or old.id
    if not timeline_id:
        return None
    return TimelineItemChange(
        timeline_id=timeline_id,
        values={
            "status": normalize_timeline_status(new.status or old.status).value,
            "rev_date": new.rev,
            "final_date": new.final,
            "due_date": new.due_date,
            "plan_date": new.project_date,
            "late": new.late,
            "shared_with": new.share_with,
            "submits_quantity": new.submits_quantity or 0,
            "raw_payload": raw_item,
        },
        current_assignments=_assignments(new.assigned_to) if new.assigned_to is not None else None,
        previous_assignments=_assignments(old.assigned_to)
        if old.assigned_to is not None
        else None,
    )


def tracking_event(payload: Mapping[str, object]) -> TrackingEvent:
    envelope = TrackingEventEnvelope.model_validate(payload)
    data = envelope.data
    after = TrackingRecordPayload.model_validate(data.after) if data.after is not None else None
    before = TrackingRecordPayload.model_validate(data.before) if data.before is not None else None
    event_type = EventType.parse(envelope.event_type)

    plan_id = data.plan_id or (after.plan_id if after else None)
    event = TrackingEvent(
        event_type=event_type,
        raw_event_type=envelope.event_type,
        header_id=envelope.header_id,
        plan_id=plan_id,
        folder_id=data.plan_folder_id or envelope.folder_id,
        folder_name=envelope.folder_name,
        payload=payload,
    )
    if event_type is EventType.ON_DELETE:
        event.plan_style_id = before.id if before else None
    elif event_type is EventType.ON_CHANGE:
        event.item_change = _item_change(
            data.timeline_id, _as_mapping(data.after).get("TimeLineItem"), before, after
        )
    elif after is not None and after.id:
        event.plan_style_id = after.id
        event.plan_style = _plan_style_row(envelope, after, plan_id)
        snapshots = (
            milestone_snapshot(item, plan_style_id=after.id) for item in after.timelines or []
        )
        event.milestones = [snapshot for snapshot in snapshots if snapshot is not None]
    return event


def _template_columns(schema: TimelineSchemaPayload) -> Row:
    return {
        "milestone_name": schema.action_description,
        "milestone_short_name": schema.short_description,
        "dept_customer": schema.department,
        "milestone_page_name": schema.page_name,
        "offset_days": schema.days,
        "calendar_days": schema.calendar_days,
        "calendar_name": schema.calendar,
        "group_task": schema.group_task,
        "when_rule": schema.when,
        "share_when_rule": schema.share_when,
        "activity_description": schema.activity_description,
        "revised_days": schema.revised_days,
        "default_status": normalize_timeline_status(schema.default_status).value
        if schema.default_status
        else None,
        "auto_share_linked_page": schema.auto_share_linked_page,
        "sync_with_group_task": schema.sync_with_group_task,
        "external_share_with": schema.external_share_with,
    }


def plan_snapshot(raw: Mapping[str, object], *, plan_id: str) -> PlanSnapshot:
    plan = PlanPayload.model_validate(raw)
    templates = {
        schema.id: TimelineTemplate(template_item_id=schema.id, columns=_template_columns(schema))
        for schema in plan.timeline_schema
        if schema.id
    }
    row: Row = {
        "id": plan.id or plan_id,
        "name": plan.name,
        "description": plan.description,
        "folder_id": plan.folder_id,
        "start_date": plan.start_date,
        "end_date": plan.end_date,
        "template_id": plan.template_id,
        "active": plan.active is not False,
        "raw_payload": dict(raw),
        "created_at": plan.created_at,
        "updated_at": plan.modified_at,
        "created_by": plan.created_by.name if plan.created_by else None,
        "updated_by": plan.modified_by.name if plan.modified_by else None,
    }
    return PlanSnapshot(
        plan_id=plan.id or plan_id,
        row=row,
        start_date=plan.start_date,
        end_date=plan.end_date,
        templates=templates,
    )


def folder_snapshot(raw: Mapping[str, object]) -> FolderSnapshot | None:
    folder = FolderPayload.model_validate(raw)
    if not folder.id:
        return None
    style_folder = folder.style_folder
    row: Row = {
        "id": folder.id,
        "name": folder.name,
        "brand": folder.brand or folder_brand(folder.name),
        "style_folder_id": (style_folder.id if style_folder else None) or folder.style_folder_id,
        "style_folder_name": (style_folder.name if style_folder else None)
        or folder.style_folder_name,
        "active": folder.active is not False,
        "raw_payload": dict(raw),
    }
    return FolderSnapshot(folder_id=folder.id, name=folder.name, row=row)


def masterdata_choices(response: MasterdataResponse) -> list[MasterdataChoice]:
    choices: list[MasterdataChoice] = []
    for choice in response.choices:
        allowed_for = (
            tuple(str(item) for item in choice.allowed_for if item is not None)
            if choice.allowed_for is not None
            else None
        )
        choices.append(
            MasterdataChoice(
                id=choice.id,
                code=choice.code,
                value=choice.value,
                allowed_for=allowed_for,
                active=choice.active is not False,
            )
        )
    return choices
