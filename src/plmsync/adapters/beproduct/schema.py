"""Pydantic models describing BeProduct webhook and API payloads.

BeProduct sends loosely typed JSON: identifiers arrive as strings or numbers,
dates as ISO strings with or without a time part, and header attributes wrapped
as ``{"value": ...}``. The ``Loose*`` field types coerce what they can and turn
everything else into ``None`` so decoding a payload never fails on one odd field.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from logging import getLogger
from typing import Annotated, ClassVar, cast

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, model_validator

log = getLogger(__name__)


def _loose_str(value: object) -> str | None:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str):
        return value
    if isinstance(value, int | float):
        return str(value)
    return None


def _loose_bool(value: object) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _loose_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _loose_int(value: object) -> int | None:
    number = _loose_number(value)
    if number is None or number != int(number):
        return None
    return int(number)


def _loose_date(value: object) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip().split("T")[0])
    except ValueError:
        return None


def _loose_datetime(value: object) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def _items_or_none(value: object) -> list[object] | None:
    if isinstance(value, list):
        return cast(list[object], value)
    return None


def _items_or_single(value: object) -> list[object] | None:
    if value is None:
        return None
    if isinstance(value, list):
        return cast(list[object], value)
    return [value]


def _mapping_or_none(value: object) -> dict[str, object] | None:
    if isinstance(value, Mapping):
        return dict(cast(Mapping[str, object], value))
    return None


LooseStr = Annotated[str | None, BeforeValidator(_loose_str)]
LooseBool = Annotated[bool | None, BeforeValidator(_loose_bool)]
LooseNumber = Annotated[float | None, BeforeValidator(_loose_number)]
LooseInt = Annotated[int | None, BeforeValidator(_loose_int)]
LooseDate = Annotated[date | None, BeforeValidator(_loose_date)]
LooseDateTime = Annotated[datetime | None, BeforeValidator(_loose_datetime)]
RawItems = Annotated[list[object] | None, BeforeValidator(_items_or_none)]
RawItemsOrSingle = Annotated[list[object] | None, BeforeValidator(_items_or_single)]
RawObject = Annotated[dict[str, object] | None, BeforeValidator(_mapping_or_none)]


class BeProductBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ExtensibleModel(BaseModel):
    """Shape with an open set of top-level keys kept in ``model_extra``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "BeProduct %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )

    @property
    def extra(self) -> dict[str, object]:
        return dict(self.model_extra or {})


class ImageRef(BeProductBaseModel):
    preview: LooseStr = None
    origin: LooseStr = None


class UserRef(BeProductBaseModel):
    id: LooseStr = None
    name: LooseStr = None


def _image(value: object) -> ImageRef | None:
    if isinstance(value, Mapping):
        return ImageRef.model_validate(value)
    return None


def _user(value: object) -> UserRef | None:
    if isinstance(value, Mapping):
        return UserRef.model_validate(value)
    return None


LooseImage = Annotated[ImageRef | None, BeforeValidator(_image)]
LooseUser = Annotated[UserRef | None, BeforeValidator(_user)]


# ---------------------------------------------------------------------------
# Material and style headers


class ChangeEventData(BeProductBaseModel):
    before: RawObject = None
    after: RawObject = None


class ChangeEventEnvelope(BeProductBaseModel):
    event_type: LooseStr = Field(default=None, alias="eventType")
    object_type: LooseStr = Field(default=None, alias="objectType")
    header_id: LooseStr = Field(default=None, alias="headerId")
    header_number: LooseStr = Field(default=None, alias="headerNumber")
    header_name: LooseStr = Field(default=None, alias="headerName")
    folder_id: LooseStr = Field(default=None, alias="folderId")
    folder_name: LooseStr = Field(default=None, alias="folderName")
    data: ChangeEventData = Field(default_factory=ChangeEventData)

    @model_validator(mode="before")
    @classmethod
    def _default_data(cls, value: object) -> object:
        if isinstance(value, Mapping):
            mapping = dict(cast(Mapping[str, object], value))
            if not isinstance(mapping.get("data"), Mapping):
                mapping["data"] = {}
            return mapping
        return value


class HeaderPayload(ExtensibleModel):
    """Header of a material or style; attribute fields stay in ``model_extra``."""

    created_by: LooseUser = Field(default=None, alias="createdBy")
    modified_by: LooseUser = Field(default=None, alias="modifiedBy")
    created_at: LooseDateTime = Field(default=None, alias="createdAt")
    modified_at: LooseDateTime = Field(default=None, alias="modifiedAt")
    colorways: RawItems = None

    def field_value(self, key: str) -> object:
        """Unwrap a ``{"value": ...}`` attribute, ``None`` when absent or not wrapped."""

        wrapped = self.extra.get(key)
        if isinstance(wrapped, Mapping):
            return cast(Mapping[str, object], wrapped).get("value")
        return None

    def wrapped_fields(self) -> dict[str, object]:
        fields: dict[str, object] = {}
        for key, wrapped in self.extra.items():
            if isinstance(wrapped, Mapping) and "value" in wrapped:
                fields[key] = cast(Mapping[str, object], wrapped)["value"]
        return fields


class MaterialPayload(HeaderPayload):
    main_image: LooseImage = Field(default=None, alias="mainImage")
    detail_image: LooseImage = Field(default=None, alias="detailImage")
    size_range: RawItems = Field(default=None, alias="sizeRange")
    suppliers: RawItems = None
    tags: RawItemsOrSingle = None
    plan_ids: RawItems = Field(default=None, alias="planIds")
    is_deleted: LooseBool = Field(default=None, alias="isDeleted")


class StylePayload(HeaderPayload):
    front_image: LooseImage = Field(default=None, alias="frontImage")
    size_classes: RawItems = Field(default=None, alias="sizeClasses")
    deleted: LooseBool = None


# ---------------------------------------------------------------------------
# Nested collection items


class CollectionItemPayload(BeProductBaseModel):
    extra_fields: RawObject = Field(default=None, alias="fields")


class ColorwayPayload(CollectionItemPayload):
    id: LooseStr = None
    color_name: LooseStr = Field(default=None, alias="colorName")
    color_number: LooseStr = Field(default=None, alias="colorNumber")
    primary_color: LooseStr = Field(default=None, alias="primaryColor")
    secondary_color: LooseStr = Field(default=None, alias="secondaryColor")
    secondary_color_name: LooseStr = Field(default=None, alias="secondaryColorName")
    secondary_color_number: LooseStr = Field(default=None, alias="secondaryColorNumber")
    comments: LooseStr = None
    image: object = None
    hide_colorway: LooseBool = Field(default=None, alias="hideColorway")
    color_source_id: LooseStr = Field(default=None, alias="colorSourceId")
    image_header_id: LooseStr = Field(default=None, alias="imageHeaderId")


class SizeRangePayload(CollectionItemPayload):
    name: LooseStr = None


class SizeClassPayload(CollectionItemPayload):
    id: LooseStr = None
    name: LooseStr = None
    is_default: LooseBool = Field(default=None, alias="isDefault")
    size_range: RawItems = Field(default=None, alias="sizeRange")


class SupplierPayload(CollectionItemPayload):
    id: LooseStr = None
    code: LooseStr = None
    value: LooseStr = None
    name: LooseStr = None
    is_primary: LooseBool = Field(default=None, alias="isPrimary")


class TagPayload(CollectionItemPayload):
    value: LooseStr = None
    name: LooseStr = None

    @model_validator(mode="before")
    @classmethod
    def _wrap_plain_tag(cls, value: object) -> object:
        if isinstance(value, str | int | float):
            return {"value": value}
        return value


class PlanLinkPayload(CollectionItemPayload):
    id: LooseStr = None

    @model_validator(mode="before")
    @classmethod
    def _wrap_plain_id(cls, value: object) -> object:
        if isinstance(value, str | int | float):
            return {"id": value}
        return value


# ---------------------------------------------------------------------------
# Tracking


class AssignedUserPayload(BeProductBaseModel):
    value: LooseStr = None
    code: LooseStr = None


def _users(value: object) -> list[AssignedUserPayload] | None:
    if not isinstance(value, list):
        return None
    return [
        AssignedUserPayload.model_validate(item)
        for item in cast(list[object], value)
        if isinstance(item, Mapping)
    ]


AssignedUsers = Annotated[list[AssignedUserPayload] | None, BeforeValidator(_users)]


class TimelineMilestonePayload(BeProductBaseModel):
    id: LooseStr = Field(default=None, alias="Id")
    timeline_id: LooseStr = Field(default=None, alias="TimeLineId")
    status: LooseStr = Field(default=None, alias="Status")
    rev: LooseDate = Field(default=None, alias="Rev")
    final: LooseDate = Field(default=None, alias="Final")
    due_date: LooseDate = Field(default=None, alias="DueDate")
    project_date: LooseDate = Field(default=None, alias="ProjectDate")
    assigned_to: AssignedUsers = Field(default=None, alias="AssignedTo")
    share_with: RawItems = Field(default=None, alias="ShareWith")
    late: LooseBool = Field(default=None, alias="Late")
    submits_quantity: LooseNumber = Field(default=None, alias="SubmitsQuantity")


class ColorRef(BeProductBaseModel):
    id: LooseStr = Field(default=None, alias="_id")
    suggested_name: LooseStr = None


def _color(value: object) -> ColorRef | None:
    if isinstance(value, Mapping):
        return ColorRef.model_validate(value)
    return None


def _milestone(value: object) -> TimelineMilestonePayload | None:
    if isinstance(value, Mapping):
        return TimelineMilestonePayload.model_validate(value)
    return None


LooseColor = Annotated[ColorRef | None, BeforeValidator(_color)]
LooseMilestone = Annotated[TimelineMilestonePayload | None, BeforeValidator(_milestone)]


class TrackingRecordPayload(BeProductBaseModel):
    id: LooseStr = Field(default=None, alias="Id")
    plan_id: LooseStr = Field(default=None, alias="PlanId")
    header_id: LooseStr = Field(default=None, alias="HeaderId")
    style_id: LooseStr = Field(default=None, alias="StyleId")
    color: LooseColor = Field(default=None, alias="Color")
    style_color: LooseColor = Field(default=None, alias="StyleColor")
    supplier: RawItems = Field(default=None, alias="Supplier")
    timelines: RawItems = Field(default=None, alias="Timelines")
    timeline_item: LooseMilestone = Field(default=None, alias="TimeLineItem")

    @property
    def supplier_name(self) -> str | None:
        if not self.supplier:
            return None
        first = self.supplier[0]
        if isinstance(first, Mapping):
            return _loose_str(cast(Mapping[str, object], first).get("name"))
        return _loose_str(first)


class TrackingEventData(BeProductBaseModel):
    before: RawObject = None
    after: RawObject = None
    plan_id: LooseStr = Field(default=None, alias="planId")
    plan_folder_id: LooseStr = Field(default=None, alias="planFolderId")
    timeline_id: LooseStr = Field(default=None, alias="timelineId")


class TrackingEventEnvelope(ChangeEventEnvelope):
    data: TrackingEventData = Field(default_factory=TrackingEventData)  # type: ignore[assignment]


class TimelineSchemaPayload(ExtensibleModel):
    """One entry of a plan's timeline schema; BeProduct uses both casings."""

    id: LooseStr = Field(default=None, validation_alias=AliasChoices("id", "Id"))
    action_description: LooseStr = Field(
        default=None, validation_alias=AliasChoices("actionDescription", "TaskDescription")
    )
    short_description: LooseStr = Field(
        default=None, validation_alias=AliasChoices("shortDescription", "ShortDescription")
    )
    department: LooseStr = Field(
        default=None, validation_alias=AliasChoices("department", "Department")
    )
    page_name: LooseStr = Field(default=None, validation_alias=AliasChoices("pageName", "Page"))
    days: LooseNumber = Field(default=None, validation_alias=AliasChoices("days", "Days"))
    calendar_days: LooseNumber = Field(
        default=None, validation_alias=AliasChoices("calendarDays", "CalendarDays")
    )
    calendar: LooseStr = Field(default=None, validation_alias=AliasChoices("calendar", "Calendar"))
    group_task: LooseStr = Field(
        default=None, validation_alias=AliasChoices("groupTask", "GroupTask")
    )
    when: LooseStr = Field(default=None, validation_alias=AliasChoices("when", "When"))
    share_when: LooseStr = Field(
        default=None, validation_alias=AliasChoices("shareWhen", "ShareWhen")
    )
    activity_description: LooseStr = Field(
        default=None, validation_alias=AliasChoices("actDesc", "ActDesc")
    )
    revised_days: LooseNumber = Field(
        default=None, validation_alias=AliasChoices("revisedDays", "RevisedDays")
    )
    default_status: LooseStr = Field(
        default=None, validation_alias=AliasChoices("defaultStatus", "DefaultStatus")
    )
    auto_share_linked_page: LooseBool = Field(
        default=None, validation_alias=AliasChoices("autoShareLinkedPage", "AutoShareLinkedPage")
    )
    sync_with_group_task: LooseBool = Field(
        default=None, validation_alias=AliasChoices("syncWithGroupTask", "SyncWithGroupTask")
    )
    external_share_with: RawItems = Field(
        default=None, validation_alias=AliasChoices("externalShareWith", "ExternalShareWith")
    )


class PlanStylePayload(BeProductBaseModel):
    timelines: RawItems = None


class PlanPayload(ExtensibleModel):
    id: LooseStr = None
    name: LooseStr = None
    description: LooseStr = None
    folder_id: LooseStr = Field(default=None, alias="folderId")
    start_date: LooseDate = Field(
        default=None, validation_alias=AliasChoices("startDate", "StartDate")
    )
    end_date: LooseDate = Field(default=None, validation_alias=AliasChoices("endDate", "EndDate"))
    template_id: LooseStr = Field(default=None, alias="templateId")
    active: LooseBool = None
    created_at: LooseDateTime = Field(default=None, alias="createdAt")
    modified_at: LooseDateTime = Field(default=None, alias="modifiedAt")
    created_by: LooseUser = Field(default=None, alias="createdBy")
    modified_by: LooseUser = Field(default=None, alias="modifiedBy")
    style: PlanStylePayload | None = None
    timelines: RawItems = None

    @property
    def timeline_schema(self) -> list[TimelineSchemaPayload]:
        raw = self.timelines if self.timelines is not None else (
            self.style.timelines if self.style is not None else None
        )
        return [
            TimelineSchemaPayload.model_validate(item)
            for item in raw or []
            if isinstance(item, Mapping)
        ]


class StyleFolderRef(BeProductBaseModel):
    id: LooseStr = Field(default=None, validation_alias=AliasChoices("id", "Id"))
    name: LooseStr = Field(default=None, validation_alias=AliasChoices("name", "Name"))


def _style_folder(value: object) -> StyleFolderRef | None:
    if isinstance(value, Mapping):
        return StyleFolderRef.model_validate(value)
    return None


class FolderPayload(ExtensibleModel):
    id: LooseStr = Field(default=None, validation_alias=AliasChoices("id", "Id"))
    name: LooseStr = Field(default=None, validation_alias=AliasChoices("name", "Name"))
    style_folder: Annotated[StyleFolderRef | None, BeforeValidator(_style_folder)] = Field(
        default=None, validation_alias=AliasChoices("styleFolder", "StyleFolder")
    )
    style_folder_id: LooseStr = Field(
        default=None, validation_alias=AliasChoices("styleFolderId", "StyleFolderId")
    )
    style_folder_name: LooseStr = Field(
        default=None, validation_alias=AliasChoices("styleFolderName", "StyleFolderName")
    )
    brand: LooseStr = Field(default=None, validation_alias=AliasChoices("brand", "Brand"))
    active: LooseBool = Field(
        default=None, validation_alias=AliasChoices("active", "Active", "isActive", "IsActive")
    )


# ---------------------------------------------------------------------------
# Masterdata


class MasterdataChoicePayload(BeProductBaseModel):
    id: LooseStr = None
    code: LooseStr = None
    value: LooseStr = None
    allowed_for: RawItems = Field(default=None, alias="allowedFor")
    active: LooseBool = None


class MasterdataProperties(BeProductBaseModel):
    choices: list[MasterdataChoicePayload] | None = Field(default=None, alias="Choices")
    choices_designer: list[MasterdataChoicePayload] | None = Field(
        default=None, alias="ChoicesDesigner"
    )


class MasterdataResponse(BeProductBaseModel):
    field_id: LooseStr = Field(default=None, alias="fieldId")
    field_name: LooseStr = Field(default=None, alias="fieldName")
    field_type: LooseStr = Field(default=None, alias="fieldType")
    properties: MasterdataProperties = Field(default_factory=MasterdataProperties)

    @property
    def choices(self) -> list[MasterdataChoicePayload]:
        return self.properties.choices_designer or self.properties.choices or []
