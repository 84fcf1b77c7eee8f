from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .nuget import PackageRecord


THUMBNAIL_CONTENT_TYPE = "application/vnd.microsoft.card.thumbnail"
HERO_CONTENT_TYPE = "application/vnd.microsoft.card.hero"

SELECTION_PAYLOAD_VERSION = 1


class MalformedInput(ValueError):
    """A selection payload did not match the expected record contract."""


class _Wire(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class CardImage(_Wire):
    url: str
    alt: Optional[str] = None


class CardAction(_Wire):
    type: Literal["invoke", "openUrl"]
    value: str
    title: Optional[str] = None


class ThumbnailCard(_Wire):
    title: str
    subtitle: Optional[str] = None
    tap: Optional[CardAction] = None
    buttons: Optional[List[CardAction]] = None
    images: Optional[List[CardImage]] = None


class HeroCard(ThumbnailCard):
    pass


class Attachment(_Wire):
    content_type: str
    content: ThumbnailCard
    preview: Optional["Attachment"] = None


class SuggestedActions(_Wire):
    actions: List[CardAction]


class ComposeExtension(_Wire):
    """Outbound result: either an auth request or a list of attachments."""

    type: Literal["auth", "result"]
    attachment_layout: Optional[Literal["list"]] = None
    attachments: Optional[List[Attachment]] = None
    suggested_actions: Optional[SuggestedActions] = None


class ExtensionResponse(_Wire):
    compose_extension: ComposeExtension


class SelectionPayload(BaseModel):
    """
    Versioned contract carried by a preview card's tap action.

    Wire shape: {"v": 1, "data": [name, version, description, projectUrl, iconUrl]}.
    `v` may be omitted by older payloads and then defaults to the current version.
    """

    model_config = ConfigDict(frozen=True)

    v: int = SELECTION_PAYLOAD_VERSION
    data: List[str] = Field(..., min_length=5, max_length=5)

    @field_validator("v")
    @classmethod
    def _known_version(cls, v: int) -> int:
        if v != SELECTION_PAYLOAD_VERSION:
            raise ValueError(f"unsupported selection payload version: {v}")
        return v

    @classmethod
    def from_record(cls, record: PackageRecord) -> "SelectionPayload":
        return cls(data=record.as_list())

    def to_record(self) -> PackageRecord:
        return PackageRecord.from_list(self.data)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(), separators=(",", ":"))


def parse_selection(raw: Union[SelectionPayload, Dict[str, Any], str, None]) -> PackageRecord:
    """Validate a select-item payload and rebuild the record it carries.

    Accepts the typed payload, its dict form, or the JSON string stored in the
    tap action. Raises MalformedInput for anything else.
    """
    if isinstance(raw, SelectionPayload):
        return raw.to_record()
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as exc:
            raise MalformedInput("Selection payload is not valid JSON") from exc
    if not isinstance(raw, dict):
        raise MalformedInput(f"Selection payload must be an object, got {type(raw).__name__}")
    try:
        return SelectionPayload.model_validate(raw).to_record()
    except ValidationError as ve:
        raise MalformedInput(f"Invalid selection payload: {ve}") from ve


def _icon_images(record: PackageRecord) -> Optional[List[CardImage]]:
    if not record.icon_url:
        return None
    return [CardImage(url=record.icon_url, alt="Icon")]


def build_attachment_pair(record: PackageRecord) -> Attachment:
    """Return the full (hero) card with its tappable thumbnail preview.

    Description and project URL are not shown on the full card; they travel in
    the tap payload for use when the item is selected.
    """
    tap = CardAction(type="invoke", value=SelectionPayload.from_record(record).to_json())
    preview = ThumbnailCard(title=record.name, tap=tap, images=_icon_images(record))
    full = HeroCard(title=record.name)
    return Attachment(
        content_type=HERO_CONTENT_TYPE,
        content=full,
        preview=Attachment(content_type=THUMBNAIL_CONTENT_TYPE, content=preview),
    )


def build_selected_card(record: PackageRecord) -> Attachment:
    button = CardAction(type="openUrl", title="Project", value=record.project_url)
    card = ThumbnailCard(
        title=record.name,
        subtitle=record.description,
        buttons=[button],
        images=_icon_images(record),
    )
    return Attachment(content_type=THUMBNAIL_CONTENT_TYPE, content=card)


def build_title_card(title: str) -> Attachment:
    return Attachment(content_type=THUMBNAIL_CONTENT_TYPE, content=ThumbnailCard(title=title))


def result_list(attachments: List[Attachment]) -> ExtensionResponse:
    return ExtensionResponse(
        compose_extension=ComposeExtension(
            type="result",
            attachment_layout="list",
            attachments=attachments,
        )
    )


def auth_request(sign_in_url: str, *, title: str = "Sign in to this app") -> ExtensionResponse:
    action = CardAction(type="openUrl", title=title, value=sign_in_url)
    return ExtensionResponse(
        compose_extension=ComposeExtension(
            type="auth",
            suggested_actions=SuggestedActions(actions=[action]),
        )
    )


__all__ = [
    "Attachment",
    "CardAction",
    "CardImage",
    "ComposeExtension",
    "ExtensionResponse",
    "HeroCard",
    "MalformedInput",
    "SelectionPayload",
    "ThumbnailCard",
    "auth_request",
    "build_attachment_pair",
    "build_selected_card",
    "build_title_card",
    "parse_selection",
    "result_list",
]
