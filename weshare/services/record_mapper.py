"""Translate between ``sites`` rows and in-memory :class:`CardData`.

The card body travels in the row's ``data`` column as a JSON string holding a
versioned envelope::

    {"version": 1, "card": {...every CardData field except id...}}

The identifier lives in the row's own ``id`` column and the display name is
denormalized into ``internal_name``; on read both columns win over whatever
the payload carries. Payloads written by the earlier JavaScript client have
no envelope and use camelCase keys; they are upgraded on read.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from ..schemas.card import CardData, Theme
from ..schemas.wire import PAYLOAD_VERSION, SiteRow
from .errors import PayloadError

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])([A-Z])")
_ROW_COLUMNS = ("id", "internal_name", "is_published")

_LEGACY_RENAMES: dict[str, str] = {
    "qr_code": "qr",
    "qr_style": "qr",
    "hours": "business_hours",
    "contacts": "collected_contacts",
}
_LEGACY_BLOCK_RENAMES: dict[str, str] = {
    "avatar": "avatar_url",
    "logo": "logo_url",
    "image": "image_url",
}
_LEGACY_CONTACT_RENAMES: dict[str, str] = {"date": "submitted_at"}


def _snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub(r"_\1", key).lower()


def _snake_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {_snake_case(str(key)): _snake_keys(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_snake_keys(item) for item in value]
    return value


def _rename(mapping: dict[str, Any], renames: Mapping[str, str]) -> dict[str, Any]:
    resolved: dict[str, Any] = {}
    for key, value in mapping.items():
        target = renames.get(key, key)
        # an explicit current-name key beats its legacy alias
        if target != key and target in mapping:
            continue
        resolved[target] = value
    return resolved


def upgrade_legacy_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Convert an unversioned camelCase card body to the current field names."""
    upgraded = _snake_keys(dict(payload))
    upgraded = _rename(upgraded, _LEGACY_RENAMES)
    for block in ("profile", "company"):
        if isinstance(upgraded.get(block), dict):
            upgraded[block] = _rename(upgraded[block], _LEGACY_BLOCK_RENAMES)
    if isinstance(upgraded.get("services"), list):
        upgraded["services"] = [
            _rename(item, _LEGACY_BLOCK_RENAMES) if isinstance(item, dict) else item
            for item in upgraded["services"]
        ]

    contacts = upgraded.get("collected_contacts")
    if isinstance(contacts, list):
        resolved_contacts = []
        for index, contact in enumerate(contacts):
            if not isinstance(contact, dict):
                continue
            contact = _rename(contact, _LEGACY_CONTACT_RENAMES)
            contact.setdefault("id", f"legacy-{index}")
            resolved_contacts.append(contact)
        upgraded["collected_contacts"] = resolved_contacts

    theme = upgraded.get("theme")
    known_themes = {item.value for item in Theme}
    if theme is not None and theme not in known_themes:
        upgraded["theme"] = Theme.CUSTOM.value if upgraded.get("custom_color") else Theme.LIGHT.value
    return upgraded


def serialize_card(card: CardData) -> str:
    body = card.model_dump(mode="json", exclude={"id"})
    return json.dumps({"version": PAYLOAD_VERSION, "card": body}, ensure_ascii=False)


def to_wire_format(card: CardData, *, owner_id: str = "") -> SiteRow:
    return SiteRow(
        id=card.id or None,
        user_id=owner_id,
        internal_name=card.internal_name,
        data=serialize_card(card),
        is_published=card.is_published,
    )


def _decode_payload(raw: Any) -> dict[str, Any]:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PayloadError(f"Site payload is not valid JSON: {exc.msg}") from exc
    if not isinstance(raw, dict):
        raise PayloadError("Site payload must be a JSON object")

    version = raw.get("version")
    if isinstance(version, int) and isinstance(raw.get("card"), dict):
        if version > PAYLOAD_VERSION:
            raise PayloadError(f"Unsupported site payload version: {version}")
        return dict(raw["card"])
    return upgrade_legacy_payload(raw)


def from_wire_format(row: SiteRow | Mapping[str, Any]) -> CardData:
    if not isinstance(row, SiteRow):
        try:
            row = SiteRow.model_validate(dict(row))
        except PydanticValidationError as exc:
            raise PayloadError(f"Malformed site row: {exc.error_count()} error(s)") from exc

    body = _decode_payload(row.data)
    for column in _ROW_COLUMNS:
        body.pop(column, None)
    try:
        return CardData.model_validate(
            {
                **body,
                "id": row.id or "",
                "internal_name": row.internal_name,
                "is_published": row.is_published,
            }
        )
    except PydanticValidationError as exc:
        raise PayloadError(
            f"Site payload for {row.id or '<unsaved>'} failed validation: {exc.error_count()} error(s)"
        ) from exc


__all__ = [
    "from_wire_format",
    "serialize_card",
    "to_wire_format",
    "upgrade_legacy_payload",
]
