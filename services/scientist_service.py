"""Scientist record lifecycle.

Wraps `dal.scientist_dal.ScientistDAL` with the rules that involve more than
one row operation: required fields, default colors, partial updates and the
release of stored images.

Image release is best effort. When a record's image is replaced or the
record is deleted, the old asset is destroyed first and the outcome is only
logged; the record change goes ahead either way, so a failed release can
leave an orphaned image behind.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

from dal.scientist_dal import ScientistDAL
from models.scientist_record import ScientistRecord
from services.color_picker import ColorPicker
from utils.errors import NotFoundError, ValidationError

LOGGER = logging.getLogger(__name__)

# wire name -> column name for fields a PATCH may change
UPDATABLE_FIELDS = {
    "name": "name",
    "subject": "subject",
    "title": "title",
    "description": "description",
    "achievements": "achievements",
    "birthYear": "birth_year",
    "deathYear": "death_year",
    "color": "color",
}
_YEAR_FIELDS = ("birthYear", "deathYear")


class AssetReleaser(Protocol):
    async def destroy(self, asset_id: str) -> str: ...


def _clean(value: Any) -> Optional[str]:
    """Treat None and blank strings as absent; other values are kept as submitted."""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _parse_year(field: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer year") from exc


def validate_create_fields(fields: Mapping[str, Any]) -> Dict[str, str]:
    """Return the cleaned `name` and `subject`, or raise ValidationError."""
    cleaned = {key: _clean(fields.get(key)) for key in ("name", "subject")}
    missing = [key for key, val in cleaned.items() if val is None]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")
    return cleaned


class ScientistService:
    """Create, read, update and delete scientist records.

    Args:
        dal: Persistence for SCIENTIST rows.
        assets: Store used to release images that are replaced or orphaned.
        colors: Source of default accent colors.
    """

    def __init__(self, dal: ScientistDAL, assets: AssetReleaser, colors: Optional[ColorPicker] = None) -> None:
        self.dal = dal
        self.assets = assets
        self.colors = colors or ColorPicker()

    async def create(self, fields: Mapping[str, Any], image_id: Optional[str]) -> ScientistRecord:
        """Create a record from `name`, `subject`, an optional `color` and an image.

        Other optional fields are only settable through `update`.
        """
        required = validate_create_fields(fields)
        if not image_id:
            raise ValidationError("Please upload an image file")

        record = ScientistRecord(
            id=None,
            name=required["name"],
            subject=required["subject"],
            color=_clean(fields.get("color")) or self.colors.pick(),
            image=image_id,
        )
        stored = await self.dal.create_scientist(record)
        LOGGER.info("Created scientist %s (%s)", stored.id, stored.name)
        return stored

    async def list(self) -> List[ScientistRecord]:
        records = await self.dal.list_scientists()
        LOGGER.debug("Found %d scientists", len(records))
        return records

    async def get(self, scientist_id: str) -> ScientistRecord:
        record = await self.dal.get_scientist_by_id(scientist_id)
        if record is None:
            raise NotFoundError("Scientist not found")
        return record

    async def update(
        self, scientist_id: str, fields: Mapping[str, Any], image_id: Optional[str] = None
    ) -> ScientistRecord:
        """Apply the non-blank fields in `fields` and optionally swap the image.

        When `image_id` is given and the record already has an image, the old
        image is released once before the new identifier is stored.
        """
        record = await self.get(scientist_id)

        changes: Dict[str, Any] = {}
        for wire_name, column in UPDATABLE_FIELDS.items():
            value = _clean(fields.get(wire_name))
            if value is None:
                continue
            changes[column] = _parse_year(wire_name, value) if wire_name in _YEAR_FIELDS else value

        if image_id:
            if record.image:
                await self.release_image(record.image)
            changes["image"] = image_id

        await self.dal.update_scientist(scientist_id, **changes)

        updated = await self.dal.get_scientist_by_id(scientist_id)
        if updated is None:
            raise NotFoundError("Scientist not found")
        return updated

    async def delete(self, scientist_id: str) -> None:
        record = await self.get(scientist_id)
        if record.image:
            await self.release_image(record.image)
        if not await self.dal.delete_scientist(scientist_id):
            raise NotFoundError("Scientist not found")
        LOGGER.info("Deleted scientist %s", scientist_id)

    async def release_image(self, asset_id: str) -> bool:
        """Destroy a stored image; failures are logged, never raised."""
        try:
            result = await self.assets.destroy(asset_id)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            LOGGER.warning("Failed to release image %s: %s", asset_id, exc)
            return False
        LOGGER.info("Released image %s: %s", asset_id, result)
        return True
