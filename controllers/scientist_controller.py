from fastapi import Request, UploadFile
from typing import Any, Dict, List, Mapping, Optional

from models.scientist_record import ScientistRecord
from services.asset_resolver import AssetResolver
from services.scientist_service import ScientistService, validate_create_fields
from utils.errors import ValidationError
from utils.media_validation import read_image_bytes


def serialize_scientist(record: ScientistRecord, resolver: AssetResolver) -> Dict[str, Any]:
    """Return the JSON document for `record` with derived image URLs.

    The stored asset identifier is replaced by its full-size URL and a
    `thumbnail` URL is added. Records without an image get neither.
    """
    doc = record.to_document()
    if record.image:
        doc["image"] = resolver.resolve_full(record.image)
        doc["thumbnail"] = resolver.resolve_thumbnail(record.image)
    return doc


def _has_file(image: Optional[UploadFile]) -> bool:
    return image is not None and bool(image.filename)


async def _store_upload(request: Request, image: UploadFile) -> str:
    """Validate an uploaded image and store it; returns the new asset id."""
    data = await read_image_bytes(image)
    return await request.app.state.asset_store.upload(data, image.filename)


async def list_scientists(request: Request) -> List[Dict[str, Any]]:
    service: ScientistService = request.app.state.scientist_service
    resolver: AssetResolver = request.app.state.asset_resolver
    records = await service.list()
    return [serialize_scientist(r, resolver) for r in records]


async def get_scientist(request: Request, scientist_id: str) -> Dict[str, Any]:
    service: ScientistService = request.app.state.scientist_service
    record = await service.get(scientist_id)
    return serialize_scientist(record, request.app.state.asset_resolver)


async def create_scientist(
    request: Request, fields: Mapping[str, Any], image: Optional[UploadFile]
) -> Dict[str, Any]:
    """Create a scientist from form fields and an uploaded portrait.

    Args:
        request: FastAPI Request (used to access app.state for shared services).
        fields: Submitted form fields; `name` and `subject` are required.
        image: Uploaded image file; required.

    Returns:
        The created record with derived `image` and `thumbnail` URLs.

    Raises:
        ValidationError: If the image or a required field is missing, or the upload is rejected.
    """
    service: ScientistService = request.app.state.scientist_service
    if not _has_file(image):
        raise ValidationError("Please upload an image file")
    validate_create_fields(fields)

    asset_id = await _store_upload(request, image)
    try:
        record = await service.create(fields, asset_id)
    except Exception:
        # the row was never written, so the upload has no owner
        await service.release_image(asset_id)
        raise
    return serialize_scientist(record, request.app.state.asset_resolver)


async def update_scientist(
    request: Request, scientist_id: str, fields: Mapping[str, Any], image: Optional[UploadFile]
) -> Dict[str, Any]:
    """Apply a partial update, replacing the portrait when a new file is sent."""
    service: ScientistService = request.app.state.scientist_service

    # Fail with 404 before storing a file nobody will reference
    await service.get(scientist_id)

    if not _has_file(image):
        record = await service.update(scientist_id, fields)
        return serialize_scientist(record, request.app.state.asset_resolver)

    asset_id = await _store_upload(request, image)
    try:
        record = await service.update(scientist_id, fields, image_id=asset_id)
    except Exception:
        await service.release_image(asset_id)
        raise
    return serialize_scientist(record, request.app.state.asset_resolver)


async def delete_scientist(request: Request, scientist_id: str) -> Dict[str, str]:
    service: ScientistService = request.app.state.scientist_service
    await service.delete(scientist_id)
    return {"message": "Scientist deleted"}
