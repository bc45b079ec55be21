"""Validation helpers for uploaded images."""

from typing import Optional

from fastapi import UploadFile

from utils.errors import ValidationError

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif"}

MAX_UPLOAD_BYTES = 5 * 1024 * 1024


def validate_image_filename(filename: Optional[str]) -> None:
    """Reject filenames without one of the allowed image extensions."""
    if not filename or "." not in filename:
        raise ValidationError("Only image files may be uploaded (jpg, jpeg, png, gif).")
    ext = filename.rsplit(".", 1)[-1].lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Only image files may be uploaded (jpg, jpeg, png, gif).")


async def read_image_bytes(image_file: UploadFile, max_bytes: int = MAX_UPLOAD_BYTES) -> bytes:
    """Read validated image bytes from an upload.

    Reads at most `max_bytes + 1` bytes so oversized uploads are rejected
    without buffering the whole body.
    """
    validate_image_filename(image_file.filename)
    data = await image_file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValidationError(f"Uploaded image exceeds the {max_bytes // (1024 * 1024)} MB limit.")
    if not data:
        raise ValidationError("Uploaded image is empty.")
    return data
