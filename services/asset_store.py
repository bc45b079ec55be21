"""Storage for uploaded scientist portraits.

Images are written under a media directory and addressed by opaque asset
identifiers of the form `<folder>/<hex>`. Uploads are bounded to a
1000x1000 envelope before they are stored; every other size is derived at
delivery time from the stored original.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from services.asset_resolver import UPLOAD_LIMIT, Transformation, validate_asset_id
from services.image_transform import ImageTransformer
from utils.errors import AssetStoreError, NotFoundError, ValidationError

LOGGER = logging.getLogger(__name__)


class LocalAssetStore:
    """Filesystem-backed image store.

    Args:
        root_dir: Directory that holds every stored asset.
        folder: Folder prefix for new asset identifiers.
        upload_limit: Transformation applied to every upload before storage.
        transformer: Image renderer; a default `ImageTransformer` when omitted.
    """

    def __init__(
        self,
        root_dir: Path | str,
        folder: str = "scientists",
        upload_limit: Transformation = UPLOAD_LIMIT,
        transformer: ImageTransformer | None = None,
    ) -> None:
        self.root_dir = Path(root_dir).expanduser()
        self.folder = folder
        self.upload_limit = upload_limit
        self.transformer = transformer or ImageTransformer()

    def _path_for(self, asset_id: str) -> Path:
        return self.root_dir / validate_asset_id(asset_id)

    async def upload(self, data: bytes, filename: str | None = None) -> str:
        """Store an image and return its new asset identifier.

        Raises:
            ValidationError: If `data` is not a decodable image.
            AssetStoreError: If the file cannot be written.
        """
        try:
            # Pillow work is blocking -> run in thread
            bounded, _ = await asyncio.to_thread(self.transformer.render, data, self.upload_limit)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        asset_id = f"{self.folder}/{uuid.uuid4().hex}"
        path = self._path_for(asset_id)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(bounded)
        except OSError as exc:
            raise AssetStoreError(f"Failed to store image {filename or asset_id}") from exc

        LOGGER.info("Stored image %s as %s (%d bytes)", filename or "<unnamed>", asset_id, len(bounded))
        return asset_id

    async def read(self, asset_id: str) -> bytes:
        """Return the stored bytes for `asset_id`.

        Raises:
            NotFoundError: If no asset is stored under that identifier.
        """
        path = self._path_for(asset_id)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError as exc:
            raise NotFoundError("Image not found") from exc

    async def destroy(self, asset_id: str) -> str:
        """Delete a stored asset. Returns "ok", or "not found" if it was already gone."""
        path = self._path_for(asset_id)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return "not found"
        except OSError as exc:
            raise AssetStoreError(f"Failed to delete image {asset_id}") from exc
        return "ok"
