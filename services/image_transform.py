"""Image transformation service.

Provides a small OOP wrapper around Pillow that renders a
`services.asset_resolver.Transformation` over raw image bytes. Two crop
modes are understood:

* `limit` - shrink to fit inside width x height, never upscale.
* `fill`  - scale and center-crop to exactly width x height.

The output keeps the source image format. `quality` is honoured by the
formats that support it (JPEG, WebP) and ignored otherwise.

Example:
    transformer = ImageTransformer()
    thumb_bytes, mime = transformer.render(raw, THUMBNAIL)
"""
from __future__ import annotations

import io
from typing import Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from services.asset_resolver import Transformation

_QUALITY_FORMATS = {"JPEG", "WEBP"}


class ImageTransformer:
    """Render transformations over image bytes.

    Args:
        resample: Pillow resampling filter used for every resize.
    """

    def __init__(self, resample: int = Image.LANCZOS):
        self.resample = resample

    def open(self, data: bytes) -> Image.Image:
        """Decode `data` into a Pillow image.

        Raises:
            ValueError: If the bytes are not a supported image format, or the
                image has more pixels than Pillow's decompression-bomb limit.
        """
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except Image.DecompressionBombError as exc:
            raise ValueError("Image dimensions exceed the allowed pixel count") from exc
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("Uploaded bytes are not a supported image format") from exc
        return img

    def render(self, data: bytes, transformation: Transformation | None) -> Tuple[bytes, str]:
        """Apply `transformation` to `data`.

        Returns:
            A tuple of `(image_bytes, mime_type)`.
        """
        src = self.open(data)
        fmt = src.format or "PNG"
        mime = Image.MIME.get(fmt, "application/octet-stream")
        if transformation is None:
            return data, mime

        img = self._resize(src, transformation)

        save_kwargs = {}
        if fmt == "JPEG" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        if transformation.quality is not None and fmt in _QUALITY_FORMATS:
            save_kwargs["quality"] = transformation.quality

        out_io = io.BytesIO()
        img.save(out_io, format=fmt, **save_kwargs)
        return out_io.getvalue(), mime

    def _resize(self, img: Image.Image, transformation: Transformation) -> Image.Image:
        width = transformation.width or img.width
        height = transformation.height or img.height
        if transformation.crop == "fill":
            return ImageOps.fit(img, (width, height), self.resample)
        if transformation.crop in (None, "limit"):
            img = img.copy()
            img.thumbnail((width, height), self.resample)
            return img
        raise ValueError(f"Unsupported crop mode: {transformation.crop!r}")
