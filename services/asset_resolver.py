"""Derive delivery URLs from stored image asset identifiers.

URLs follow an image-CDN style layout::

    {base}/image/upload/{asset_id}                         original
    {base}/image/upload/c_fill,h_200,q_80,w_200/{asset_id}  thumbnail

The transformation segment is a comma-separated list of `key_value` pairs
sorted by key. Nothing here performs I/O; the same inputs always give the
same URL.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

_ASSET_ID_RE = re.compile(r"^[A-Za-z0-9_-]+(?:/[A-Za-z0-9_-]+)*$")
_PARAM_RE = re.compile(r"^([a-z])_([A-Za-z0-9]+)$")

_KEYS = {"c": "crop", "h": "height", "q": "quality", "w": "width"}
_NUMERIC = ("height", "quality", "width")

# renders never exceed the envelope uploads are bounded to
MAX_DIMENSION = 1000
MAX_QUALITY = 100


@dataclass(frozen=True)
class Transformation:
    """A render recipe applied to an image at delivery time."""

    width: Optional[int] = None
    height: Optional[int] = None
    crop: Optional[str] = None
    quality: Optional[int] = None

    def to_segment(self) -> str:
        values = {"c": self.crop, "h": self.height, "q": self.quality, "w": self.width}
        return ",".join(f"{key}_{val}" for key, val in sorted(values.items()) if val is not None)

    @classmethod
    def from_segment(cls, segment: str) -> "Transformation":
        """Parse a `c_fill,h_200,...` segment. Raises ValueError on anything else."""
        params: Dict[str, object] = {}
        for part in segment.split(","):
            match = _PARAM_RE.match(part)
            if not match or match.group(1) not in _KEYS:
                raise ValueError(f"Invalid transformation parameter: {part!r}")
            name = _KEYS[match.group(1)]
            value = match.group(2)
            if name in _NUMERIC:
                if not value.isdigit() or int(value) <= 0:
                    raise ValueError(f"Transformation {name} must be a positive integer")
                if name == "quality" and int(value) > MAX_QUALITY:
                    raise ValueError(f"Transformation quality must be at most {MAX_QUALITY}")
                if name != "quality" and int(value) > MAX_DIMENSION:
                    raise ValueError(f"Transformation {name} must be at most {MAX_DIMENSION}")
                params[name] = int(value)
            else:
                params[name] = value
        return cls(**params)


THUMBNAIL = Transformation(width=200, height=200, crop="fill", quality=80)
UPLOAD_LIMIT = Transformation(width=1000, height=1000, crop="limit")


def validate_asset_id(asset_id: str) -> str:
    if not isinstance(asset_id, str) or not _ASSET_ID_RE.match(asset_id):
        raise ValueError(f"Malformed asset identifier: {asset_id!r}")
    return asset_id


def is_transformation_segment(segment: str) -> bool:
    """True when every comma-separated part has the `key_value` shape of a known key."""
    for part in segment.split(","):
        match = _PARAM_RE.match(part)
        if not match or match.group(1) not in _KEYS:
            return False
    return True


class AssetResolver:
    """Map asset identifiers onto full-size and thumbnail delivery URLs.

    Args:
        base_url: Public base URL of the media endpoint, without trailing slash.
        thumbnail: Transformation used for thumbnail URLs.
    """

    def __init__(self, base_url: str, thumbnail: Transformation = THUMBNAIL) -> None:
        self.base_url = base_url.rstrip("/")
        self.thumbnail = thumbnail

    def url(self, asset_id: str, transformation: Optional[Transformation] = None) -> str:
        validate_asset_id(asset_id)
        segment = transformation.to_segment() if transformation else ""
        if segment:
            return f"{self.base_url}/image/upload/{segment}/{asset_id}"
        return f"{self.base_url}/image/upload/{asset_id}"

    def resolve_full(self, asset_id: str) -> str:
        return self.url(asset_id)

    def resolve_thumbnail(self, asset_id: str) -> str:
        return self.url(asset_id, self.thumbnail)


def parse_delivery_path(path: str) -> Tuple[Optional[Transformation], str]:
    """Split `[transformation/]asset_id` back into its parts.

    The first path segment is a transformation when every comma-separated
    part has the shape of a known `key_value` pair; asset folders never do.
    Out-of-range values in such a segment are rejected, not reinterpreted.

    Raises:
        ValueError: If the path or the asset identifier is malformed.
    """
    head, sep, rest = path.strip("/").partition("/")
    if sep and is_transformation_segment(head):
        return Transformation.from_segment(head), validate_asset_id(rest)
    return None, validate_asset_id(path.strip("/"))
