import asyncio

from fastapi import Request
from fastapi.responses import Response

from services.asset_resolver import parse_delivery_path
from utils.errors import ValidationError

CACHE_CONTROL = "public, max-age=31536000, immutable"


async def get_media(request: Request, path: str) -> Response:
    """Controller to render a stored image for a delivery URL path.

    Args:
        request: FastAPI Request (to access app.state.asset_store and image_transformer).
        path: `[transformation/]asset_id` as produced by `AssetResolver`.

    Returns:
        FastAPI `Response` with the rendered image bytes and the image's MIME type.

    Raises:
        ValidationError: If the path or transformation is malformed.
        NotFoundError: If no image is stored under the asset id.
    """
    try:
        transformation, asset_id = parse_delivery_path(path)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    data = await request.app.state.asset_store.read(asset_id)

    transformer = request.app.state.image_transformer
    try:
        content, media_type = await asyncio.to_thread(transformer.render, data, transformation)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    # Asset ids are never reused, so derived renders can be cached forever
    return Response(content=content, media_type=media_type, headers={"Cache-Control": CACHE_CONTROL})
