from fastapi import APIRouter, HTTPException, Request

from controllers.media_controller import get_media
from utils.errors import AppError

router = APIRouter(prefix="/media", tags=["media"])


@router.get("/image/upload/{path:path}")
async def get_media_route(request: Request, path: str):
	"""Return image bytes for a derived image URL, rendering its transformation."""
	try:
		return await get_media(request, path)
	except (HTTPException, AppError):
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
