"""FastAPI routes proxying WordPress content."""

from fastapi import APIRouter, HTTPException, Request

from controllers.wordpress_controller import get_page, get_post, get_recent_posts
from utils.errors import AppError

router = APIRouter(prefix="/wordpress", tags=["wordpress"])


@router.get("/pages/{slug}")
async def get_page_route(request: Request, slug: str):
    """Return the WordPress page for `slug` with normalized HTML."""
    try:
        return await get_page(request, slug)
    except (HTTPException, AppError):
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/posts")
async def get_posts_route(request: Request):
    try:
        return await get_recent_posts(request)
    except (HTTPException, AppError):
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/posts/{post_id}")
async def get_post_route(request: Request, post_id: int):
    try:
        return await get_post(request, post_id)
    except (HTTPException, AppError):
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
