from typing import Any, Dict, List

from fastapi import Request

from services.wordpress_gateway import WordPressGateway


def _gateway(request: Request) -> WordPressGateway:
    return request.app.state.wordpress_gateway


async def get_page(request: Request, slug: str) -> Dict[str, Any]:
    return await _gateway(request).fetch_page_by_slug(slug)


async def get_recent_posts(request: Request) -> List[Dict[str, Any]]:
    return await _gateway(request).fetch_recent_posts()


async def get_post(request: Request, post_id: int) -> Dict[str, Any]:
    return await _gateway(request).fetch_post_by_id(post_id)
