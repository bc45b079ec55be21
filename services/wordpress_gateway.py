"""Client for the WordPress REST API.

Pages and posts are fetched with `_embed` so featured media and authors come
back inline. The `content.rendered` HTML of every returned document is run
through the content normalizer before it is handed back.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from utils.errors import NotFoundError, UpstreamError

LOGGER = logging.getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}

Document = Dict[str, Any]


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class WordPressGateway:
    """Fetch and normalize WordPress pages and posts.

    Args:
        client: Shared async HTTP client.
        base_url: WordPress site root, e.g. `http://wordpress:80`.
        normalizer: Function applied to each document's rendered HTML.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str, normalizer: Callable[[Optional[str]], str]) -> None:
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.normalizer = normalizer

    def api_url(self, path: str) -> str:
        return f"{self.base_url}/wp-json/wp/v2/{path.lstrip('/')}"

    async def _get_json(self, path: str, params: Dict[str, str], failure_message: str) -> Any:
        url = self.api_url(path)
        query = {**params, "_embed": ""}
        LOGGER.info("Requesting WordPress API: %s %s", url, params)
        try:
            response = await self.client.get(url, params=query, headers=JSON_HEADERS)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            LOGGER.error("WordPress API returned %s for %s", exc.response.status_code, exc.request.url)
            raise UpstreamError(
                failure_message,
                status=exc.response.status_code,
                status_text=exc.response.reason_phrase,
                body=_response_body(exc.response),
                request_url=str(exc.request.url),
                base_url=self.base_url,
                cause=str(exc),
            ) from exc
        except httpx.RequestError as exc:
            LOGGER.error("WordPress API request to %s failed: %s", url, exc)
            raise UpstreamError(
                failure_message,
                request_url=url,
                base_url=self.base_url,
                cause=str(exc) or exc.__class__.__name__,
            ) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                failure_message,
                status=response.status_code,
                status_text=response.reason_phrase,
                body=response.text,
                request_url=str(response.request.url),
                base_url=self.base_url,
                cause="WordPress API returned a non-JSON body",
            ) from exc

    def normalize_document(self, document: Document) -> Document:
        """Normalize `document["content"]["rendered"]` in place, when present."""
        content = document.get("content")
        if isinstance(content, dict) and content.get("rendered"):
            content["rendered"] = self.normalizer(content["rendered"])
        return document

    def _expect(self, payload: Any, kind: type, failure_message: str, path: str) -> Any:
        if not isinstance(payload, kind):
            raise UpstreamError(
                failure_message,
                request_url=self.api_url(path),
                base_url=self.base_url,
                cause=f"Unexpected WordPress payload type: {type(payload).__name__}",
            )
        return payload

    async def fetch_page_by_slug(self, slug: str) -> Document:
        """Return the page whose slug is `slug`.

        Raises:
            NotFoundError: If WordPress has no page with that slug.
            UpstreamError: If the WordPress request fails.
        """
        message = "Unable to fetch WordPress content"
        pages = self._expect(await self._get_json("pages", {"slug": slug}, message), list, message, "pages")
        if not pages:
            LOGGER.info("No WordPress page found for slug %r", slug)
            raise NotFoundError("Page content not found")
        return self.normalize_document(self._expect(pages[0], dict, message, "pages"))

    async def fetch_recent_posts(self) -> List[Document]:
        message = "Unable to fetch WordPress posts"
        posts = self._expect(await self._get_json("posts", {}, message), list, message, "posts")
        return [self.normalize_document(post) for post in posts if isinstance(post, dict)]

    async def fetch_post_by_id(self, post_id: int) -> Document:
        """Return a single post, normalized like pages and post lists."""
        message = "Unable to fetch post content"
        path = f"posts/{post_id}"
        post = self._expect(await self._get_json(path, {}, message), dict, message, path)
        return self.normalize_document(post)
