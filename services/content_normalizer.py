"""Post-processing for HTML rendered by WordPress.

The HTML is parsed with BeautifulSoup's `html.parser`, which recovers from
malformed markup instead of raising, and then passed through a fixed list of
rules. Every rule is a function `BeautifulSoup -> BeautifulSoup` that is
idempotent and does not depend on the other rules having run, so rules can be
applied in any order and any number of times.
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup, Tag

Rule = Callable[[BeautifulSoup], BeautifulSoup]

IMAGE_ALT_PLACEHOLDER = "image"

_WHITESPACE_RE = re.compile(r"\s+")


def add_class(tag: Tag, class_name: str) -> None:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    if class_name not in classes:
        tag["class"] = [*classes, class_name]


def lazy_load_images(soup: BeautifulSoup) -> BeautifulSoup:
    for img in soup.find_all("img"):
        if not img.has_attr("loading"):
            img["loading"] = "lazy"
        if not img.get("alt"):
            img["alt"] = IMAGE_ALT_PLACEHOLDER
        add_class(img, "responsive-image")
    return soup


def is_external_href(href: Optional[str]) -> bool:
    return bool(href) and not href.startswith(("/", "#"))


def mark_external_links(soup: BeautifulSoup) -> BeautifulSoup:
    """Open absolute links in a new tab without leaking the opener."""
    for link in soup.find_all("a"):
        if not is_external_href(link.get("href")):
            continue
        link["target"] = "_blank"
        link["rel"] = "noopener noreferrer"
        add_class(link, "external-link")
    return soup


def heading_id(text: str) -> str:
    """Lowercase `text` and replace each whitespace run with one hyphen.

    Surrounding whitespace is kept as a hyphen and equal headings produce
    equal ids.
    """
    return _WHITESPACE_RE.sub("-", text.lower())


def anchor_headings(soup: BeautifulSoup) -> BeautifulSoup:
    for heading in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        heading["id"] = heading_id(heading.get_text())
    return soup


def _is_table_wrapper(tag: Optional[Tag]) -> bool:
    if not isinstance(tag, Tag) or tag.name != "div":
        return False
    classes = tag.get("class") or []
    return "table-responsive" in classes


def wrap_tables(soup: BeautifulSoup) -> BeautifulSoup:
    for table in soup.find_all("table"):
        if not _is_table_wrapper(table.parent):
            table.wrap(soup.new_tag("div", attrs={"class": "table-responsive"}))
        add_class(table, "table")
    return soup


def mark_code_blocks(soup: BeautifulSoup) -> BeautifulSoup:
    for pre in soup.find_all("pre"):
        add_class(pre, "code-block")
    return soup


DEFAULT_RULES: Sequence[Rule] = (
    lazy_load_images,
    mark_external_links,
    anchor_headings,
    wrap_tables,
    mark_code_blocks,
)


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def normalize_html(html: Optional[str], rules: Sequence[Rule] = DEFAULT_RULES) -> str:
    """Apply `rules` to an HTML fragment and return the re-serialized fragment."""
    if not html:
        return ""
    soup = parse_html(html)
    for rule in rules:
        soup = rule(soup)
    return str(soup)


class ContentNormalizer:
    """Callable wrapper so the rule list can be injected where HTML is normalized."""

    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES) -> None:
        self.rules = tuple(rules)

    def __call__(self, html: Optional[str]) -> str:
        return normalize_html(html, self.rules)
