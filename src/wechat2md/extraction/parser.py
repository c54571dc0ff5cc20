# ABOUTME: Article field extraction through ordered selector-fallback chains over BeautifulSoup
# ABOUTME: Strategies are pure functions from a parsed document to an optional value; first valid wins

import re
from collections.abc import Callable, Sequence
from datetime import datetime
from zoneinfo import ZoneInfo

from bs4 import BeautifulSoup

from wechat2md.config import Config
from wechat2md.extraction.images import collect_image_urls
from wechat2md.models import UNKNOWN_TITLE, ParsedArticle
from wechat2md.utils.logging import get_logger

Strategy = Callable[[BeautifulSoup], str | None]
Validator = Callable[[str], bool]

PLACEHOLDER_TITLE = "微信公众平台"
YEAR_PATTERN = re.compile(r"\d{4}")
CREATE_TIME_PATTERN = re.compile(r"""(?:\bvar\s+ct|\bcreate_time)\s*[=:]\s*["']?(\d{10})["']?""")
PLATFORM_TIMEZONE = ZoneInfo("Asia/Shanghai")

NON_CONTENT_SELECTORS = [
    "script",
    "style",
    "noscript",
    ".qr-code",
    ".qr_code_pc",
    "#js_pc_qr_code",
    ".reward",
    ".reward_area",
    "#js_reward_area",
    ".share",
    ".share_notice",
]


def select_text(selector: str) -> Strategy:
    """Text of the first element matching ``selector``, inner whitespace runs collapsed to one space."""

    def strategy(document: BeautifulSoup) -> str | None:
        element = document.select_one(selector)
        return " ".join(element.get_text().split()) if element else None

    strategy.__name__ = f"select_text({selector!r})"
    return strategy


def meta_content(attribute: str, value: str) -> Strategy:
    """``content`` of the first ``<meta {attribute}="{value}">`` tag."""

    def strategy(document: BeautifulSoup) -> str | None:
        element = document.find("meta", attrs={attribute: value})
        content = element.get("content") if element else None
        return content.strip() if isinstance(content, str) else None

    strategy.__name__ = f"meta_content({attribute}={value!r})"
    return strategy


def select_markup(selector: str, remove: Sequence[str] = NON_CONTENT_SELECTORS) -> Strategy:
    """Inner markup of the first element matching ``selector`` after stripping non-content nodes."""

    def strategy(document: BeautifulSoup) -> str | None:
        element = document.select_one(selector)
        if element is None:
            return None
        for junk in element.select(", ".join(remove)):
            junk.decompose()
        return element.decode_contents().strip()

    strategy.__name__ = f"select_markup({selector!r})"
    return strategy


def script_create_time(document: BeautifulSoup) -> str | None:
    """Creation timestamp embedded in inline scripts, rendered in platform local time."""
    for script in document.find_all("script"):
        match = CREATE_TIME_PATTERN.search(script.string or "")
        if match:
            moment = datetime.fromtimestamp(int(match.group(1)), tz=PLATFORM_TIMEZONE)
            return moment.strftime("%Y-%m-%d %H:%M")
    return None


def run_chain(document: BeautifulSoup, chain: Sequence[Strategy], accept: Validator | None = None) -> str | None:
    """Evaluate strategies in order; the first non-empty value passing ``accept`` wins."""
    for strategy in chain:
        value = strategy(document)
        if value and (accept is None or accept(value)):
            return value
    return None


def is_real_title(value: str) -> bool:
    return value != PLACEHOLDER_TITLE


def has_year(value: str) -> bool:
    return YEAR_PATTERN.search(value) is not None


TITLE_CHAIN: list[Strategy] = [
    select_text("#activity-name"),
    select_text(".rich_media_title"),
    select_text("h1.title"),
    select_text("h1"),
    select_text(".article-title"),
    meta_content("property", "og:title"),
    select_text("title"),
]

BODY_CHAIN: list[Strategy] = [
    select_markup("#js_content"),
    select_markup(".rich_media_content"),
    select_markup(".article-content"),
    select_markup(".content"),
    select_markup("article"),
]

AUTHOR_CHAIN: list[Strategy] = [
    select_text("#js_name"),
    select_text(".rich_media_meta_text"),
    select_text(".author"),
    select_text(".article-author"),
    meta_content("name", "author"),
]

PUBLISH_TIME_CHAIN: list[Strategy] = [
    select_text("#publish_time"),
    select_text(".rich_media_meta_text"),
    select_text(".publish-time"),
    select_text(".article-time"),
    script_create_time,
]


class ContentParser:
    """Pull title, body markup, author, publish time and images out of an article page."""

    def __init__(self, config: Config):
        self.trusted_image_hosts = list(config.trusted_image_hosts)
        self.logger = get_logger(__name__)

    def parse(self, html: str) -> ParsedArticle:
        """Parse one article document.

        The body comes back empty when every body strategy misses; callers treat that as fatal.
        """
        document = BeautifulSoup(html, "html.parser")

        # Metadata and images are read before the body chain mutates the tree
        title = run_chain(document, TITLE_CHAIN, is_real_title) or UNKNOWN_TITLE
        author = run_chain(document, AUTHOR_CHAIN)
        publish_time = run_chain(document, PUBLISH_TIME_CHAIN, has_year)
        images = collect_image_urls(document.find_all("img"), self.trusted_image_hosts)
        body_markup = run_chain(document, BODY_CHAIN) or ""

        self.logger.debug(
            "Parsed article document",
            title=title,
            has_author=author is not None,
            has_publish_time=publish_time is not None,
            image_count=len(images),
            body_length=len(body_markup),
        )

        return ParsedArticle(
            title=title,
            body_markup=body_markup,
            author=author,
            publish_time=publish_time,
            images=images,
        )
