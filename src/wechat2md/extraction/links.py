# ABOUTME: Article URL recognition, normalization and the insertion-ordered LinkSet
# ABOUTME: Also hosts the static single-page link scan and the in-page discovery script for browsers

import html
import json
import re
from collections.abc import Iterable, Iterator
from urllib.parse import parse_qs, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from wechat2md.models import ARTICLE_HOST

ARTICLE_PATH = "/s"
UNIQUE_ID_PARAM = "__biz"

ARTICLE_LINK_SELECTORS = [
    'a[href*="/s?"]',
    'a[href*="mp.weixin.qq.com/s"]',
    'a[href*="__biz="]',
    ".album_item a",
    ".article-item a",
    ".appmsg_item a",
    ".js_album_item a",
    'li a[href*="s?"]',
    'div a[href*="s?"]',
]

LINK_DATA_ATTRIBUTES = ["data-link", "data-url"]

ARTICLE_URL_PATTERN = re.compile(r"""https?://mp\.weixin\.qq\.com/s\?[^"'\s<>]+""")

# Runs inside the album page; returns raw candidate strings for normalize_article_url.
LINK_DISCOVERY_SCRIPT = """
() => {
  const selectors = %(selectors)s;
  const dataAttributes = %(data_attributes)s;
  const found = [];
  for (const selector of selectors) {
    for (const el of document.querySelectorAll(selector)) {
      const href = el.getAttribute('href');
      if (href) found.push(href);
    }
  }
  for (const attr of dataAttributes) {
    for (const el of document.querySelectorAll('[' + attr + ']')) {
      const value = el.getAttribute(attr);
      if (value) found.push(value);
    }
  }
  const pattern = new RegExp(%(pattern)s, 'g');
  const markup = document.documentElement.outerHTML;
  for (const match of markup.match(pattern) || []) found.push(match);
  return found;
}
""" % {
    "selectors": json.dumps(ARTICLE_LINK_SELECTORS),
    "data_attributes": json.dumps(LINK_DATA_ATTRIBUTES),
    "pattern": json.dumps(ARTICLE_URL_PATTERN.pattern),
}


def _is_article_path(path: str) -> bool:
    # Articles live at /s or /s/<id>, never at /search or /safe
    return path == ARTICLE_PATH or path.startswith(ARTICLE_PATH + "/")


def normalize_article_url(raw: str) -> str | None:
    """Resolve a candidate href to a canonical HTTPS article URL, or None if it is not one."""
    if not isinstance(raw, str):
        return None
    candidate = html.unescape(raw.strip())
    if not candidate or candidate.startswith(("javascript:", "#")):
        return None

    if candidate.startswith("//"):
        candidate = "https:" + candidate
    elif candidate.startswith("/"):
        candidate = f"https://{ARTICLE_HOST}{candidate}"
    elif not candidate.startswith(("http://", "https://")):
        candidate = f"https://{ARTICLE_HOST}/s/{candidate}"

    parts = urlsplit(candidate)
    host = (parts.hostname or "").lower()
    if host != ARTICLE_HOST or not _is_article_path(parts.path):
        return None
    if not parse_qs(parts.query).get(UNIQUE_ID_PARAM):
        return None

    return urlunsplit(("https", host, parts.path, parts.query, ""))


class LinkSet:
    """Deduplicated, insertion-ordered article URLs for one harvesting session."""

    def __init__(self, urls: Iterable[str] = ()):
        self._urls: dict[str, None] = {}
        self.extend(urls)

    def add(self, raw: str) -> bool:
        """Add ``raw`` if it is a new article URL; return whether the set grew."""
        url = normalize_article_url(raw)
        if url is None or url in self._urls:
            return False
        self._urls[url] = None
        return True

    def extend(self, raws: Iterable[str]) -> int:
        """Add many candidates; return how many were new."""
        return sum(1 for raw in raws if self.add(raw))

    def to_list(self, max_count: int | None = None) -> list[str]:
        urls = list(self._urls)
        return urls[:max_count] if max_count is not None else urls

    def truncate(self, max_count: int | None) -> None:
        if max_count is not None:
            self._urls = dict.fromkeys(self.to_list(max_count))

    def __contains__(self, raw: object) -> bool:
        return isinstance(raw, str) and normalize_article_url(raw) in self._urls

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._urls))

    def __len__(self) -> int:
        return len(self._urls)

    def __repr__(self) -> str:
        return f"LinkSet({len(self)} links)"


def scan_static_links(markup: str, max_count: int | None = None) -> LinkSet:
    """Discover article links in one static album page.

    Structural selectors and data attributes run first; the raw-markup regex sweep
    only runs when they found nothing.
    """
    document = BeautifulSoup(markup, "html.parser")
    links = LinkSet()

    for selector in ARTICLE_LINK_SELECTORS:
        links.extend(element.get("href", "") for element in document.select(selector))
        if max_count is not None and len(links) >= max_count:
            break

    for attribute in LINK_DATA_ATTRIBUTES:
        links.extend(element.get(attribute, "") for element in document.find_all(attrs={attribute: True}))

    if not links:
        links.extend(ARTICLE_URL_PATTERN.findall(markup))

    links.truncate(max_count)
    return links
