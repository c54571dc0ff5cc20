# ABOUTME: Image source selection shared by body parsing and Markdown conversion
# ABOUTME: Prefers lazy-load attributes, drops placeholders and pixels, keeps trusted CDN URLs over HTTPS

from collections.abc import Iterable, Sequence
from typing import Any, Protocol
from urllib.parse import urlsplit

DEFERRED_SOURCE_ATTRIBUTES = ("data-src", "data-original")
PLACEHOLDER_TOKENS = ("placeholder", "loading")
TRACKING_PIXEL_PREFIX = "data:image/gif;base64,R0lGODlhAQABAIAAAAAAAP"


class HasAttributes(Protocol):
    """Anything exposing attribute lookup by name, such as a BeautifulSoup Tag."""

    def get(self, key: str, default: Any = None) -> Any: ...


def _attribute(node: HasAttributes, name: str) -> str:
    value = node.get(name)
    if isinstance(value, list):  # multi-valued attributes come back as lists
        value = " ".join(value)
    return (value or "").strip()


def candidate_source(node: HasAttributes) -> str:
    """Deferred-load attribute first, eager ``src`` last."""
    for name in (*DEFERRED_SOURCE_ATTRIBUTES, "src"):
        value = _attribute(node, name)
        if value:
            return value
    return ""


def is_placeholder(url: str) -> bool:
    lowered = url.lower()
    if lowered.startswith("data:") or url.startswith(TRACKING_PIXEL_PREFIX):
        return True
    return any(token in lowered for token in PLACEHOLDER_TOKENS)


def is_trusted_host(url: str, trusted_hosts: Sequence[str]) -> bool:
    host = (urlsplit(url).hostname or "").lower()
    return any(host == trusted or host.endswith("." + trusted) for trusted in trusted_hosts)


def force_https(url: str) -> str:
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("http://"):
        return "https://" + url[len("http://") :]
    return url


def select_image_url(node: HasAttributes, trusted_hosts: Sequence[str]) -> str | None:
    """Return the acceptable HTTPS image URL for ``node``, or None."""
    source = candidate_source(node)
    if not source or is_placeholder(source):
        return None

    url = force_https(source)
    if not url.startswith("https://") or not is_trusted_host(url, trusted_hosts):
        return None
    return url


def collect_image_urls(nodes: Iterable[HasAttributes], trusted_hosts: Sequence[str]) -> list[str]:
    """Accepted image URLs in document order, deduplicated by exact match."""
    urls: list[str] = []
    seen: set[str] = set()
    for node in nodes:
        url = select_image_url(node, trusted_hosts)
        if url and url not in seen:
            seen.add(url)
            urls.append(url)
    return urls
