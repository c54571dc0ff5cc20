# ABOUTME: Capability interface the harvester drives: navigate, evaluate, scroll, close
# ABOUTME: Backends are built by a session factory so environment probing stays out of the core

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Protocol


class WaitPolicy(str, Enum):
    """When a navigation counts as finished."""

    LOAD = "load"
    DOM_CONTENT_LOADED = "domcontentloaded"
    NETWORK_IDLE = "networkidle"


class BrowserSession(Protocol):
    """A single stateful browser page."""

    async def navigate(self, url: str, wait_policy: WaitPolicy = WaitPolicy.NETWORK_IDLE) -> None:
        """Load ``url`` and wait according to ``wait_policy``."""
        ...

    async def evaluate_in_page(self, script: str) -> Any:
        """Evaluate ``script`` against the current document and return its result."""
        ...

    async def scroll_to_bottom(self) -> None:
        """Scroll the viewport to the end of the document to trigger lazy loading."""
        ...

    async def close(self) -> None:
        """Release the page and any runtime behind it."""
        ...


# Raises BrowserUnavailableError when no automatable runtime can be started.
BrowserSessionFactory = Callable[[], Awaitable[BrowserSession]]
