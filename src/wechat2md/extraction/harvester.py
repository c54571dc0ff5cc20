# ABOUTME: Album link harvesting over a stateful browser session
# ABOUTME: Repeats discover -> merge -> scroll until the target count, stagnation limit or round ceiling

import asyncio
import random

from wechat2md.browser.base import BrowserSession, BrowserSessionFactory, WaitPolicy
from wechat2md.config import Config
from wechat2md.extraction.links import LINK_DISCOVERY_SCRIPT, LinkSet
from wechat2md.utils.logging import get_logger
from wechat2md.utils.retry import SleepFunc


class LinkHarvester:
    """Discover article links behind an album's lazy-loading list."""

    def __init__(
        self,
        config: Config,
        session_factory: BrowserSessionFactory,
        sleep: SleepFunc = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.max_rounds = config.harvest_max_rounds
        self.stagnant_limit = config.harvest_stagnant_rounds
        self.pause_range = (config.scroll_pause_min, config.scroll_pause_max)
        self.session_factory = session_factory
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.logger = get_logger(__name__)

    async def harvest(self, album_url: str, max_count: int | None = None) -> LinkSet:
        """Harvest article links from ``album_url``.

        Raises:
            BrowserUnavailableError: If the session factory cannot provide a browser
            BrowserSessionError: If the page fails to load, evaluate or scroll
        """
        session = await self.session_factory()
        try:
            links = await self._harvest_with_session(session, album_url, max_count)
        finally:
            await session.close()

        links.truncate(max_count)
        self.logger.info("Harvest finished", album_url=album_url, link_count=len(links), max_count=max_count)
        return links

    async def _harvest_with_session(self, session: BrowserSession, album_url: str, max_count: int | None) -> LinkSet:
        await session.navigate(album_url, WaitPolicy.NETWORK_IDLE)

        links = LinkSet()
        stagnant_rounds = 0

        for round_number in range(1, self.max_rounds + 1):
            found = await session.evaluate_in_page(LINK_DISCOVERY_SCRIPT) or []
            added = links.extend(found)

            self.logger.debug(
                "Harvest round",
                round=round_number,
                candidates=len(found),
                added=added,
                total=len(links),
            )

            if max_count is not None and len(links) >= max_count:
                self.logger.info("Reached requested link count", round=round_number, total=len(links))
                break

            stagnant_rounds = 0 if added else stagnant_rounds + 1
            if stagnant_rounds >= self.stagnant_limit:
                self.logger.info("Harvest converged", round=round_number, total=len(links))
                break

            await session.scroll_to_bottom()
            await self._sleep(self._rng.uniform(*self.pause_range))
        else:
            self.logger.warning("Harvest hit the round ceiling", rounds=self.max_rounds, total=len(links))

        return links
