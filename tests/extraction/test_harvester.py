# ABOUTME: Tests for album link harvesting with a scripted fake browser session
# ABOUTME: Covers stagnation convergence, target-count stop, the round ceiling and session cleanup

import random
from unittest.mock import AsyncMock

import pytest

from wechat2md.browser.base import WaitPolicy
from wechat2md.config import Config
from wechat2md.errors import BrowserUnavailableError
from wechat2md.extraction.harvester import LinkHarvester

ALBUM_URL = "https://mp.weixin.qq.com/mp/appmsgalbum?__biz=MzA&action=getalbum&album_id=1"


def _article(mid: int) -> str:
    return f"https://mp.weixin.qq.com/s?__biz=MzA&mid={mid}&idx=1"


class FakeSession:
    """Browser session whose page reveals a scripted batch of links per evaluation."""

    def __init__(self, rounds: list[list[str]]):
        self.rounds = rounds
        self.evaluations = 0
        self.scrolls = 0
        self.navigations: list[tuple[str, WaitPolicy]] = []
        self.closed = False

    async def navigate(self, url, wait_policy=WaitPolicy.NETWORK_IDLE):
        self.navigations.append((url, wait_policy))

    async def evaluate_in_page(self, script):
        index = min(self.evaluations, len(self.rounds) - 1)
        self.evaluations += 1
        return self.rounds[index] if self.rounds else []

    async def scroll_to_bottom(self):
        self.scrolls += 1

    async def close(self):
        self.closed = True


def _harvester(session: FakeSession, **config_overrides) -> tuple[LinkHarvester, AsyncMock]:
    sleep = AsyncMock()

    async def factory():
        return session

    harvester = LinkHarvester(Config(**config_overrides), factory, sleep=sleep, rng=random.Random(0))
    return harvester, sleep


class TestLinkHarvester:
    """Test the discover, merge, scroll loop."""

    @pytest.mark.asyncio
    async def test_empty_album_stops_after_stagnation_limit(self):
        session = FakeSession([[]])
        harvester, sleep = _harvester(session)

        links = await harvester.harvest(ALBUM_URL)

        assert len(links) == 0
        assert session.evaluations == 5
        assert session.scrolls == 4
        assert sleep.await_count == 4
        assert session.closed

    @pytest.mark.asyncio
    async def test_navigation_waits_for_network_idle(self):
        session = FakeSession([[]])
        harvester, _ = _harvester(session)

        await harvester.harvest(ALBUM_URL)

        assert session.navigations == [(ALBUM_URL, WaitPolicy.NETWORK_IDLE)]

    @pytest.mark.asyncio
    async def test_growth_resets_stagnation(self):
        # Links accumulate over three rounds, then the list stops growing
        cumulative = [[_article(1)], [_article(1), _article(2)], [_article(1), _article(2), _article(3)]]
        session = FakeSession(cumulative)
        harvester, _ = _harvester(session)

        links = await harvester.harvest(ALBUM_URL)

        assert links.to_list() == [_article(1), _article(2), _article(3)]
        assert session.evaluations == 3 + 5

    @pytest.mark.asyncio
    async def test_stops_at_max_count_and_truncates_in_discovery_order(self):
        session = FakeSession([[_article(i) for i in range(1, 11)]])
        harvester, _ = _harvester(session)

        links = await harvester.harvest(ALBUM_URL, max_count=4)

        assert links.to_list() == [_article(1), _article(2), _article(3), _article(4)]
        assert session.evaluations == 1
        assert session.scrolls == 0

    @pytest.mark.asyncio
    async def test_round_ceiling_bounds_endless_growth(self):
        class EndlessSession(FakeSession):
            async def evaluate_in_page(self, script):
                self.evaluations += 1
                return [_article(self.evaluations)]

        session = EndlessSession([])
        harvester, _ = _harvester(session, harvest_max_rounds=50)

        links = await harvester.harvest(ALBUM_URL)

        assert session.evaluations == 50
        assert len(links) == 50

    @pytest.mark.asyncio
    async def test_scroll_pause_within_configured_range(self):
        session = FakeSession([[]])
        harvester, sleep = _harvester(session, scroll_pause_min=2.0, scroll_pause_max=4.0)

        await harvester.harvest(ALBUM_URL)

        assert all(2.0 <= call.args[0] <= 4.0 for call in sleep.await_args_list)

    @pytest.mark.asyncio
    async def test_session_closed_when_page_fails(self):
        session = FakeSession([[]])
        session.evaluate_in_page = AsyncMock(side_effect=RuntimeError("page crashed"))
        harvester, _ = _harvester(session)

        with pytest.raises(RuntimeError, match="page crashed"):
            await harvester.harvest(ALBUM_URL)

        assert session.closed

    @pytest.mark.asyncio
    async def test_unavailable_browser_propagates(self):
        async def factory():
            raise BrowserUnavailableError("no browser runtime")

        harvester = LinkHarvester(Config(), factory, sleep=AsyncMock())

        with pytest.raises(BrowserUnavailableError):
            await harvester.harvest(ALBUM_URL)
