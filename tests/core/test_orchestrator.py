# ABOUTME: Tests for windowed batch extraction over a mocked HTTP transport
# ABOUTME: Covers retry recovery, per-article skips, input ordering and pacing between windows

import random
from collections import defaultdict
from unittest.mock import AsyncMock

import httpx
import pytest

from wechat2md.config import Config
from wechat2md.core.orchestrator import BatchOrchestrator
from wechat2md.extraction.article import ArticleExtractor
from wechat2md.extraction.fetcher import DocumentFetcher
from wechat2md.extraction.markdown import MarkdownConverter
from wechat2md.extraction.parser import ContentParser
from wechat2md.extraction.user_agents import UserAgentRotator


def _url(mid: int) -> str:
    return f"https://mp.weixin.qq.com/s?__biz=MzA&mid={mid}&idx=1"


def _page(title: str) -> str:
    return f"<html><body><h1 id='activity-name'>{title}</h1><div id='js_content'><p>{title} body</p></div></body></html>"


class ScriptedTransport:
    """Answers each URL from a queue of responses; exceptions in the queue are raised."""

    def __init__(self, script: dict[str, list]):
        self.script = script
        self.calls: dict[str, int] = defaultdict(int)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        queue = self.script[url]
        step = queue[min(self.calls[url], len(queue) - 1)]
        self.calls[url] += 1
        if step == "timeout":
            raise httpx.ReadTimeout("timed out", request=request)
        if isinstance(step, int):
            return httpx.Response(step)
        return httpx.Response(200, text=step)


def _orchestrator(transport: ScriptedTransport, sleep: AsyncMock, **config_overrides) -> BatchOrchestrator:
    config = Config(**config_overrides)
    fetcher = DocumentFetcher(
        config,
        client=httpx.AsyncClient(transport=httpx.MockTransport(transport)),
        rotator=UserAgentRotator(["test-agent"]),
        sleep=sleep,
    )
    extractor = ArticleExtractor(fetcher, ContentParser(config), MarkdownConverter(config))
    return BatchOrchestrator(config, extractor, sleep=sleep, rng=random.Random(1))


class TestBatchOrchestrator:
    """Test batch extraction behaviour."""

    @pytest.mark.asyncio
    async def test_three_timeouts_then_success_yields_record(self):
        transport = ScriptedTransport({_url(1): ["timeout", "timeout", "timeout", _page("Recovered")]})
        orchestrator = _orchestrator(transport, AsyncMock())

        records = await orchestrator.extract_all([_url(1)])

        assert [record.title for record in records] == ["Recovered"]
        assert transport.calls[_url(1)] == 4

    @pytest.mark.asyncio
    async def test_four_timeouts_skip_the_article(self):
        transport = ScriptedTransport({_url(1): ["timeout"]})
        orchestrator = _orchestrator(transport, AsyncMock())

        report = await orchestrator.run([_url(1)])

        assert report.articles == []
        assert transport.calls[_url(1)] == 4
        skip = report.skipped[0].skip
        assert skip.kind == "network_error"
        assert skip.attempts == 4
        assert skip.retryable

    @pytest.mark.asyncio
    async def test_failures_do_not_affect_siblings_and_order_is_kept(self):
        transport = ScriptedTransport(
            {
                _url(1): [_page("One")],
                _url(2): [404],
                _url(3): ["<html><body><p>no container</p></body></html>"],
                _url(4): [_page("Four")],
                _url(5): ["timeout", _page("Five")],
            }
        )
        orchestrator = _orchestrator(transport, AsyncMock())

        report = await orchestrator.run([_url(i) for i in range(1, 6)])

        assert [record.title for record in report.articles] == ["One", "Four", "Five"]
        assert [outcome.url for outcome in report.outcomes] == [_url(i) for i in range(1, 6)]
        assert {outcome.url: outcome.skip.kind for outcome in report.skipped} == {
            _url(2): "network_error",
            _url(3): "content_not_found",
        }
        # Non-retryable failures are attempted once
        assert transport.calls[_url(2)] == 1

    @pytest.mark.asyncio
    async def test_pause_between_windows_and_jitter_per_unit(self):
        transport = ScriptedTransport({_url(i): [_page(str(i))] for i in range(1, 8)})
        sleep = AsyncMock()
        orchestrator = _orchestrator(
            transport, sleep, batch_size=3, batch_delay=8.0, request_delay_min=2.0, request_delay_max=5.0
        )

        await orchestrator.run([_url(i) for i in range(1, 8)])

        delays = [call.args[0] for call in sleep.await_args_list]
        assert delays.count(8.0) == 2
        jitter = [delay for delay in delays if delay != 8.0]
        assert len(jitter) == 7
        assert all(2.0 <= delay <= 5.0 for delay in jitter)

    @pytest.mark.asyncio
    async def test_empty_input(self):
        sleep = AsyncMock()
        orchestrator = _orchestrator(ScriptedTransport({}), sleep)

        assert await orchestrator.extract_all([]) == []
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_skip(self):
        orchestrator = _orchestrator(ScriptedTransport({}), AsyncMock())
        orchestrator.extractor = AsyncMock()
        orchestrator.extractor.extract.side_effect = KeyError("boom")

        report = await orchestrator.run([_url(1)])

        assert report.skipped[0].skip.kind == "unexpected_error"
        assert report.skipped[0].skip.attempts == 1

    @pytest.mark.asyncio
    async def test_progress_callback_counts_every_unit(self):
        transport = ScriptedTransport({_url(1): [_page("1")], _url(2): [404], _url(3): [_page("3")]})
        orchestrator = _orchestrator(transport, AsyncMock(), batch_size=2)
        progress = []

        await orchestrator.run([_url(1), _url(2), _url(3)], on_progress=lambda done, total: progress.append((done, total)))

        assert progress[0] == (0, 3)
        assert sorted(progress[1:]) == [(1, 3), (2, 3), (3, 3)]
