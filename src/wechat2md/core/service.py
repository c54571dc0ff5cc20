# ABOUTME: High-level service API composing fetcher, parser, converter, harvester and orchestrator
# ABOUTME: Validates boundary payloads and turns whole-operation failures into {kind, message} errors

from __future__ import annotations

import asyncio
import random
from datetime import UTC, datetime
from typing import Any

from wechat2md.browser.base import BrowserSessionFactory
from wechat2md.browser.playwright import playwright_session_factory
from wechat2md.config import Config, get_config
from wechat2md.core.orchestrator import BatchOrchestrator, ProgressCallback
from wechat2md.errors import ExtractionError, LinkDiscoveryEmptyError
from wechat2md.extraction.article import ArticleExtractor
from wechat2md.extraction.fetcher import DocumentFetcher
from wechat2md.extraction.harvester import LinkHarvester
from wechat2md.extraction.links import scan_static_links
from wechat2md.extraction.markdown import MarkdownConverter
from wechat2md.extraction.parser import ContentParser
from wechat2md.models import ArticleRecord, BatchReport, ExtractionMode, ExtractionRequest, UnitOutcome
from wechat2md.utils.logging import get_logger, with_async_operation_context
from wechat2md.utils.retry import SleepFunc


def success_payload(report: BatchReport) -> dict[str, Any]:
    """Boundary shape for a completed request; skipped links are listed with their reasons."""
    articles = report.articles
    return {
        "success": True,
        "data": {
            "articles": [article.to_payload() for article in articles],
            "total": len(articles),
            "skipped": [{"url": unit.url, **unit.skip.model_dump()} for unit in report.skipped if unit.skip],
            "extractedAt": datetime.now(UTC).isoformat(),
        },
    }


def error_payload(error: ExtractionError) -> dict[str, Any]:
    return {"success": False, "error": error.to_dict()}


class ExtractionService:
    """Entry point for single-article and album extraction."""

    def __init__(
        self,
        config: Config | None = None,
        fetcher: DocumentFetcher | None = None,
        session_factory: BrowserSessionFactory | None = None,
        sleep: SleepFunc = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.config = config or get_config()
        rng = rng or random.Random()
        self.fetcher = fetcher or DocumentFetcher(self.config, sleep=sleep)
        self.extractor = ArticleExtractor(self.fetcher, ContentParser(self.config), MarkdownConverter(self.config))
        self.harvester = LinkHarvester(
            self.config,
            session_factory or playwright_session_factory(self.config),
            sleep=sleep,
            rng=rng,
        )
        self.orchestrator = BatchOrchestrator(self.config, self.extractor, sleep=sleep, rng=rng)
        self.logger = get_logger(__name__)

    @with_async_operation_context("extract_article")
    async def extract_article(self, url: str) -> ArticleRecord:
        """Extract one article; failures propagate to the caller."""
        return await self.extractor.extract(url)

    @with_async_operation_context("discover_links")
    async def discover_links(self, request: ExtractionRequest) -> list[str]:
        """Find the album's article links using the requested mode.

        Raises:
            BrowserUnavailableError: Browser mode without an automatable runtime
            LinkDiscoveryEmptyError: Discovery finished with zero links
        """
        if request.mode == ExtractionMode.STATIC:
            page = await self.fetcher.fetch_with_retry(request.url)
            links = scan_static_links(page, request.max_count)
        else:
            links = await self.harvester.harvest(request.url, request.max_count)

        if not links:
            raise LinkDiscoveryEmptyError(
                "No article links found; the page structure may have changed or the album requires login",
                details={"url": request.url, "mode": request.mode.value},
            )
        return links.to_list(request.max_count)

    @with_async_operation_context("extract_album")
    async def extract_album(
        self, request: ExtractionRequest, on_progress: ProgressCallback | None = None
    ) -> BatchReport:
        """Discover an album's links and extract them in batches."""
        links = await self.discover_links(request)
        return await self.orchestrator.run(links, on_progress=on_progress)

    async def handle(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Serve one boundary request, returning a success or structured error payload."""
        try:
            request = ExtractionRequest.from_payload(payload, max_count_ceiling=self.config.album_max_count)
            if request.is_album:
                report = await self.extract_album(request)
            else:
                record = await self.extract_article(request.url)
                report = BatchReport(outcomes=[UnitOutcome(url=record.url, record=record)])
        except ExtractionError as e:
            self.logger.error("Extraction request failed", kind=e.kind, error=e.message)
            return error_payload(e)

        return success_payload(report)

    async def close(self) -> None:
        await self.fetcher.close()

    async def __aenter__(self) -> ExtractionService:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
