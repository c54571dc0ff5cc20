# ABOUTME: Windowed, jittered, retry-aware batch extraction over a harvested link list
# ABOUTME: Per-link failures become skips in a BatchReport; results keep input order

import asyncio
import random
from collections.abc import Callable

from wechat2md.config import Config
from wechat2md.extraction.article import ArticleExtractor
from wechat2md.models import ArticleRecord, BatchReport, SkipReason, UnitOutcome
from wechat2md.utils.logging import get_logger
from wechat2md.utils.retry import RetryState, SleepFunc

# Called with (completed, total): once with completed=0 before the first window, then after each unit
ProgressCallback = Callable[[int, int], None]


class BatchOrchestrator:
    """Drive fetch-parse-convert units in fixed-size concurrent windows."""

    def __init__(
        self,
        config: Config,
        extractor: ArticleExtractor,
        sleep: SleepFunc = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.batch_size = config.batch_size
        self.delay_range = (config.request_delay_min, config.request_delay_max)
        self.batch_delay = config.batch_delay
        self.max_attempts = config.max_retries + 1
        self.extractor = extractor
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.logger = get_logger(__name__)

    async def extract_all(self, links: list[str]) -> list[ArticleRecord]:
        """Extract every link; only successes are returned, in input order."""
        report = await self.run(links)
        return report.articles

    async def run(self, links: list[str], on_progress: ProgressCallback | None = None) -> BatchReport:
        """Extract every link and keep the skip reasons alongside the records."""
        outcomes: list[UnitOutcome] = []
        completed = 0

        async def tracked(url: str) -> UnitOutcome:
            nonlocal completed
            outcome = await self._run_unit(url)
            completed += 1
            if on_progress is not None:
                on_progress(completed, len(links))
            return outcome

        windows = [links[i : i + self.batch_size] for i in range(0, len(links), self.batch_size)]

        self.logger.info("Starting batch extraction", link_count=len(links), windows=len(windows))
        if on_progress is not None:
            on_progress(0, len(links))

        for index, window in enumerate(windows, start=1):
            if index > 1:
                await self._sleep(self.batch_delay)

            self.logger.info("Processing window", window=index, of=len(windows), size=len(window))
            # gather preserves argument order, so outcomes follow the input list
            outcomes.extend(await asyncio.gather(*(tracked(url) for url in window)))

        report = BatchReport(outcomes=outcomes)
        self.logger.info(
            "Batch extraction completed",
            total=len(links),
            successful=len(report.articles),
            skipped=len(report.skipped),
        )
        return report

    async def _run_unit(self, url: str) -> UnitOutcome:
        await self._sleep(self._rng.uniform(*self.delay_range))

        state = RetryState(max_attempts=self.max_attempts)
        try:
            record = await self.extractor.extract(url, state=state)
        except Exception as e:
            skip = SkipReason.from_error(e, attempts=state.attempts_made)
            self.logger.warning("Skipping article", url=url, kind=skip.kind, reason=skip.message, attempts=skip.attempts)
            return UnitOutcome(url=url, skip=skip)

        return UnitOutcome(url=url, record=record)
