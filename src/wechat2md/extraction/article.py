# ABOUTME: Per-article pipeline: fetch with retry, parse selector chains, convert to Markdown
# ABOUTME: Produces one immutable ArticleRecord or raises the classified failure

from wechat2md.errors import ContentNotFoundError
from wechat2md.extraction.fetcher import DocumentFetcher
from wechat2md.extraction.markdown import MarkdownConverter
from wechat2md.extraction.parser import ContentParser
from wechat2md.models import ArticleRecord
from wechat2md.utils.logging import get_logger, log_extraction_step
from wechat2md.utils.retry import RetryState


class ArticleExtractor:
    """Fetch, parse and convert a single article URL."""

    def __init__(self, fetcher: DocumentFetcher, parser: ContentParser, converter: MarkdownConverter):
        self.fetcher = fetcher
        self.parser = parser
        self.converter = converter
        self.logger = get_logger(__name__)

    @log_extraction_step("extract_article")
    async def extract(self, url: str, state: RetryState | None = None) -> ArticleRecord:
        """Extract ``url`` into an ArticleRecord.

        Raises:
            NetworkError: When the document could not be fetched
            ContentNotFoundError: When no body markup was found
        """
        document = await self.fetcher.fetch_with_retry(url, state=state)
        parsed = self.parser.parse(document)

        if not parsed.has_body:
            raise ContentNotFoundError(f"No article body found at {url}", details={"url": url})

        content = self.converter.convert(parsed.body_markup, parsed.title, parsed.author, parsed.publish_time)

        return ArticleRecord(
            title=parsed.title,
            content=content,
            author=parsed.author,
            publish_time=parsed.publish_time,
            url=url,
            images=tuple(parsed.images),
        )
