# ABOUTME: Body markup to Markdown conversion built on markdownify
# ABOUTME: Emits the H1 heading and metadata block, drops script nodes and filters image references

import re
from collections.abc import Sequence

from markdownify import ASTERISK, ATX
from markdownify import MarkdownConverter as _Markdownify

from wechat2md.config import Config
from wechat2md.extraction.images import select_image_url

AUTHOR_LABEL = "author"
PUBLISH_TIME_LABEL = "publishTime"

_EXCESS_BLANK_LINES = re.compile(r"\n{3,}")


class _ArticleMarkdownify(_Markdownify):
    """markdownify with article-specific rules for scripts and images."""

    def __init__(self, trusted_image_hosts: Sequence[str], **options):
        self.trusted_image_hosts = list(trusted_image_hosts)
        super().__init__(**options)

    # markdownify passes the inline/parent-tag flag positionally in older releases
    # and as a keyword in newer ones, so the converters accept either.

    def convert_script(self, el, text, *args, **kwargs):
        return ""

    def convert_style(self, el, text, *args, **kwargs):
        return ""

    def convert_noscript(self, el, text, *args, **kwargs):
        return ""

    def convert_img(self, el, text, *args, **kwargs):
        url = select_image_url(el, self.trusted_image_hosts)
        if not url:
            return ""
        alt = el.get("alt") or ""
        title = el.get("title") or ""
        if title:
            escaped_title = title.replace('"', r"\"")
            return f'![{alt}]({url} "{escaped_title}")'
        return f"![{alt}]({url})"


class MarkdownConverter:
    """Render an article as a self-contained Markdown document."""

    def __init__(self, config: Config):
        self._converter = _ArticleMarkdownify(
            config.trusted_image_hosts,
            heading_style=ATX,
            bullets="-",
            strong_em_symbol=ASTERISK,
        )

    def body_to_markdown(self, body_markup: str) -> str:
        markdown = self._converter.convert(body_markup)
        return _EXCESS_BLANK_LINES.sub("\n\n", markdown).strip()

    def convert(
        self, body_markup: str, title: str, author: str | None = None, publish_time: str | None = None
    ) -> str:
        """Heading, then the metadata block when author or publish time is known, then the body."""
        parts = [f"# {title}\n\n"]

        if author or publish_time:
            block = ["---"]
            if author:
                block.append(f"{AUTHOR_LABEL}: {author}")
            if publish_time:
                block.append(f"{PUBLISH_TIME_LABEL}: {publish_time}")
            block.append("---")
            parts.append("\n".join(block) + "\n\n")

        parts.append(self.body_to_markdown(body_markup))
        return "".join(parts)
