# ABOUTME: Tests for Markdown conversion of article bodies
# ABOUTME: Covers heading and metadata block layout, formatting conventions and image filtering

import pytest

from wechat2md.config import Config
from wechat2md.extraction.markdown import MarkdownConverter


@pytest.fixture
def converter() -> MarkdownConverter:
    return MarkdownConverter(Config())


class TestDocumentLayout:
    """Test heading and metadata block emission."""

    def test_heading_without_metadata(self, converter):
        assert converter.convert("<p>Hello</p>", "Title") == "# Title\n\nHello"

    def test_author_and_publish_time_block(self, converter):
        markdown = converter.convert("<p>Hello</p>", "Title", author="Ann", publish_time="2024-03-15 08:30")

        assert markdown == "# Title\n\n---\nauthor: Ann\npublishTime: 2024-03-15 08:30\n---\n\nHello"

    def test_block_with_only_author(self, converter):
        markdown = converter.convert("<p>Hello</p>", "Title", author="Ann")

        assert markdown == "# Title\n\n---\nauthor: Ann\n---\n\nHello"
        assert "publishTime" not in markdown

    def test_block_with_only_publish_time(self, converter):
        markdown = converter.convert("<p>Hello</p>", "Title", publish_time="2024-01-01")

        assert "---\npublishTime: 2024-01-01\n---" in markdown
        assert "author" not in markdown


class TestBodyConversion:
    """Test markup conversion conventions."""

    def test_headings_lists_and_emphasis(self, converter):
        markdown = converter.body_to_markdown(
            "<h2>Section</h2><ul><li>one</li><li>two</li></ul><p><strong>bold</strong> and <em>soft</em></p>"
        )

        assert "## Section" in markdown
        assert "- one" in markdown
        assert "- two" in markdown
        assert "**bold**" in markdown
        assert "*soft*" in markdown

    def test_script_style_noscript_are_dropped(self, converter):
        markdown = converter.body_to_markdown(
            "<p>keep</p><script>alert(1)</script><style>p{}</style><noscript>enable js</noscript>"
        )

        assert markdown == "keep"

    def test_excess_blank_lines_collapsed(self, converter):
        markdown = converter.body_to_markdown("<p>a</p><p></p><p></p><p>b</p>")

        assert "\n\n\n" not in markdown


class TestImageRules:
    """Test image reference filtering during conversion."""

    def test_trusted_deferred_image_kept_and_placeholder_dropped(self, converter):
        body = (
            '<p><img data-src="https://mmbiz.qpic.cn/x.jpg" alt="pic">'
            '<img src="data:image/svg+xml,%3Csvg xmlns=%27http://www.w3.org/2000/svg%27%3E%3C/svg%3E"></p>'
        )

        markdown = converter.body_to_markdown(body)

        assert markdown.count("![") == 1
        assert "![pic](https://mmbiz.qpic.cn/x.jpg)" in markdown
        assert "data:image" not in markdown

    def test_title_attribute_is_emitted(self, converter):
        markdown = converter.body_to_markdown('<img src="http://mmbiz.qpic.cn/y.png" alt="A" title="Caption">')

        assert markdown == '![A](https://mmbiz.qpic.cn/y.png "Caption")'

    def test_untrusted_image_emits_nothing(self, converter):
        assert converter.body_to_markdown('<p>text<img src="https://example.com/z.png"></p>') == "text"
