# ABOUTME: Tests for image source selection rules
# ABOUTME: Validates deferred-attribute preference, placeholder rejection, host trust and HTTPS upgrade

import pytest
from bs4 import BeautifulSoup

from wechat2md.extraction.images import (
    candidate_source,
    collect_image_urls,
    force_https,
    is_placeholder,
    is_trusted_host,
    select_image_url,
)

TRUSTED = ["mmbiz.qpic.cn"]


def _img(markup: str):
    return BeautifulSoup(markup, "html.parser").img


class TestCandidateSource:
    """Test attribute preference order."""

    def test_deferred_attribute_beats_src(self):
        node = _img('<img data-src="https://mmbiz.qpic.cn/a.jpg" src="https://mmbiz.qpic.cn/eager.jpg">')
        assert candidate_source(node) == "https://mmbiz.qpic.cn/a.jpg"

    def test_data_original_beats_src(self):
        node = _img('<img data-original="https://mmbiz.qpic.cn/b.jpg" src="x.gif">')
        assert candidate_source(node) == "https://mmbiz.qpic.cn/b.jpg"

    def test_src_used_when_no_deferred_attribute(self):
        assert candidate_source(_img('<img src="https://mmbiz.qpic.cn/c.jpg">')) == "https://mmbiz.qpic.cn/c.jpg"

    def test_missing_source(self):
        assert candidate_source(_img("<img alt='nothing'>")) == ""


class TestRules:
    """Test individual filter predicates."""

    @pytest.mark.parametrize(
        "url",
        [
            "data:image/svg+xml,%3Csvg%3E",
            "data:image/gif;base64,R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7",
            "https://mmbiz.qpic.cn/placeholder.png",
            "https://mmbiz.qpic.cn/img/loading.gif",
        ],
    )
    def test_placeholders(self, url):
        assert is_placeholder(url)

    def test_real_image_is_not_placeholder(self):
        assert not is_placeholder("https://mmbiz.qpic.cn/mmbiz_jpg/abc/640")

    def test_trusted_host_and_subdomain(self):
        assert is_trusted_host("https://mmbiz.qpic.cn/a.jpg", TRUSTED)
        assert is_trusted_host("https://cdn.mmbiz.qpic.cn/a.jpg", TRUSTED)
        assert not is_trusted_host("https://evil-mmbiz.qpic.cn.example.com/a.jpg", TRUSTED)

    def test_force_https(self):
        assert force_https("http://mmbiz.qpic.cn/a.jpg") == "https://mmbiz.qpic.cn/a.jpg"
        assert force_https("//mmbiz.qpic.cn/a.jpg") == "https://mmbiz.qpic.cn/a.jpg"
        assert force_https("https://mmbiz.qpic.cn/a.jpg") == "https://mmbiz.qpic.cn/a.jpg"


class TestSelection:
    """Test the combined selection and collection."""

    def test_insecure_trusted_image_is_upgraded(self):
        node = _img('<img data-src="http://mmbiz.qpic.cn/a.jpg">')
        assert select_image_url(node, TRUSTED) == "https://mmbiz.qpic.cn/a.jpg"

    def test_untrusted_host_rejected(self):
        assert select_image_url(_img('<img src="https://example.com/a.jpg">'), TRUSTED) is None

    def test_relative_source_rejected(self):
        assert select_image_url(_img('<img src="/images/a.jpg">'), TRUSTED) is None

    def test_collect_preserves_order_and_dedupes(self):
        document = BeautifulSoup(
            '<img data-src="https://mmbiz.qpic.cn/2.jpg">'
            '<img src="data:image/svg+xml,%3Csvg%3E">'
            '<img data-src="https://mmbiz.qpic.cn/1.jpg">'
            '<img src="http://mmbiz.qpic.cn/2.jpg">',
            "html.parser",
        )

        urls = collect_image_urls(document.find_all("img"), TRUSTED)

        assert urls == ["https://mmbiz.qpic.cn/2.jpg", "https://mmbiz.qpic.cn/1.jpg"]
