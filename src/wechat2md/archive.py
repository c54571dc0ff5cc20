# ABOUTME: Packages extracted articles as Markdown files in a directory or an in-memory ZIP
# ABOUTME: Adds front matter (title, author, time, source URL, extraction time) to each document

import io
import re
import zipfile
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from wechat2md.models import ArticleRecord

ARCHIVE_FOLDER = "wechat_articles_markdown"
MAX_FILENAME_LENGTH = 80

_UNSAFE_CHARACTERS = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w一-龥\-.]")

README_TEMPLATE = """# 微信公众号文章提取结果

## 提取信息
- 提取时间: {extracted_at}
- 文章数量: {count} 篇
- 提取工具: wechat2md

## 文件说明
- 所有文章均为Markdown格式
- 文件名格式: 序号_文章标题.md
- 图片链接已保留，可能需要网络访问

## 注意事项
- 本工具仅用于学习和研究目的
- 请尊重原作者版权
"""


def sanitize_filename(name: str) -> str:
    cleaned = _UNSAFE_CHARACTERS.sub("_", name)
    cleaned = _WHITESPACE.sub("_", cleaned)
    cleaned = _NON_WORD.sub("_", cleaned)
    return cleaned[:MAX_FILENAME_LENGTH]


def article_filename(index: int, record: ArticleRecord) -> str:
    """``NNN_<title>.md`` with a 1-based, zero-padded index."""
    return f"{index:03d}_{sanitize_filename(record.title)}.md"


def _quoted(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def render_document(record: ArticleRecord, extracted_at: datetime | None = None) -> str:
    """Front matter followed by the record's Markdown content."""
    extracted_at = extracted_at or datetime.now(UTC)
    lines = ["---", f"title: {_quoted(record.title)}"]
    if record.author:
        lines.append(f"author: {_quoted(record.author)}")
    if record.publish_time:
        lines.append(f"publishTime: {_quoted(record.publish_time)}")
    lines.append(f"originalUrl: {_quoted(record.url)}")
    lines.append(f"extractedAt: {_quoted(extracted_at.isoformat())}")
    lines.append("---")
    return "\n".join(lines) + "\n\n" + record.content


def write_markdown_directory(records: Sequence[ArticleRecord], directory: Path) -> list[Path]:
    """Write one Markdown file per record into ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    extracted_at = datetime.now(UTC)
    written = []
    for index, record in enumerate(records, start=1):
        path = directory / article_filename(index, record)
        path.write_text(render_document(record, extracted_at), encoding="utf-8")
        written.append(path)
    return written


def build_zip(records: Sequence[ArticleRecord]) -> bytes:
    """Build a ZIP holding every article plus a README, entirely in memory."""
    extracted_at = datetime.now(UTC)
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=6) as archive:
        for index, record in enumerate(records, start=1):
            archive.writestr(f"{ARCHIVE_FOLDER}/{article_filename(index, record)}", render_document(record, extracted_at))
        readme = README_TEMPLATE.format(extracted_at=extracted_at.isoformat(), count=len(records))
        archive.writestr(f"{ARCHIVE_FOLDER}/README.md", readme)
    return buffer.getvalue()
