# ABOUTME: Rich tables for CLI output: article summaries, skipped links and logging status
# ABOUTME: All tables share one cyan-bordered, left-titled look

from collections.abc import Sequence
from typing import Any

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table

from wechat2md.models import ArticleRecord, UnitOutcome


def _styled_table(title: str, title_style: str, expand: bool, **options: Any) -> Table:
    return Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=ROUNDED,
        show_header=True,
        header_style="bold magenta",
        border_style="cyan",
        title_justify="left",
        expand=expand,
        **options,
    )


def create_key_value_table(
    title: str,
    data: dict[str, str],
    title_style: str = "bold cyan",
    key_style: str = "bold blue",
    value_style: str = "white",
) -> Table:
    """Two-column Field/Value table.

    Args:
        title: Table title, emoji welcome
        data: Rows in display order
        title_style: Style for the table title
        key_style: Style for the field column
        value_style: Style for the value column
    """
    table = _styled_table(title, title_style, expand=False)
    table.add_column("Field", style=key_style)
    table.add_column("Value", style=value_style)
    for key, value in data.items():
        table.add_row(key, str(value))
    return table


def create_rows_table(
    title: str, columns: Sequence[tuple[str, str]], rows: Sequence[Sequence[str]], title_style: str = "bold cyan"
) -> Table:
    """Zebra-striped table with one styled column per ``(name, style)`` pair."""
    table = _styled_table(title, title_style, expand=True, row_styles=["", "dim"])
    for name, style in columns:
        table.add_column(name, style=style)
    for row in rows:
        table.add_row(*row)
    return table


def create_article_table(record: ArticleRecord) -> Table:
    return create_key_value_table(
        title="📰 Extracted Article",
        data={
            "📛 Title": record.title,
            "✍️ Author": record.author or "Unknown",
            "📅 Published": record.publish_time or "Unknown",
            "🌐 URL": record.url,
            "📄 Markdown": f"{len(record.content):,} chars",
            "🖼️ Images": str(len(record.images)),
        },
        title_style="bold magenta",
        key_style="cyan",
    )


def create_articles_table(records: Sequence[ArticleRecord]) -> Table:
    """One row per extracted album article, in album order."""
    return create_rows_table(
        title=f"📚 {len(records)} Articles Extracted",
        columns=[("#", "cyan"), ("Title", "bold white"), ("Author", "magenta"), ("Published", "green"), ("Chars", "yellow")],
        rows=[
            [str(index), record.title, record.author or "-", record.publish_time or "-", f"{len(record.content):,}"]
            for index, record in enumerate(records, start=1)
        ],
    )


def create_skipped_table(outcomes: Sequence[UnitOutcome]) -> Table:
    rows = [
        [outcome.url, outcome.skip.kind, outcome.skip.message, str(outcome.skip.attempts)]
        for outcome in outcomes
        if outcome.skip
    ]
    return create_rows_table(
        title=f"⚠️ {len(rows)} Articles Skipped",
        columns=[("URL", "dim white"), ("Kind", "red"), ("Reason", "yellow"), ("Attempts", "cyan")],
        rows=rows,
        title_style="bold yellow",
    )


def create_logging_status_table(status: dict[str, Any]) -> Table:
    data = {
        "🔧 Mode": status["mode"].title(),
        "📁 Log Directory": status["log_directory"] or "Not created",
        "🔇 Quieted Libraries": ", ".join(status["third_party_suppressed"]),
    }
    labels = {"main": "📝 Main Log", "json": "📊 JSON Log", "errors": "🚨 Error Log"}
    data.update({labels[sink]: path for sink, path in status["log_files"].items() if path})

    return create_key_value_table(
        title="🔍 Logging Configuration", data=data, title_style="bold green", key_style="blue"
    )


def print_rich_table(console: Console, table: Table) -> None:
    """Print ``table`` framed by blank lines."""
    console.print()
    console.print(table)
    console.print()
