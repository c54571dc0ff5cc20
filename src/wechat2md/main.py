# ABOUTME: Main CLI application entry point using asyncclick for native async support
# ABOUTME: Provides commands for single-article extraction, album extraction and logging status

import json as jsonlib
from pathlib import Path
from typing import NoReturn

import asyncclick as click
from rich.console import Console
from rich.panel import Panel

from wechat2md.archive import ARCHIVE_FOLDER, build_zip, write_markdown_directory
from wechat2md.config import get_config
from wechat2md.errors import ExtractionError, RequestValidationError
from wechat2md.models import BatchReport, ExtractionMode, ExtractionRequest, UnitOutcome
from wechat2md.utils.logging import (
    LoggingMode,
    configure_logging,
    create_smart_progress,
    get_logging_status,
    with_request_context,
)
from wechat2md.utils.rich_tables import (
    create_article_table,
    create_articles_table,
    create_logging_status_table,
    create_skipped_table,
    print_rich_table,
)

console = Console()


async def _run_with_progress(operation, message: str, json_output: bool):
    """Await ``operation(tracker)`` behind a spinner unless JSON output was requested."""
    if json_output:
        return await operation(None)

    with create_smart_progress(console, message) as tracker:
        return await operation(tracker)


def _emit_json(payload: dict) -> None:
    click.echo(jsonlib.dumps(payload, ensure_ascii=False, indent=2))


def _report_failure(ctx, error: ExtractionError, json_output: bool) -> NoReturn:
    from wechat2md.core.service import error_payload

    if json_output:
        _emit_json(error_payload(error))
    else:
        console.print(f"[red]❌ {error.message}[/red] [dim]({error.kind})[/dim]")
    ctx.exit(1)


def _save_records(records, output: Path | None, as_zip: bool, json_output: bool) -> None:
    if as_zip:
        target = output or Path(f"{ARCHIVE_FOLDER}.zip")
        target.write_bytes(build_zip(records))
        saved = target
    elif output is not None:
        write_markdown_directory(records, output)
        saved = output
    else:
        return

    if not json_output:
        console.print(f"[green]💾 Saved {len(records)} article(s) to {saved}[/green]")


@click.command()
@click.argument("url")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Directory to write the Markdown file into")
@click.pass_context
async def article(ctx, url: str, output: Path | None):
    """
    📰 Extract a single article as Markdown.
    """
    json_output = ctx.obj["json_output"]

    with with_request_context("article", url=url) as logger:
        from wechat2md.core.service import ExtractionService, success_payload

        async with ExtractionService() as service:
            try:
                request = ExtractionRequest.from_payload({"url": url})
                record = await _run_with_progress(
                    lambda _: service.extract_article(request.url), "📰 Extracting article...", json_output
                )
            except ExtractionError as e:
                logger.warning("Article extraction failed", kind=e.kind, error=e.message)
                _report_failure(ctx, e, json_output)

        logger.info("Article extracted", title=record.title)

        if json_output:
            _emit_json(success_payload(BatchReport(outcomes=[UnitOutcome(url=record.url, record=record)])))
        else:
            print_rich_table(console, create_article_table(record))

        _save_records([record], output, as_zip=False, json_output=json_output)


@click.command()
@click.argument("url")
@click.option("--max-count", "-n", type=int, help="Maximum number of articles to extract")
@click.option(
    "--mode",
    type=click.Choice([mode.value for mode in ExtractionMode]),
    default=ExtractionMode.BROWSER.value,
    show_default=True,
    help="Link discovery mode",
)
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Output directory, or ZIP path with --zip")
@click.option("--zip", "as_zip", is_flag=True, help="Package the articles as a ZIP archive")
@click.pass_context
async def album(ctx, url: str, max_count: int | None, mode: str, output: Path | None, as_zip: bool):
    """
    📚 Extract every article of an album.

    Discovers the album's links (scrolling a browser, or scanning the static
    page with --mode static), then extracts them in paced batches.
    """
    json_output = ctx.obj["json_output"]
    payload = {"url": url, "maxCount": max_count, "mode": mode}

    with with_request_context("album", url=url, mode=mode, max_count=max_count) as logger:
        from wechat2md.core.service import ExtractionService, success_payload

        if not json_output:
            console.print(Panel.fit(f"📚 [bold cyan]Album Extraction[/bold cyan]\n{url}", border_style="magenta"))

        async with ExtractionService() as service:
            try:
                request = ExtractionRequest.from_payload(payload, max_count_ceiling=service.config.album_max_count)
                if not request.is_album:
                    raise RequestValidationError("URL is not an album link", details={"url": request.url})
                report = await _run_with_progress(
                    lambda tracker: service.extract_album(
                        request, on_progress=tracker.article_done if tracker else None
                    ),
                    "🔎 Discovering album links...",
                    json_output,
                )
            except ExtractionError as e:
                logger.warning("Album extraction failed", kind=e.kind, error=e.message)
                _report_failure(ctx, e, json_output)

        logger.info("Album extracted", articles=len(report.articles), skipped=len(report.skipped))

        if json_output:
            _emit_json(success_payload(report))
        else:
            print_rich_table(console, create_articles_table(report.articles))
            if report.skipped:
                print_rich_table(console, create_skipped_table(report.skipped))

        if report.articles:
            _save_records(report.articles, output, as_zip=as_zip, json_output=json_output)


def _initialize_logging(json_output: bool, log_level: str | None, log_file: str | None) -> None:
    """CLI flags override the WECHAT2MD_LOG_* settings; --json always logs JSON to stdout."""
    config = get_config()
    mode = LoggingMode.PRODUCTION if json_output else config.log_mode
    level = log_level or config.log_level
    path = log_file or (str(config.log_file) if config.log_file else None)

    try:
        configure_logging(mode=mode, log_level=level, log_file=path)
    except OSError:
        # Unwritable custom log file
        configure_logging(mode=LoggingMode.PRODUCTION, log_level=level)


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show where logs are written and which libraries are quieted.
    """
    print_rich_table(console, create_logging_status_table(get_logging_status()))


@click.group(invoke_without_command=True)
@click.option("--json", is_flag=True, help="Print results and errors as JSON (logs go to stdout as JSON lines)")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level, overrides WECHAT2MD_LOG_LEVEL",
)
@click.option("--log-file", help="Human-readable log file path, overrides WECHAT2MD_LOG_FILE")
@click.pass_context
def app(ctx, json: bool, log_level: str | None, log_file: str | None):
    """
    📰 wechat2md - Official Account articles to Markdown

    Extract single articles or whole albums from the WeChat Official Account
    platform and save them as Markdown files or a ZIP archive.
    """
    ctx.obj = {"json_output": json}
    _initialize_logging(json, log_level, log_file)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


for command in (article, album, logging_status):
    app.add_command(command)


if __name__ == "__main__":
    app()
