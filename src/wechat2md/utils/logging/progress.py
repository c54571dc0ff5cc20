# ABOUTME: Rich spinner with an article counter shown while CLI commands run
# ABOUTME: Batch extraction reports completed units through the tracker's callback

from rich.console import Console
from rich.progress import MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn


class ExtractionProgress:
    """Transient spinner whose counter follows batch extraction."""

    def __init__(self, console: Console, description: str):
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )
        self.task_id = self.progress.add_task(description, total=None)

    def article_done(self, completed: int, total: int) -> None:
        """Progress callback for BatchOrchestrator.run."""
        self.progress.update(
            self.task_id, description="📰 Extracting articles", completed=completed, total=total
        )

    def __enter__(self) -> "ExtractionProgress":
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()


def create_smart_progress(console: Console, initial_description: str = "📰 Extracting articles...") -> ExtractionProgress:
    return ExtractionProgress(console, initial_description)
