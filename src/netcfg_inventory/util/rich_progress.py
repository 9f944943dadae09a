from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table


def _format_pending_regions(pending: Sequence[str], *, max_regions: int = 4) -> str:
    if not pending:
        return ""
    items = sorted(pending)
    shown = items[:max_regions]
    tail = len(items) - len(shown)
    rendered = ", ".join(shown)
    if tail > 0:
        rendered = f"{rendered} (+{tail} more)"
    return f"pending: {rendered}"


class RunProgress:
    """
    Transient per-region progress bar for a download, drawn on stderr.
    Safe to advance from worker threads.
    """

    def __init__(self, *, enabled: bool, console: Optional[Console] = None) -> None:
        self._console = console or Console(stderr=True)
        self._enabled = bool(enabled and self._console.is_terminal)
        self._progress: Optional[Progress] = None
        self._task: Optional[Any] = None
        self._pending: List[str] = []
        self._lock = threading.Lock()
        self._started = False
        if self._enabled:
            self._progress = Progress(
                TextColumn("{task.description}"),
                BarColumn(),
                MofNCompleteColumn(),
                TextColumn("{task.fields[pending]}", justify="left"),
                TimeElapsedColumn(),
                console=self._console,
                transient=True,
            )

    def __enter__(self) -> RunProgress:
        if self._enabled and self._progress and not self._started:
            self._progress.start()
            self._started = True
        return self

    def __exit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        if self._enabled and self._progress and self._started:
            self._progress.stop()
            self._started = False

    def start_collection(self, regions: Sequence[str]) -> None:
        if not self._enabled or not self._progress:
            return
        with self._lock:
            self._pending = list(regions)
            self._task = self._progress.add_task(
                "Regions",
                total=len(regions),
                pending=_format_pending_regions(self._pending),
            )

    def region_done(self, region: str) -> None:
        if not self._enabled or not self._progress or self._task is None:
            return
        with self._lock:
            if region in self._pending:
                self._pending.remove(region)
            self._progress.update(self._task, advance=1, pending=_format_pending_regions(self._pending))


def render_download_summary_table(
    *,
    enabled: bool,
    account_id: str,
    regions: Sequence[str],
    counts: Dict[str, int],
    data_file: str,
    console: Optional[Console] = None,
) -> None:
    console = console or Console(stderr=True)
    if not enabled or not console.is_terminal:
        return
    table = Table(title="Download Summary", show_header=True, header_style="bold")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white", justify="right")
    table.add_row("Account", account_id)
    table.add_row("Regions", str(len(regions)))
    for key, count in counts.items():
        table.add_row(key, str(count))
    table.add_row("Data file", data_file)
    console.print(table)
