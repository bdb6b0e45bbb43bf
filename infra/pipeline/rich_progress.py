"""Rich-based progress bar for batch runs over repository objects."""

import threading

from rich.progress import (
    Progress,
    BarColumn,
    TextColumn,
    TaskProgressColumn,
    TimeRemainingColumn,
)


class RichProgressBar:
    def __init__(self, total: int, prefix: str = "", width: int = 40, unit: str = "objects"):
        self.total = total
        self.prefix = prefix
        self.unit = unit

        self._progress = Progress(
            TextColumn(f"{prefix}{{task.description}}"),
            BarColumn(bar_width=width),
            TaskProgressColumn(),
            TextColumn("•"),
            TextColumn("{task.fields[rate]}", justify="right"),
            TextColumn("•"),
            TimeRemainingColumn(),
            TextColumn("•"),
            TextColumn("{task.fields[suffix]}", justify="right"),
            transient=True,
        )

        self._task_id = None
        self._completed = 0
        self._lock = threading.Lock()

    def __enter__(self):
        self._progress.__enter__()
        self._task_id = self._progress.add_task("", total=self.total, rate="", suffix="")
        return self

    def __exit__(self, *args):
        return self._progress.__exit__(*args)

    def advance(self, suffix: str = ""):
        """Mark one more item done; safe to call from worker threads."""
        with self._lock:
            self._completed += 1
            elapsed = self._progress.tasks[self._task_id].elapsed or 0.01
            self._progress.update(
                self._task_id,
                completed=self._completed,
                rate=f"{self._completed / elapsed:.1f} {self.unit}/sec",
                suffix=suffix,
            )

    @property
    def console(self):
        return self._progress.console
