import sys
from typing import Optional

from rich.console import Console

from infra.config import get_config, get_storage_root
from infra.storage import ObjectNotFoundError, ObjectStorage, Repository
from pipeline.ocr_derivatives import OcrDerivativePipeline
from pipeline.ocr_derivatives.schemas import Channel, PageOutcome, Severity

console = Console()

SEVERITY_STYLES = {
    Severity.DEBUG: "dim",
    Severity.INFO: "green",
    Severity.WARNING: "yellow",
    Severity.ERROR: "red",
}


def get_repository() -> Repository:
    return Repository(storage_root=get_storage_root())


def get_pipeline() -> OcrDerivativePipeline:
    return OcrDerivativePipeline(config=get_config())


def load_object(repository: Repository, pid: str) -> ObjectStorage:
    """Fetch an object or exit 1 with a message."""
    try:
        return repository.get_object(pid)
    except ObjectNotFoundError:
        console.print(f"[red]Object not found: {pid}[/red]")
        sys.exit(1)


def confirm(prompt: str, assume_yes: bool = False) -> bool:
    if assume_yes:
        return True
    try:
        response = input(f"{prompt} (yes/no): ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print("\nCancelled.")
        return False
    return response in ['yes', 'y']


def print_outcome(outcome: PageOutcome, show_log_messages: bool = True, out: Optional[Console] = None):
    out = out or console
    symbol = "✅" if outcome.success else "❌"
    out.print(f"{symbol} [bold]{outcome.pid}[/bold]")

    for dsid, report in outcome.reports.items():
        for message in report.messages:
            if message.channel == Channel.LOG and not show_log_messages:
                continue
            style = SEVERITY_STYLES.get(message.severity, "")
            out.print(f"   {dsid}: [{style}]{message.text}[/{style}]")


def format_size(size: Optional[int]) -> str:
    if size is None:
        return "-"
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
