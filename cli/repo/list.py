import json

from rich.table import Table

from infra.config import get_config
from pipeline.ocr_derivatives.status import DerivativeStatusTracker
from cli.helpers import console, get_repository

STATUS_SYMBOLS = {
    "present": "✅",
    "missing": "○",
    "suppressed": "⏭️",
}


def cmd_list(args):
    repository = get_repository()
    pids = repository.list_pids()

    if not pids:
        print("No objects in repository. Use 'pagetext repo ingest <pid> <image>' to add one.")
        return

    tracker = DerivativeStatusTracker(get_config())
    statuses = [tracker.get_status(repository.get_object(pid)) for pid in pids]

    if args.json:
        print(json.dumps(statuses, indent=2))
        return

    table = Table(title=f"📚 Repository ({len(pids)} objects)")
    table.add_column("PID", style="bold")
    table.add_column("Label")
    table.add_column("Language")
    table.add_column("generate_ocr")
    table.add_column("OCR", justify="center")
    table.add_column("HOCR", justify="center")

    for status in statuses:
        derivatives = status["derivatives"]
        table.add_row(
            status["pid"],
            status["label"][:40],
            status["language"],
            status["generate_ocr"],
            STATUS_SYMBOLS.get(derivatives.get("OCR", {}).get("status"), "?"),
            STATUS_SYMBOLS.get(derivatives.get("HOCR", {}).get("status"), "?"),
        )

    console.print(table)
