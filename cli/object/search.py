import json
import sys

from rich.table import Table

from pipeline.ocr_derivatives.tools.hocr import HocrDocument
from cli.helpers import console, get_repository, load_object


def cmd_search(args):
    """Search the HOCR derivative for a word and show where it sits on the page."""
    repository = get_repository()
    obj = load_object(repository, args.pid)

    datastream = obj.datastream("HOCR")
    if datastream is None:
        console.print(f"[red]{obj.pid} has no HOCR datastream; run 'pagetext object {obj.pid} derive' first[/red]")
        sys.exit(1)

    document = HocrDocument(datastream.read_bytes().decode('utf-8', errors='replace'))
    matches = document.search(args.term)

    if args.json:
        print(json.dumps([word.model_dump() for word in matches], indent=2))
        return

    if not matches:
        print(f"No matches for '{args.term}' in {obj.pid}")
        return

    dimensions = document.page_dimensions()
    title = f"'{args.term}' in {obj.pid}"
    if dimensions:
        title += f" (page {dimensions[0]}x{dimensions[1]})"

    table = Table(title=title)
    table.add_column("Word", style="bold")
    table.add_column("Line")
    table.add_column("BBox")
    table.add_column("Confidence", justify="right")

    for word in matches:
        confidence = f"{word.confidence:.0%}" if word.confidence is not None else "-"
        table.add_row(word.text, word.line_id or "-", " ".join(map(str, word.bbox)), confidence)

    console.print(table)
