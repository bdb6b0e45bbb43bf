"""Object-level info command."""
import json

from rich.table import Table

from infra.config import get_config
from pipeline.ocr_derivatives.status import DerivativeStatusTracker
from cli.helpers import console, format_size, get_repository, load_object


def cmd_info(args):
    """Show object datastreams and derivative overview."""
    repository = get_repository()
    obj = load_object(repository, args.pid)
    status = DerivativeStatusTracker(get_config()).get_status(obj)

    if args.json:
        status['datastreams'] = {ds.id: ds.to_record() for ds in obj.list_datastreams()}
        print(json.dumps(status, indent=2))
        return

    print(f"\n{obj.label}")
    print("=" * 80)
    print(f"PID:          {obj.pid}")
    print(f"Models:       {', '.join(obj.models) or '-'}")
    print(f"Language:     {status['language']}")
    print(f"generate_ocr: {status['generate_ocr']}")

    table = Table(title="Datastreams")
    table.add_column("DSID", style="bold")
    table.add_column("Label")
    table.add_column("MIME type")
    table.add_column("Group", justify="center")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    for datastream in obj.list_datastreams():
        table.add_row(
            datastream.id,
            datastream.label,
            datastream.mimetype,
            datastream.control_group,
            format_size(datastream.size),
            datastream.modified or "-",
        )
    console.print(table)

    print("\n📊 Derivatives")
    for dsid, info in status['derivatives'].items():
        if info['status'] == 'present':
            symbol = '✅'
        elif info['status'] == 'suppressed':
            symbol = '⏭️'
        else:
            symbol = '○'
        print(f"  {symbol} {dsid} (from {info['source']}): {info['status']}")
    print()
