import sys

from infra.storage import RepositoryError
from cli.helpers import console, get_pipeline, get_repository, load_object, print_outcome


def cmd_derive(args):
    """Run the OCR derivative pipeline for one object."""
    repository = get_repository()
    obj = load_object(repository, args.pid)
    pipeline = get_pipeline()

    print(f"▶️  {pipeline.name}: {obj.pid}")

    try:
        outcome = pipeline.derive_page(obj, force=args.force, dsids=args.only)
    except RepositoryError as e:
        console.print(f"[red]Repository write failed for {obj.pid}: {e}[/red]")
        sys.exit(1)

    print_outcome(outcome)

    if not outcome.success:
        log_file = obj.log_dir / f"{pipeline.name}.jsonl"
        console.print(f"[dim]Details: {log_file}[/dim]")
        sys.exit(1)
