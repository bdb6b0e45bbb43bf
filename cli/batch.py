import sys
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional

from rich.console import Console

from infra.config import get_config
from infra.pipeline.registry import DERIVATIVE_DSIDS
from infra.pipeline.rich_progress import RichProgressBar
from infra.storage import Repository, RepositoryError
from pipeline.ocr_derivatives import OcrDerivativePipeline
from cli.helpers import get_repository, print_outcome

console = Console()


def process_object(
    pid: str,
    repository: Repository,
    pipeline: OcrDerivativePipeline,
    force: bool,
    dsids: Optional[List[str]]
):
    """Derive one object. Returns (pid, outcome or None, error message)."""
    try:
        obj = repository.get_object(pid)
        outcome = pipeline.derive_page(obj, force=force, dsids=dsids)
        return (pid, outcome, None)
    except RepositoryError as e:
        return (pid, None, str(e))


def cmd_batch(args):
    repository = get_repository()
    pids = repository.list_pids()

    if not pids:
        print("No objects in repository.")
        return

    config = get_config()
    pipeline = OcrDerivativePipeline(config=config)
    max_workers = args.workers or config.defaults.max_workers

    print(f"\n📚 {pipeline.name} × {len(pids)} objects ({max_workers} at a time)\n")

    succeeded, failed = [], []
    executor = ThreadPoolExecutor(max_workers=max_workers)
    try:
        with RichProgressBar(total=len(pids), prefix="   ") as progress:
            futures = {
                executor.submit(process_object, pid, repository, pipeline, args.force, args.only): pid
                for pid in pids
            }
            for future in as_completed(futures):
                pid, outcome, error = future.result()
                if error is not None:
                    progress.console.print(f"❌ {pid}: {error}")
                    failed.append(pid)
                elif outcome.success:
                    if args.verbose:
                        print_outcome(outcome, out=progress.console)
                    succeeded.append(pid)
                else:
                    print_outcome(outcome, out=progress.console)
                    failed.append(pid)
                progress.advance(suffix=pid)
    except KeyboardInterrupt:
        pipeline.runner.cancel()
        executor.shutdown(wait=False, cancel_futures=True)
        print(f"\n\n⚠️  Interrupted ({len(succeeded) + len(failed)}/{len(pids)} complete)")
        sys.exit(1)
    executor.shutdown(wait=True)

    print(f"\n🏁 {pipeline.name}: {len(succeeded)} succeeded, {len(failed)} failed\n")
    if failed:
        sys.exit(1)


def setup_batch_parser(subparsers):
    batch_parser = subparsers.add_parser('batch', help='Create derivatives for every object in the repository')
    batch_parser.add_argument('--force', action='store_true', help='Regenerate derivatives that already exist')
    batch_parser.add_argument('--only', choices=DERIVATIVE_DSIDS, action='append', help='Derivative to create (repeatable)')
    batch_parser.add_argument('--workers', type=int, default=None, help='Objects processed in parallel')
    batch_parser.add_argument('-v', '--verbose', action='store_true', help='Print outcomes for successful objects too')
    batch_parser.set_defaults(func=cmd_batch)
