from infra.pipeline.registry import DERIVATIVE_DSIDS
from cli.helpers import confirm, get_repository, load_object


def cmd_clean(args):
    """Purge derivative datastreams so the next run regenerates them."""
    repository = get_repository()
    obj = load_object(repository, args.pid)

    dsids = [dsid for dsid in (args.dsid or DERIVATIVE_DSIDS) if dsid in obj]
    if not dsids:
        print(f"Nothing to clean for {obj.pid}")
        return

    if not confirm(f"⚠️  Purge {', '.join(dsids)} from {obj.pid}?", assume_yes=args.yes):
        print("Cancelled.")
        return

    for dsid in dsids:
        if obj.purge_datastream(dsid):
            print(f"🧹 Purged {dsid}")
