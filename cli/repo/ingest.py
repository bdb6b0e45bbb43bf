import sys
from pathlib import Path

from infra.storage import RepositoryError
from pipeline.ocr_derivatives.reconcile import guess_mimetype
from pipeline.ocr_derivatives.schemas import HAS_LANGUAGE_PREDICATE, ISLANDORA_RELS_EXT_URI
from cli.helpers import console, get_repository

PAGE_CONTENT_MODEL = "islandora:pageCModel"


def cmd_ingest(args):
    image = Path(args.image).expanduser()
    if not image.is_file():
        console.print(f"[red]Image not found: {image}[/red]")
        sys.exit(1)

    repository = get_repository()

    try:
        obj = repository.ingest_object(args.pid, label=args.label, models=[PAGE_CONTENT_MODEL])
    except (RepositoryError, ValueError) as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    datastream = obj.construct_datastream("OBJ", control_group="M")
    datastream.set_content_from_file(image, copy=True)
    datastream.label = image.name
    datastream.mimetype = guess_mimetype(image)
    obj.ingest_datastream(datastream)

    if args.language:
        obj.relationships.set_value(ISLANDORA_RELS_EXT_URI, HAS_LANGUAGE_PREDICATE, args.language)

    console.print(f"✓ Ingested [bold]{obj.pid}[/bold] ({datastream.mimetype}, {datastream.size} bytes)")
