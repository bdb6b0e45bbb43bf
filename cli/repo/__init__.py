from cli.repo.ingest import cmd_ingest
from cli.repo.list import cmd_list


def setup_parser(subparsers):
    """Setup repo command parser."""
    repo_parser = subparsers.add_parser('repo', help='Repository management commands')
    repo_subparsers = repo_parser.add_subparsers(dest='repo_command', help='Repo command')
    repo_subparsers.required = True

    ingest_parser = repo_subparsers.add_parser('ingest', help='Create a page object from an image')
    ingest_parser.add_argument('pid', help='Object pid (namespace:id)')
    ingest_parser.add_argument('image', help='Page image stored as the OBJ datastream')
    ingest_parser.add_argument('--label', help='Object label (default: the pid)')
    ingest_parser.add_argument('--language', help='Set the hasLanguage relationship (e.g. fra, no_ocr)')
    ingest_parser.set_defaults(func=cmd_ingest)

    list_parser = repo_subparsers.add_parser('list', help='List all objects')
    list_parser.add_argument('--json', action='store_true', help='Output as JSON')
    list_parser.set_defaults(func=cmd_list)


__all__ = ['cmd_ingest', 'cmd_list', 'setup_parser']
