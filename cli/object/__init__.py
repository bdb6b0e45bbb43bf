"""Object CLI commands: pagetext object <pid> <command>."""
from cli.object.info import cmd_info
from cli.object.derive import cmd_derive
from cli.object.clean import cmd_clean
from cli.object.search import cmd_search
from cli.object.rels import cmd_rels_flag, cmd_rels_set_language
from infra.pipeline.registry import DERIVATIVE_DSIDS


def setup_parser(subparsers):
    """Setup object command parser."""
    object_parser = subparsers.add_parser('object', help='Single object operations')
    object_parser.add_argument('pid', help='Object pid (namespace:id)')

    object_subparsers = object_parser.add_subparsers(dest='object_command', help='Object command')
    object_subparsers.required = True

    # object <pid> info
    info_parser = object_subparsers.add_parser('info', help='Show datastreams and derivative status')
    info_parser.add_argument('--json', action='store_true', help='Output as JSON')
    info_parser.set_defaults(func=cmd_info)

    # object <pid> derive
    derive_parser = object_subparsers.add_parser('derive', help='Create OCR and HOCR derivatives')
    derive_parser.add_argument('--force', action='store_true', help='Regenerate even if the derivative exists')
    derive_parser.add_argument(
        '--only',
        choices=DERIVATIVE_DSIDS,
        action='append',
        help='Derivative to create (repeatable; default: all)'
    )
    derive_parser.set_defaults(func=cmd_derive)

    # object <pid> clean
    clean_parser = object_subparsers.add_parser('clean', help='Purge derivative datastreams')
    clean_parser.add_argument(
        '--dsid',
        choices=DERIVATIVE_DSIDS,
        action='append',
        help='Derivative to purge (repeatable; default: all)'
    )
    clean_parser.add_argument('-y', '--yes', action='store_true', help='Skip confirmation')
    clean_parser.set_defaults(func=cmd_clean)

    # object <pid> search <term>
    search_parser = object_subparsers.add_parser('search', help='Find a word in the HOCR derivative')
    search_parser.add_argument('term', help='Word to search for (case-insensitive)')
    search_parser.add_argument('--json', action='store_true', help='Output as JSON')
    search_parser.set_defaults(func=cmd_search)

    # object <pid> rels ...
    rels_parser = object_subparsers.add_parser('rels', help='Edit OCR relationships')
    rels_subparsers = rels_parser.add_subparsers(dest='rels_command', help='Relationship command')
    rels_subparsers.required = True

    language_parser = rels_subparsers.add_parser('set-language', help='Set hasLanguage (no_ocr disables OCR)')
    language_parser.add_argument('language', help='Tesseract language code, or no_ocr')
    language_parser.set_defaults(func=cmd_rels_set_language)

    flag_parser = rels_subparsers.add_parser('flag', help='Set or clear the generate_ocr directive')
    flag_parser.add_argument('value', choices=['generate', 'suppress', 'clear'])
    flag_parser.set_defaults(func=cmd_rels_flag)


__all__ = [
    'setup_parser',
    'cmd_info',
    'cmd_derive',
    'cmd_clean',
    'cmd_search',
    'cmd_rels_set_language',
    'cmd_rels_flag',
]
