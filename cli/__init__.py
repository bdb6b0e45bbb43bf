import argparse
import cli.config
import cli.repo
import cli.object
from cli.batch import setup_batch_parser
from cli.tools import setup_tools_parser


def create_parser():
    parser = argparse.ArgumentParser(
        prog='pagetext',
        description='pagetext - OCR and HOCR derivatives for scanned page objects',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Configuration (run first!)
  pagetext init                              # Initialize repository config
  pagetext config show                       # Show current config
  pagetext config set defaults.language fra
  pagetext config set tools.tesseract /opt/tesseract/bin/tesseract

  # Repository management
  pagetext repo ingest book:1-001 ~/Scans/page-001.tif --label "Page 1"
  pagetext repo list
  pagetext repo list --json

  # Object operations
  pagetext object book:1-001 info
  pagetext object book:1-001 derive
  pagetext object book:1-001 derive --force --only HOCR
  pagetext object book:1-001 clean -y
  pagetext object book:1-001 search roosevelt
  pagetext object book:1-001 rels set-language no_ocr
  pagetext object book:1-001 rels flag generate

  # Repository-wide batch
  pagetext batch --workers 8

  # External tool
  pagetext tools version
  pagetext tools languages
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Command namespace')
    subparsers.required = True

    cli.config.setup_parser(subparsers)
    cli.repo.setup_parser(subparsers)
    cli.object.setup_parser(subparsers)
    setup_batch_parser(subparsers)
    setup_tools_parser(subparsers)

    return parser


def main():
    parser = create_parser()
    args = parser.parse_args()
    args.func(args)
