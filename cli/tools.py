import sys

from rich.console import Console

from infra.config import get_config
from infra.process import SubprocessRunner
from pipeline.ocr_derivatives.tools.tesseract import TesseractTool, is_newer_than

console = Console()


def _tesseract() -> TesseractTool:
    config = get_config()
    return TesseractTool(config, SubprocessRunner(default_timeout=config.tools.timeout_seconds))


def cmd_tools_version(args):
    config = get_config()
    tool = _tesseract()
    version = tool.version()

    if version is None:
        console.print(f"[red]✗ Could not run {tool.executable} --version[/red]")
        sys.exit(1)

    baseline = config.defaults.hocr_version_baseline
    naming = ".hocr (renamed to .html)" if is_newer_than(version, baseline) else ".html"
    print(f"tesseract {version} ({tool.executable})")
    print(f"  HOCR output: {naming} (baseline {baseline})")


def cmd_tools_languages(args):
    config = get_config()
    try:
        installed = _tesseract().list_languages()
    except RuntimeError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)

    enabled = set(config.defaults.enabled_languages)
    print(f"{len(installed)} languages installed:")
    for language in installed:
        marker = "✓" if language in enabled else " "
        print(f"  {marker} {language}")

    missing = sorted(enabled - set(installed))
    if missing:
        console.print(f"[yellow]⚠️  Enabled but not installed: {', '.join(missing)}[/yellow]")


def setup_tools_parser(subparsers):
    tools_parser = subparsers.add_parser('tools', help='Inspect the external OCR tool')
    tools_subparsers = tools_parser.add_subparsers(dest='tools_command', help='Tools command')
    tools_subparsers.required = True

    version_parser = tools_subparsers.add_parser('version', help='Show the tesseract version and HOCR naming')
    version_parser.set_defaults(func=cmd_tools_version)

    languages_parser = tools_subparsers.add_parser('languages', help='List installed tesseract languages')
    languages_parser.set_defaults(func=cmd_tools_languages)
