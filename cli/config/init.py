"""
pagetext init command - Initialize repository configuration.
"""

from infra.config import ConfigManager, get_storage_root


def cmd_init(args):
    """Initialize repository configuration."""
    storage_root = get_storage_root()
    manager = ConfigManager(storage_root)

    if manager.exists() and not args.force:
        print(f"✗ Config already exists at: {manager.config_path}")
        print("  Use --force to overwrite")
        return

    config = manager.init(force=args.force)
    print(f"✓ Created config at: {manager.config_path}")

    tools = config.tools.resolved()
    print("\nConfiguration summary:")
    print(f"  Storage root: {storage_root}")
    print(f"  Default language: {config.defaults.language}")
    print(f"  Enabled languages: {', '.join(config.defaults.enabled_languages)}")
    print(f"  Max workers: {config.defaults.max_workers}")

    print("\nTools:")
    print(f"  tesseract: {tools.tesseract}  ({config.tools.tesseract})")
    print(f"  convert:   {tools.convert}  ({config.tools.convert})")
    print(f"  identify:  {tools.identify}  ({config.tools.identify})")
