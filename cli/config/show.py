"""
pagetext config show command - Display repository configuration.
"""

import json

from infra.config import ConfigManager, get_storage_root


def cmd_config_show(args):
    """Show repository configuration."""
    manager = ConfigManager(get_storage_root())

    if not manager.exists():
        print(f"✗ No config found at: {manager.config_path}")
        print("  Run 'pagetext init' to create one")
        return

    config = manager.load()

    if args.json:
        print(json.dumps(config.model_dump(mode="json"), indent=2))
        return

    tools = config.tools.resolved()

    print(f"\n📋 Repository Configuration")
    print(f"   Path: {manager.config_path}\n")

    print("Tools:")
    print(f"  tesseract: {tools.tesseract}")
    print(f"  convert: {tools.convert}")
    print(f"  identify: {tools.identify}")
    timeout = f"{config.tools.timeout_seconds:g}s" if config.tools.timeout_seconds else "none"
    print(f"  timeout: {timeout}")

    print("\nNormalization:")
    print(f"  supported_codecs: {', '.join(config.normalization.supported_codecs)}")
    print(f"  max_depth: {config.normalization.max_depth}")
    print(f"  convert_args: {' '.join(config.normalization.convert_args)}")

    print("\nDefaults:")
    print(f"  language: {config.defaults.language}")
    print(f"  enabled_languages: {', '.join(config.defaults.enabled_languages)}")
    print(f"  hocr_version_baseline: {config.defaults.hocr_version_baseline}")
    print(f"  parallel_invocations: {config.defaults.parallel_invocations}")
    print(f"  max_workers: {config.defaults.max_workers}")

    print(f"\nScratch dir: {config.scratch_dir or '(system temp)'}")
    print()
