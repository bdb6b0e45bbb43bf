"""
pagetext config set command - Set configuration values.
"""

import json

from pydantic import ValidationError

from infra.config import ConfigManager, get_storage_root, reload_config


def cmd_config_set(args):
    """Set a configuration value."""
    manager = ConfigManager(get_storage_root())

    if not manager.exists():
        print(f"✗ No config found at: {manager.config_path}")
        print("  Run 'pagetext init' to create one")
        return

    key = args.key
    parsed_value = _parse_value(args.value)

    parts = key.split('.')
    if len(parts) == 1 and key != 'scratch_dir':
        print(f"✗ Cannot set top-level key '{key}' directly")
        print("  Use nested keys like 'defaults.language' or 'tools.tesseract'")
        return

    try:
        config = manager.set(key, parsed_value)
    except ValidationError as e:
        print(f"✗ Failed to set {key}: {e}")
        return

    reload_config()
    print(f"✓ Set {key} = {parsed_value}")

    result = config.model_dump(mode="json")
    for part in parts:
        result = result.get(part, {}) if isinstance(result, dict) else result
    print(f"  Current value: {result}")


def _parse_value(value: str):
    """
    Parse a string value into appropriate Python type.

    Handles:
    - Numbers (int, float)
    - Booleans (true, false)
    - JSON arrays and objects
    - Strings (default)
    """
    if value.lower() == 'true':
        return True
    if value.lower() == 'false':
        return False

    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    if value.startswith('[') or value.startswith('{'):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass

    return value
