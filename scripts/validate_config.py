#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from focusflow.config.defaults import Settings
from focusflow.config.loader import ConfigLoader
from focusflow.config.validation import FieldError, SettingsValidator


def validate_file_settings(loader: ConfigLoader) -> List[FieldError]:
    """Validate the settings section of the config file."""
    section = loader.load_file_config().get("settings", {}) or {}
    return SettingsValidator.validate_settings(section)


def main():
    """Main validation function."""
    config_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    loader = ConfigLoader.create(config_dir)

    print(f"🔍 Validating FocusFlow configuration in {loader.config_dir}...")

    try:
        errors = validate_file_settings(loader)
    except Exception as e:
        print(f"❌ Could not read configuration: {e}")
        sys.exit(1)

    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        sys.exit(1)

    settings = loader.default_settings()
    app = loader.app_params()
    print("✅ Settings are valid")
    print(f"  • work/short/long: {settings.work_minutes}/{settings.short_break_minutes}/"
          f"{settings.long_break_minutes} min, long break every {settings.sessions_before_long} sessions")
    print(f"  • data directory: {app.data_dir}")

    if settings == Settings():
        print("  • using compiled-in defaults")

    print(f"\n🎉 Configuration validation passed!")
    sys.exit(0)


if __name__ == "__main__":
    main()
