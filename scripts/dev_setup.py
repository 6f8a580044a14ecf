#!/usr/bin/env python3
"""Development setup script for FocusFlow."""

import subprocess
import sys
from pathlib import Path


def run_command(cmd: str, description: str) -> bool:
    """Run a command and return success status."""
    print(f"🔧 {description}...")
    try:
        subprocess.run(cmd, shell=True, check=True, capture_output=True, text=True)
        print(f"✅ {description} completed successfully")
        return True
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed:")
        print(f"Command: {cmd}")
        print(f"Error: {e.stderr}")
        return False


def main():
    """Main setup function."""
    print("🚀 Setting up FocusFlow development environment...")

    if not Path("pyproject.toml").exists():
        print("❌ No pyproject.toml found. Please run this script from the project root.")
        sys.exit(1)

    if not run_command("poetry install --extras dev", "Installing dependencies"):
        sys.exit(1)

    if not run_command("poetry run ruff check focusflow", "Running linter checks"):
        print("⚠️  Linter found issues. Run 'poetry run ruff check --fix focusflow' to fix.")

    if not run_command("poetry run mypy focusflow", "Running type checker"):
        print("⚠️  Type checker found issues. Please review and fix.")

    if not run_command("poetry run pytest", "Running test suite"):
        print("⚠️  Some tests failed. Please review and fix.")

    if not run_command("poetry run python scripts/validate_config.py config", "Validating example config"):
        print("⚠️  Example configuration is invalid.")

    print("\n🎉 Development environment setup complete!")
    print("\nNext steps:")
    print("1. Review any warnings above")
    print("2. Copy config/focusflow.example.yaml to ~/.focusflow/focusflow.yaml")
    print("3. Run the timer with: poetry run focusflow run")


if __name__ == "__main__":
    main()
