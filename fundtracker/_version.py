"""Centralized version management for the fund tracker."""

from pathlib import Path

# Path: _version.py -> fundtracker -> project root
_version_file = Path(__file__).parent.parent / "VERSION"
VERSION = _version_file.read_text().strip() if _version_file.exists() else "0.0.0"
