"""Where the CLI and dashboard find the record service.

The API URL comes from, in order: an explicit value (the ``--api-url``
option), the ``TRACKER_API_URL`` environment variable, the ``api_url`` key
of a YAML config file, and finally ``DEFAULT_API_URL``.

Config files are merged: ``~/.fundtracker/config.yaml`` first, then
``.fundtracker.yaml`` in the current directory, whose keys win.
"""

import os
from pathlib import Path

import yaml

CONFIG_FILENAME = ".fundtracker.yaml"
USER_CONFIG_DIR = Path.home() / ".fundtracker"
API_URL_ENV = "TRACKER_API_URL"

DEFAULT_API_URL = "http://localhost:8000"
VALID_KEYS = {"api_url"}


def config_paths() -> list[Path]:
    """Candidate config files, most specific first."""
    return [Path(CONFIG_FILENAME), USER_CONFIG_DIR / "config.yaml"]


def find_config() -> Path | None:
    """The config file that `fundctl config` edits, if one exists."""
    return next((p for p in config_paths() if p.exists()), None)


def _read(path: Path) -> dict:
    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(data).__name__}")
    return data


def load_config() -> dict:
    """Merged settings from every config file present; {} when there are none."""
    config: dict = {}
    for path in reversed(config_paths()):
        if path.exists():
            config.update(_read(path))
    return config


def save_config(config: dict, path: Path | None = None) -> Path:
    """Write settings (the project file by default) and return the path used."""
    path = path or Path(CONFIG_FILENAME)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(config, default_flow_style=False, sort_keys=True))
    return path


def get_default_config() -> dict:
    return {"api_url": DEFAULT_API_URL}


def resolve_api_url(explicit: str | None = None) -> str:
    """Pick the record service URL.

    Args:
        explicit: A URL given on the command line, if any.

    Returns:
        The first non-empty of explicit, $TRACKER_API_URL, the config
        file's api_url and DEFAULT_API_URL, without a trailing slash.
    """
    candidates = (
        explicit,
        os.getenv(API_URL_ENV),
        load_config().get("api_url"),
    )
    url = next((c for c in candidates if c), DEFAULT_API_URL)
    return url.rstrip("/")
