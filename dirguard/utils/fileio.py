"""Basic file IO helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml


def read_yaml_file(path: Path) -> Any:
    """Return the parsed YAML if the file exists, otherwise ``None``."""

    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle)


def read_text_file(path: Path) -> Optional[str]:
    """Return the file contents as UTF-8 text, or ``None`` if unreadable."""

    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None


def read_bytes_file(path: Path) -> Optional[bytes]:
    """Return the raw file contents, or ``None`` if unreadable."""

    try:
        return path.read_bytes()
    except OSError:
        return None
