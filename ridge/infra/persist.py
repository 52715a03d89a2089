"""Persistent JSON state stored under the user's home directory."""

from __future__ import annotations

import dataclasses
import json
import os
from pathlib import Path
from typing import Any


def state_dir(server_name: str) -> str:
    """Return ~/.mcp-context/<server_name>, creating it if needed."""
    directory = Path.home() / ".mcp-context" / server_name
    directory.mkdir(parents=True, exist_ok=True)
    return str(directory)


def load_json(path: str | os.PathLike[str]) -> Any:
    """Read and parse a JSON file.

    A missing file raises FileNotFoundError; malformed content raises ValueError.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        raise ValueError(f"parsing {os.path.basename(path)}: {err}") from err


def save_json(path: str | os.PathLike[str], value: Any) -> None:
    """Write a value as indented JSON, creating parent directories."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)
    target.write_text(json.dumps(value, indent=2, ensure_ascii=False), encoding="utf-8")