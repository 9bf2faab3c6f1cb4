"""
Env-file helpers for the entry point.

Values already present in the process environment win unless
``override=True``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

from dotenv import load_dotenv

TRUTHY = frozenset({"1", "true", "yes", "y", "on"})


def load_env(
    filenames: Iterable[str] = (".env.local", ".env"),
    search_dirs: Optional[list[Path]] = None,
    override: bool = False,
) -> list[Path]:
    """
    Load env files from the project root and its config/ directory.

    Args:
        filenames: Candidate file names, first match per directory first
        search_dirs: Directories to search (default: project root, config/)
        override: Replace variables already set in the environment

    Returns:
        Env files actually loaded, in load order
    """
    if search_dirs is None:
        project_root = Path(__file__).resolve().parents[2]
        search_dirs = [project_root, project_root / "config"]

    loaded: list[Path] = []
    for directory in search_dirs:
        for name in filenames:
            candidate = Path(directory) / name
            if candidate.is_file():
                load_dotenv(dotenv_path=candidate, override=override)
                loaded.append(candidate)

    return loaded


def env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean flag (1/true/yes/y/on, case-insensitive)."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHY
