"""
Helper functions for command parsing and module versioning.
"""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def tokenize(command_string: str) -> list[str]:
    """Split a raw command string on runs of whitespace."""
    stripped = (command_string or "").strip()
    if not stripped:
        return []
    return _WHITESPACE.split(stripped)


def increment_version(version: str) -> str:
    """Bump the PATCH part of a MAJOR.MINOR.PATCH version string.

    Missing parts are treated as 0, so "2" becomes "2.0.1".
    """
    parts = (version or "").split(".")
    parts += ["0"] * (3 - len(parts))
    major, minor, patch = parts[0] or "0", parts[1] or "0", parts[2] or "0"
    try:
        patch_num = int(patch)
    except ValueError:
        patch_num = 0
    return f"{major}.{minor}.{patch_num + 1}"

