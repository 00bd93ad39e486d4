"""
Shell profile PATH exports.

Planning is pure: callers pass the current PATH and profile content and get
back the new content (or None), then decide whether to write it.
"""

from __future__ import annotations

import os


def path_export_line(bin_dir: str) -> str:
    return f'export PATH="{bin_dir}:$PATH"'


def plan_path_export(current_path: str, bin_dir: str, profile_content: str) -> str | None:
    """
    Compute profile content that puts bin_dir on PATH.

    Args:
        current_path: PATH of the running environment
        bin_dir: Directory that must be on PATH
        profile_content: Current content of the shell profile

    Returns:
        New profile content, or None if bin_dir is already on PATH or the
        export line is already in the profile
    """
    if bin_dir in current_path:
        return None

    line = path_export_line(bin_dir)
    if line in profile_content.splitlines():
        return None

    if profile_content and not profile_content.endswith("\n"):
        profile_content += "\n"
    return f"{profile_content}{line}\n"


def read_profile(path: str) -> str:
    """Read a shell profile; a missing file reads as empty."""
    try:
        with open(os.path.expanduser(path), "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return ""


def write_profile(path: str, content: str) -> None:
    with open(os.path.expanduser(path), "w", encoding="utf-8") as f:
        f.write(content)
