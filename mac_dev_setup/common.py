"""
Common utilities shared across mac_dev_setup modules.
"""

from __future__ import annotations

import os
import sys


def is_ci_environment() -> bool:
    """
    Check if running in a CI/CD environment.

    Returns:
        True if CI indicators are present, False otherwise.
    """
    ci_indicators = [
        "CI",
        "CONTINUOUS_INTEGRATION",
        "GITHUB_ACTIONS",
        "GITLAB_CI",
        "CIRCLECI",
        "BUILDKITE",
        "TF_BUILD",  # Azure Pipelines
    ]
    return any(os.environ.get(var) for var in ci_indicators)


def first_line(text: str) -> str:
    """Return the first non-empty line of text, stripped."""
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log a debug message when verbose mode is on.

    Also enabled by MAC_DEV_SETUP_DEBUG=1 in the environment.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("MAC_DEV_SETUP_DEBUG", "0") == "1":
        try:
            from .logging_config import get_logger
            get_logger().debug(msg)
        except Exception:
            try:
                print(f"[mac_dev_setup] {msg}", file=sys.stderr)
            except Exception:
                pass
