"""
Xcode Command Line Tools.
"""

from __future__ import annotations

from .logging_config import get_logger
from .runner import CommandRunner


def clt_installed(runner: CommandRunner) -> bool:
    """True if ``xcode-select -p`` reports an active developer directory."""
    return runner.run(("xcode-select", "-p"), mutates=False).success


def ensure_xcode_clt(runner: CommandRunner) -> bool:
    """
    Make sure the Command Line Tools are present.

    The installer is a GUI flow Apple runs asynchronously, so when the tools
    are missing this only starts it; the user re-runs setup afterwards.

    Returns:
        True if the tools were already installed
    """
    logger = get_logger()

    if clt_installed(runner):
        logger.info("Xcode Command Line Tools are already installed.")
        return True

    logger.info("Installing Xcode Command Line Tools...")
    result = runner.run(("xcode-select", "--install"))
    if not result.success:
        logger.warning(f"xcode-select --install did not start: {result.error_message}")
    logger.warning("Finish the Command Line Tools installation, then run this setup again.")
    return False
