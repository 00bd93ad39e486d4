"""
Azure CLI and its extensions.
"""

from __future__ import annotations

import json
from typing import Sequence

from .homebrew import BrewPackageQuery, PackageQuery, brew_install_or_upgrade
from .logging_config import get_logger
from .runner import CommandRunner


def azure_cli_version(runner: CommandRunner) -> str:
    """
    Report the installed Azure CLI version.

    Uses ``az version --output json`` and falls back to the first line of
    ``az --version`` for releases without the JSON command.
    """
    result = runner.run(("az", "version", "--output", "json"), mutates=False)
    if result.success:
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict) and data.get("azure-cli"):
            return str(data["azure-cli"])
        if result.first_line():
            return result.first_line()

    return runner.run(("az", "--version"), mutates=False).first_line() or "unknown"


def add_extensions(runner: CommandRunner, extensions: Sequence[str]) -> list[str]:
    """
    Add or upgrade Azure CLI extensions. Best-effort per extension.

    Returns:
        Extensions that failed
    """
    logger = get_logger()
    failed = []
    for extension in extensions:
        logger.info(f"Installing extension '{extension}'...")
        result = runner.run(
            ("az", "extension", "add", "--name", extension, "--upgrade", "--only-show-errors"),
            capture=False,
        )
        if not result.success:
            logger.warning(f"Extension '{extension}' failed: {result.error_message}")
            failed.append(extension)
    return failed


def ensure_azure_cli(
    runner: CommandRunner,
    extensions: Sequence[str] = (),
    query: PackageQuery | None = None,
) -> bool:
    logger = get_logger()
    brew_install_or_upgrade(runner, "azure-cli", query=query or BrewPackageQuery(runner))

    if not runner.which("az"):
        logger.warning("'az' not found after installation.")
        return False

    logger.info("Upgrading Azure CLI via 'az upgrade'...")
    result = runner.run(("az", "upgrade", "--yes", "--only-show-errors"), capture=False)
    if not result.success:
        logger.warning(f"az upgrade failed: {result.error_message}")

    logger.info(f"Azure CLI version: {azure_cli_version(runner)}")

    if extensions:
        add_extensions(runner, extensions)
    return True
