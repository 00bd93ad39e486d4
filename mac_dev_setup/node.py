"""
Node.js and global npm packages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .homebrew import BrewPackageQuery, PackageQuery, brew_install_or_upgrade
from .logging_config import get_logger
from .runner import CommandRunner, StepSkipped


GLOBAL = "global"


@dataclass(frozen=True)
class NpmInstallReport:
    """
    Outcome of a global npm package run.

    Attributes:
        installed: Packages installed by this run
        present: Packages that were already installed
        failed: Packages whose install failed
    """
    installed: tuple[str, ...] = ()
    present: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "installed": list(self.installed),
            "present": list(self.present),
            "failed": list(self.failed),
        }


class NpmPackageQuery:
    """PackageQuery backed by ``npm list -g --depth=0``."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def is_installed(self, name: str, kind: str = GLOBAL) -> bool:
        result = self.runner.run(("npm", "list", "-g", "--depth=0", name), mutates=False)
        return result.success


def ensure_node_and_npm(runner: CommandRunner, query: PackageQuery | None = None) -> bool:
    logger = get_logger()
    brew_install_or_upgrade(runner, "node", query=query or BrewPackageQuery(runner))

    if not runner.which("node"):
        logger.warning("'node' not found after installation.")
        return False

    logger.info(f"Node.js: {runner.run(('node', '-v'), mutates=False).first_line()}")
    logger.info(f"npm: {runner.run(('npm', '-v'), mutates=False).first_line()}")
    return True


def install_npm_packages(
    runner: CommandRunner,
    packages: Sequence[str],
    query: PackageQuery | None = None,
) -> NpmInstallReport:
    """
    Install global npm packages that are not yet installed.

    Each package is handled independently; a failed install is recorded
    and the loop moves on.

    Raises:
        StepSkipped: If npm is not available
    """
    logger = get_logger()

    if not runner.which("npm"):
        logger.warning("npm not available; skipping global npm packages.")
        raise StepSkipped("npm not available")

    query = query or NpmPackageQuery(runner)
    installed, present, failed = [], [], []

    for package in packages:
        if query.is_installed(package, GLOBAL):
            logger.info(f"npm package '{package}' is already installed.")
            present.append(package)
            continue

        logger.info(f"Installing global npm package '{package}'...")
        result = runner.run(("npm", "install", "-g", package), capture=False)
        if result.success:
            installed.append(package)
        else:
            logger.warning(f"npm package '{package}' failed to install: {result.error_message}")
            failed.append(package)

    return NpmInstallReport(
        installed=tuple(installed),
        present=tuple(present),
        failed=tuple(failed),
    )
