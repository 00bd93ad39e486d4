"""
Homebrew bootstrap and the generic install-or-upgrade helper.

Homebrew lives under one of two prefixes:
1. /opt/homebrew - Apple silicon default
2. /usr/local    - legacy Intel installs

Packages come in two kinds: formulae (command-line/library packages) and
casks (application bundles).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Protocol

from .common import vlog
from .logging_config import get_logger
from .runner import CommandRunner


BREW_PREFIX_APPLE_SILICON = "/opt/homebrew"
BREW_PREFIX_INTEL = "/usr/local"
BREW_INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"

FORMULA = "formula"
CASK = "cask"
PACKAGE_KINDS = (FORMULA, CASK)


@dataclass(frozen=True)
class BrewPackage:
    """
    A Homebrew package reference.

    Attributes:
        name: Formula or cask name, optionally tap-qualified ("hashicorp/tap/terraform")
        kind: "formula" or "cask"
    """
    name: str
    kind: str = FORMULA

    def __post_init__(self):
        if self.kind not in PACKAGE_KINDS:
            raise ValueError(
                f"Invalid package kind: {self.kind}. Must be one of: {', '.join(PACKAGE_KINDS)}"
            )

    @property
    def kind_args(self) -> tuple[str, ...]:
        return ("--cask",) if self.kind == CASK else ()


class PackageQuery(Protocol):
    """Answers whether a package is already registered with its manager."""

    def is_installed(self, name: str, kind: str) -> bool:
        ...


class BrewPackageQuery:
    """PackageQuery backed by ``brew list --versions``."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def is_installed(self, name: str, kind: str = FORMULA) -> bool:
        package = BrewPackage(name, kind)
        result = self.runner.run(
            ("brew", "list", *package.kind_args, "--versions", name),
            mutates=False,
        )
        return result.success


def detect_brew_prefix(root: str = "/") -> str:
    """
    Determine the Homebrew install prefix by probing the filesystem.

    The Apple silicon prefix wins when present; legacy Intel markers are
    checked next; with no marker at all the Apple silicon default is used.

    Args:
        root: Filesystem root to probe under (for testing)

    Returns:
        "/opt/homebrew" or "/usr/local"
    """
    def under_root(path: str) -> str:
        return os.path.join(root, path.lstrip("/"))

    if os.path.isdir(under_root(BREW_PREFIX_APPLE_SILICON)):
        return BREW_PREFIX_APPLE_SILICON

    legacy_brew = under_root("/usr/local/bin/brew")
    if (
        os.path.isdir(under_root("/usr/local/Homebrew"))
        or os.path.isdir(under_root("/usr/local/Cellar"))
        or (os.path.isfile(legacy_brew) and os.access(legacy_brew, os.X_OK))
    ):
        return BREW_PREFIX_INTEL

    return BREW_PREFIX_APPLE_SILICON


def brew_install_or_upgrade(
    runner: CommandRunner,
    name: str,
    kind: str = FORMULA,
    query: PackageQuery | None = None,
) -> str:
    """
    Install a package if absent, upgrade it if present.

    Upgrades are optional improvements: a failed upgrade is logged and the
    existing install is kept. Installs are preconditions for the rest of
    the calling ensurer, so a failed install raises.

    Args:
        runner: Command runner
        name: Formula or cask name
        kind: "formula" or "cask"
        query: Installed-state lookup (defaults to BrewPackageQuery)

    Returns:
        "upgraded", "upgrade_failed" or "installed"

    Raises:
        CommandError: If a fresh install fails
    """
    logger = get_logger()
    package = BrewPackage(name, kind)
    query = query or BrewPackageQuery(runner)

    if query.is_installed(package.name, package.kind):
        logger.info(f"Upgrading {package.kind} '{package.name}'...")
        result = runner.run(("brew", "upgrade", *package.kind_args, package.name), capture=False)
        if not result.success:
            logger.warning(f"Upgrade of {package.kind} '{package.name}' failed; keeping installed version")
            return "upgrade_failed"
        return "upgraded"

    logger.info(f"Installing {package.kind} '{package.name}'...")
    runner.check(("brew", "install", *package.kind_args, package.name), capture=False)
    return "installed"


def brew_tap(runner: CommandRunner, tap: str) -> bool:
    """Register a third-party tap. Best-effort."""
    result = runner.run(("brew", "tap", tap))
    if not result.success:
        get_logger().warning(f"Could not tap '{tap}': {result.error_message}")
    return result.success


def parse_env_dump(output: str) -> dict[str, str]:
    """Parse NUL-separated ``env -0`` output into a mapping."""
    values: dict[str, str] = {}
    for entry in output.split("\0"):
        if "=" not in entry:
            continue
        key, _, value = entry.partition("=")
        if key:
            values[key] = value
    return values


def load_shellenv(runner: CommandRunner, prefix: str) -> dict[str, str]:
    """
    Apply ``brew shellenv`` for the given prefix to the runner environment.

    The shellenv snippet is evaluated by bash so its PATH/MANPATH expansions
    behave exactly as in a login shell; the resulting environment is read
    back with ``env -0``.

    Returns:
        The variables that changed
    """
    brew_bin = os.path.join(prefix, "bin", "brew")
    script = f'eval "$("{brew_bin}" shellenv)" && env -0'
    result = runner.check(("/bin/bash", "-c", script), mutates=False)

    updated = {
        key: value
        for key, value in parse_env_dump(result.stdout).items()
        if runner.env.get(key) != value
    }
    runner.update_env(updated)
    vlog(f"shellenv updated: {', '.join(sorted(updated)) or 'nothing'}", runner.verbose)
    return updated


def ensure_homebrew(runner: CommandRunner) -> bool:
    """
    Make sure Homebrew is installed, current, and on the runner's PATH.

    Raises:
        CommandError: If update, installation or shellenv loading fails
    """
    logger = get_logger()

    if runner.which("brew"):
        logger.info("Updating Homebrew...")
        runner.check(("brew", "update"), capture=False)
    else:
        logger.info("Installing Homebrew...")
        script = runner.check(("curl", "-fsSL", BREW_INSTALL_SCRIPT_URL))
        runner.check(("/bin/bash", "-c", script.stdout), capture=False)

    prefix = detect_brew_prefix()
    vlog(f"Homebrew prefix: {prefix}", runner.verbose)

    if runner.dry_run and not os.path.exists(os.path.join(prefix, "bin", "brew")):
        logger.info(f"[dry-run] would load shellenv from {prefix}/bin/brew")
    else:
        load_shellenv(runner, prefix)

    runner.run(("brew", "analytics", "off"))

    return runner.dry_run or runner.which("brew") is not None
