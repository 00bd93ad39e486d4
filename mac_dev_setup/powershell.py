"""
PowerShell (cask) and PowerShell Gallery modules.

Module updates can fail when an existing install is inconsistent; the
recovery is to remove every installed version and install fresh:

    update -> on failure -> uninstall (best-effort) -> install

A failure of that final install is raised, not swallowed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Sequence

from .homebrew import CASK, BrewPackageQuery, PackageQuery, brew_install_or_upgrade
from .logging_config import get_logger
from .runner import CommandError, CommandResult, CommandRunner


PWSH_APP_BINARY = "/Applications/PowerShell.app/Contents/MacOS/pwsh"
PWSH_LINK = "/usr/local/bin/pwsh"
PS_REPOSITORY = "PSGallery"


@dataclass(frozen=True)
class ModuleResult:
    """
    Outcome of managing one PowerShell module.

    Attributes:
        module: Module name
        action: "installed", "updated" or "reinstalled"
        version: Newest installed version after the run, if known
    """
    module: str
    action: str
    version: str | None = None


def pwsh_command(script: str) -> tuple[str, ...]:
    return ("pwsh", "-NoProfile", "-NonInteractive", "-Command", script)


def link_pwsh(
    runner: CommandRunner,
    target: str = PWSH_APP_BINARY,
    link: str = PWSH_LINK,
) -> bool:
    """
    Symlink the app bundle's pwsh binary onto PATH, replacing any old link.

    Only done when ``pwsh`` does not resolve and the bundle binary exists.

    Returns:
        True if a link was created
    """
    logger = get_logger()

    if runner.which("pwsh") or not (os.path.isfile(target) and os.access(target, os.X_OK)):
        return False

    if runner.dry_run:
        logger.info(f"[dry-run] ln -sf {target} {link}")
        return True

    try:
        if os.path.lexists(link):
            os.remove(link)
        os.symlink(target, link)
    except OSError as e:
        logger.warning(f"Could not link {link} -> {target}: {e}")
        return False

    logger.info(f"Linked {link} -> {target}")
    return True


def trust_repository(runner: CommandRunner, repository: str = PS_REPOSITORY) -> bool:
    result = runner.run(pwsh_command(
        f"Set-PSRepository -Name {repository} -InstallationPolicy Trusted -ErrorAction SilentlyContinue"
    ))
    return result.success


def module_available(runner: CommandRunner, module: str) -> bool:
    script = (
        f"if (Get-Module -ListAvailable {module} | Select-Object -First 1) "
        "{ exit 0 } else { exit 1 }"
    )
    return runner.run(pwsh_command(script), mutates=False).success


def update_module(runner: CommandRunner, module: str) -> CommandResult:
    return runner.run(pwsh_command(f"Update-Module {module} -Force -ErrorAction Stop"), capture=False)


def uninstall_module(runner: CommandRunner, module: str) -> CommandResult:
    return runner.run(pwsh_command(
        f"Uninstall-Module {module} -AllVersions -Force -ErrorAction SilentlyContinue"
    ))


def install_module(runner: CommandRunner, module: str) -> CommandResult:
    """Install a module for the current user. Raises CommandError on failure."""
    return runner.check(
        pwsh_command(f"Install-Module {module} -Scope CurrentUser -Force -AllowClobber -ErrorAction Stop"),
        capture=False,
    )


def module_version(runner: CommandRunner, module: str) -> str | None:
    script = (
        f"$m = Get-Module -ListAvailable {module} | Sort-Object Version -Descending | Select-Object -First 1; "
        "if ($m) { $m.Version.ToString() }"
    )
    result = runner.run(pwsh_command(script), mutates=False)
    if not result.success:
        return None
    return result.first_line() or None


def update_with_fallback(runner: CommandRunner, module: str) -> str:
    """
    Update an installed module, reinstalling it cleanly if the update fails.

    Returns:
        "updated" or "reinstalled"

    Raises:
        CommandError: If the fallback install fails too
    """
    logger = get_logger()

    result = update_module(runner, module)
    if result.success:
        return "updated"

    logger.warning(f"Update-Module {module} failed; reinstalling all versions")
    removed = uninstall_module(runner, module)
    if not removed.success:
        logger.warning(f"Uninstall-Module {module} reported errors: {removed.error_message}")

    try:
        install_module(runner, module)
    except CommandError as e:
        e.remediation = f"Run 'Install-Module {module} -Scope CurrentUser -Force' in pwsh manually."
        raise
    return "reinstalled"


def ensure_module(runner: CommandRunner, module: str) -> ModuleResult:
    """
    Install or update a PowerShell Gallery module.

    Raises:
        CommandError: If the module cannot be installed
    """
    if module_available(runner, module):
        action = update_with_fallback(runner, module)
    else:
        install_module(runner, module)
        action = "installed"

    version = module_version(runner, module)
    return ModuleResult(module=module, action=action, version=version)


def ensure_powershell(
    runner: CommandRunner,
    modules: Sequence[str] = ("Az",),
    query: PackageQuery | None = None,
) -> bool:
    """
    Install or upgrade PowerShell, then its configured modules.

    Raises:
        CommandError: If the cask or a module cannot be installed
    """
    logger = get_logger()
    brew_install_or_upgrade(runner, "powershell", CASK, query=query or BrewPackageQuery(runner))

    link_pwsh(runner)

    if not runner.which("pwsh"):
        logger.warning("PowerShell not found; open a new terminal window and run this setup again.")
        return False

    if modules:
        logger.info(f"Installing {', '.join(modules)} modules in PowerShell...")
        if not trust_repository(runner):
            logger.warning(f"Could not mark {PS_REPOSITORY} as trusted")

    results = [ensure_module(runner, module) for module in modules]
    for result in results:
        logger.info(f"{result.module} module {result.action}. Version: {result.version or 'unknown'}")
    return True
