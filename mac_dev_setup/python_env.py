"""
Python 3 from Homebrew, with current packaging tools.

pip installs into the user base (``python3 -m site --user-base``), whose
``bin`` directory is added to the shell profile when it is not on PATH.
"""

from __future__ import annotations

from .config import SetupConfig
from .homebrew import BrewPackageQuery, PackageQuery, brew_install_or_upgrade
from .logging_config import get_logger
from .profile import path_export_line, plan_path_export, read_profile, write_profile
from .runner import CommandError, CommandRunner


PACKAGING_TOOLS = ("pip", "setuptools", "wheel")


def upgrade_packaging_tools(runner: CommandRunner) -> bool:
    """Best-effort upgrade of pip/setuptools/wheel in the user site."""
    logger = get_logger()
    logger.info(f"Upgrading {'/'.join(PACKAGING_TOOLS)} with --break-system-packages...")

    runner.run(("python3", "-m", "ensurepip", "--upgrade"))
    result = runner.run(
        ("python3", "-m", "pip", "install", "--user", "--upgrade",
         *PACKAGING_TOOLS, "--break-system-packages"),
        capture=False,
    )
    if not result.success:
        logger.warning(f"pip upgrade failed: {result.error_message}")
    return result.success


def ensure_user_bin_on_path(runner: CommandRunner, profile_path: str) -> bool:
    """
    Add the Python user-base bin directory to the shell profile if needed.

    Returns:
        True if the profile was (or in dry-run would be) changed

    Raises:
        CommandError: If the user base cannot be queried or the profile
            cannot be read or written
    """
    logger = get_logger()

    user_base = runner.check(("python3", "-m", "site", "--user-base"), mutates=False).stdout.strip()
    if not user_base:
        logger.warning("python3 did not report a user base; PATH left unchanged")
        return False

    bin_dir = f"{user_base}/bin"
    try:
        content = plan_path_export(runner.path, bin_dir, read_profile(profile_path))
    except OSError as e:
        raise CommandError(
            f"Could not read {profile_path}: {e}",
            remediation=f"Check the permissions of {profile_path}",
        ) from e
    if content is None:
        return False

    if runner.dry_run:
        logger.info(f"[dry-run] would add {bin_dir} to PATH via {profile_path}")
        return True

    logger.info(f"Adding {bin_dir} to PATH via {profile_path}")
    try:
        write_profile(profile_path, content)
    except OSError as e:
        raise CommandError(
            f"Could not update {profile_path}: {e}",
            remediation=f"Add this line to {profile_path} yourself: {path_export_line(bin_dir)}",
        ) from e
    return True


def ensure_python_and_pip(
    runner: CommandRunner,
    config: SetupConfig,
    query: PackageQuery | None = None,
) -> bool:
    logger = get_logger()
    brew_install_or_upgrade(runner, "python", query=query or BrewPackageQuery(runner))

    if not runner.which("python3"):
        logger.warning("'python3' not found after installation.")
        return False

    upgrade_packaging_tools(runner)
    ensure_user_bin_on_path(runner, config.profile_path)

    version = runner.run(("python3", "--version"), mutates=False)
    pip_version = runner.run(("python3", "-m", "pip", "--version"), mutates=False)
    logger.info(f"Python: {version.first_line()}")
    logger.info(f"pip: {pip_version.first_line()}")
    return True
