"""
Terraform and terraform-docs.

Terraform comes from HashiCorp's own tap; terraform-docs is in
homebrew-core.
"""

from __future__ import annotations

from dataclasses import dataclass

from .homebrew import BrewPackageQuery, PackageQuery, brew_install_or_upgrade, brew_tap
from .logging_config import get_logger
from .runner import CommandRunner


@dataclass(frozen=True)
class TappedTool:
    """
    A formula-installed binary, optionally from a third-party tap.

    Attributes:
        display_name: Name used in log lines
        formula: Formula name (tap-qualified when tap is set)
        binary: Executable to look for after install
        version_args: Arguments that print the version banner
        tap: Tap to register first, or None for homebrew-core
    """
    display_name: str
    formula: str
    binary: str
    version_args: tuple[str, ...] = ("--version",)
    tap: str | None = None


TERRAFORM = TappedTool(
    display_name="Terraform",
    formula="hashicorp/tap/terraform",
    binary="terraform",
    version_args=("-version",),
    tap="hashicorp/tap",
)

TERRAFORM_DOCS = TappedTool(
    display_name="terraform-docs",
    formula="terraform-docs",
    binary="terraform-docs",
)


def ensure_tapped_tool(
    runner: CommandRunner,
    tool: TappedTool,
    query: PackageQuery | None = None,
) -> bool:
    """
    Tap (if needed), install or upgrade, and log the version.

    Only the first line of the version output is logged; the rest is
    provider and upgrade notices.
    """
    logger = get_logger()

    if tool.tap:
        brew_tap(runner, tool.tap)

    brew_install_or_upgrade(runner, tool.formula, query=query or BrewPackageQuery(runner))

    if not runner.which(tool.binary):
        logger.warning(f"'{tool.binary}' not found after installation.")
        return False

    version = runner.run((tool.binary, *tool.version_args), mutates=False).first_line()
    logger.info(f"{tool.display_name} installed: {version}")
    return True


def ensure_terraform(runner: CommandRunner, query: PackageQuery | None = None) -> bool:
    return ensure_tapped_tool(runner, TERRAFORM, query)


def ensure_terraform_docs(runner: CommandRunner, query: PackageQuery | None = None) -> bool:
    return ensure_tapped_tool(runner, TERRAFORM_DOCS, query)
