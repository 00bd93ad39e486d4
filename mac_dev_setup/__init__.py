"""
mac-dev-setup - Idempotent provisioning of a macOS developer workstation.

Modules:
- Foundation: command runner, config, host detection, logging
- Homebrew: prefix detection, install-or-upgrade helper, bootstrap
- Ensurers: Xcode CLT, Python, Node/npm, PowerShell, Azure CLI, Terraform
- Pipeline: fixed step order and the end-of-run report
"""

__version__ = "1.0.0"
__author__ = "mac-dev-setup Contributors"

VERSION = __version__

# Foundation
from .runner import CommandRunner, CommandResult, CommandError, StepSkipped
from .config import SetupConfig, load_config, load_config_file, validate_config
from .environment import HostEnvironment, detect_host
from .logging_config import setup_logging, get_logger

# Homebrew
from .homebrew import (
    BrewPackage,
    PackageQuery,
    BrewPackageQuery,
    detect_brew_prefix,
    brew_install_or_upgrade,
    brew_tap,
    ensure_homebrew,
)

# Ensurers
from .xcode import ensure_xcode_clt
from .profile import plan_path_export, path_export_line
from .python_env import ensure_python_and_pip
from .node import NpmInstallReport, NpmPackageQuery, ensure_node_and_npm, install_npm_packages
from .powershell import ModuleResult, ensure_powershell, ensure_module, update_with_fallback
from .azure import ensure_azure_cli
from .terraform import ensure_terraform, ensure_terraform_docs

# Pipeline
from .pipeline import SetupStep, StepOutcome, SetupReport, default_steps, run_setup

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Foundation
    "CommandRunner",
    "CommandResult",
    "CommandError",
    "StepSkipped",
    "SetupConfig",
    "load_config",
    "load_config_file",
    "validate_config",
    "HostEnvironment",
    "detect_host",
    "setup_logging",
    "get_logger",
    # Homebrew
    "BrewPackage",
    "PackageQuery",
    "BrewPackageQuery",
    "detect_brew_prefix",
    "brew_install_or_upgrade",
    "brew_tap",
    "ensure_homebrew",
    # Ensurers
    "ensure_xcode_clt",
    "plan_path_export",
    "path_export_line",
    "ensure_python_and_pip",
    "NpmInstallReport",
    "NpmPackageQuery",
    "ensure_node_and_npm",
    "install_npm_packages",
    "ModuleResult",
    "ensure_powershell",
    "ensure_module",
    "update_with_fallback",
    "ensure_azure_cli",
    "ensure_terraform",
    "ensure_terraform_docs",
    # Pipeline
    "SetupStep",
    "StepOutcome",
    "SetupReport",
    "default_steps",
    "run_setup",
]
