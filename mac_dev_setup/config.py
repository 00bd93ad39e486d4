"""
Configuration file parsing and management.

Supports YAML configuration files (and plain JSON for ``.json`` paths).
Merges configurations from multiple sources (custom → project → user → defaults).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from typing import Any

import yaml

from .common import vlog


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".mac-dev-setup.yml",                                      # Project root (highest priority)
    ".mac-dev-setup.yaml",                                     # Alternative extension
    os.path.expanduser("~/.config/mac-dev-setup/config.yml"),  # User global
    os.path.expanduser("~/.config/mac-dev-setup/config.yaml"),
]

DEFAULT_PROFILE_PATH = "~/.zshrc"

DEFAULT_NPM_PACKAGES = (
    "typescript",
    "eslint",
    "prettier",
    "nodemon",
    "ts-node",
    "http-server",
    "wscat",
    "npm-check-updates",
)

DEFAULT_POWERSHELL_MODULES = ("Az",)


def _as_name_tuple(value: Any, key: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValueError(f"Invalid {key}: expected a list of names, got {type(value).__name__}")
    names = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Invalid {key} entry: {item!r} is not a string")
        names.append(item.strip())
    return tuple(names)


@dataclass(frozen=True)
class SetupConfig:
    """
    Complete configuration for a provisioning run.

    Attributes:
        version: Config schema version
        profile_path: Shell profile that receives PATH export lines
        npm_packages: Global npm packages to install, in order
        azure_extensions: Azure CLI extensions to add or upgrade
        powershell_modules: PowerShell Gallery modules to install or update
        fail_fast: Stop the run at the first failed step
        log_file: Optional file receiving a full DEBUG log
        source: Path(s) of the configuration file(s) that were loaded
    """
    version: int = 1
    profile_path: str = DEFAULT_PROFILE_PATH
    npm_packages: tuple[str, ...] = DEFAULT_NPM_PACKAGES
    azure_extensions: tuple[str, ...] = ()
    powershell_modules: tuple[str, ...] = DEFAULT_POWERSHELL_MODULES
    fail_fast: bool = False
    log_file: str | None = None
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        if not isinstance(self.profile_path, str) or not self.profile_path.strip():
            raise ValueError("Invalid profile_path: must be a non-empty path")

        if not isinstance(self.fail_fast, bool):
            raise ValueError(f"Invalid fail_fast: {self.fail_fast!r}. Must be true or false")

        if self.log_file is not None and not isinstance(self.log_file, str):
            raise ValueError(f"Invalid log_file: {self.log_file!r}")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> SetupConfig:
        """Create SetupConfig from dictionary."""
        known = {f.name for f in fields(SetupConfig)} - {"source"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        return SetupConfig(
            version=data.get("version", 1),
            profile_path=data.get("profile_path", DEFAULT_PROFILE_PATH),
            npm_packages=_as_name_tuple(
                data.get("npm_packages", list(DEFAULT_NPM_PACKAGES)), "npm_packages"
            ),
            azure_extensions=_as_name_tuple(data.get("azure_extensions"), "azure_extensions"),
            powershell_modules=_as_name_tuple(
                data.get("powershell_modules", list(DEFAULT_POWERSHELL_MODULES)),
                "powershell_modules",
            ),
            fail_fast=data.get("fail_fast", False),
            log_file=data.get("log_file"),
            source=source,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "profile_path": self.profile_path,
            "npm_packages": list(self.npm_packages),
            "azure_extensions": list(self.azure_extensions),
            "powershell_modules": list(self.powershell_modules),
            "fail_fast": self.fail_fast,
            "log_file": self.log_file,
        }


def load_config_data(file_path: str, verbose: bool = False) -> dict[str, Any] | None:
    """
    Load raw configuration data from a single file.

    ``.json`` files are parsed as JSON, everything else as YAML.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        Parsed mapping, or None if the file is missing or invalid
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            if file_path.endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        vlog(f"Invalid config file {file_path}: {e}", verbose)
        return None

    if data is None:
        return {}
    if not isinstance(data, dict):
        vlog(f"Config file {file_path} does not contain a mapping", verbose)
        return None
    return data


def load_config_file(file_path: str, verbose: bool = False) -> SetupConfig | None:
    """
    Load configuration from a single file.

    Returns:
        SetupConfig object, or None if file cannot be loaded or is invalid
    """
    data = load_config_data(file_path, verbose)
    if data is None:
        return None

    try:
        config = SetupConfig.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> SetupConfig:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (if provided)
    2. Project .mac-dev-setup.yml
    3. User ~/.config/mac-dev-setup/config.yml
    4. Default configuration

    Keys are merged individually; a higher-priority file only overrides the
    keys it sets.

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged SetupConfig (never None, returns defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but cannot be loaded, or if the
            merged configuration is invalid
    """
    layers: list[tuple[str, dict[str, Any]]] = []

    if custom_path:
        data = load_config_data(custom_path, verbose)
        if data is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        layers.append((custom_path, data))
        vlog(f"Using custom config: {custom_path}", verbose)

    for location in CONFIG_LOCATIONS:
        data = load_config_data(location, verbose)
        if data is not None:
            layers.append((location, data))
            vlog(f"Found config at: {location}", verbose)

    if not layers:
        vlog("No config files found, using defaults", verbose)
        return SetupConfig()

    # Lowest priority first so higher-priority layers overwrite
    merged: dict[str, Any] = {}
    for _, data in reversed(layers):
        merged.update(data)

    sources = ", ".join(path for path, _ in layers)
    vlog(f"Merged {len(layers)} config files", verbose)
    return SetupConfig.from_dict(merged, source=sources)


def validate_config(config: SetupConfig) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: SetupConfig object to validate

    Returns:
        List of validation warning messages (empty if valid)
    """
    warnings = []

    for key in ("npm_packages", "azure_extensions", "powershell_modules"):
        names = getattr(config, key)
        if any(not name for name in names):
            warnings.append(f"Empty name in {key}")
        if len(names) != len(set(names)):
            warnings.append(f"Duplicate entries in {key}")

    if not config.npm_packages:
        warnings.append("npm_packages is empty: no global npm packages will be installed")

    if not config.powershell_modules:
        warnings.append("powershell_modules is empty: no PowerShell modules will be managed")

    return warnings
