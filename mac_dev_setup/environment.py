"""
Host detection for the provisioning run.

The setup only makes sense on macOS; the architecture decides which
Homebrew prefix a fresh install will use.
"""

from __future__ import annotations

import platform
from dataclasses import dataclass

from .common import is_ci_environment, vlog
from .homebrew import BREW_PREFIX_APPLE_SILICON, BREW_PREFIX_INTEL


@dataclass(frozen=True)
class HostEnvironment:
    """
    Detected host information.

    Attributes:
        system: Kernel name as reported by platform.system() (e.g. "Darwin")
        machine: Hardware name (e.g. "arm64", "x86_64")
        release: macOS product version, empty when unknown
        ci: Whether CI indicators are present
    """
    system: str
    machine: str
    release: str = ""
    ci: bool = False

    @property
    def is_macos(self) -> bool:
        return self.system == "Darwin"

    @property
    def is_apple_silicon(self) -> bool:
        return self.is_macos and self.machine == "arm64"

    def __str__(self) -> str:
        name = f"macOS {self.release}".strip() if self.is_macos else self.system
        ci_str = ", CI" if self.ci else ""
        return f"{name} ({self.machine}{ci_str})"


def detect_host(verbose: bool = False) -> HostEnvironment:
    """
    Detect the host operating system and architecture.

    Args:
        verbose: Enable verbose logging

    Returns:
        HostEnvironment describing the current machine
    """
    system = platform.system()
    machine = platform.machine()
    release = platform.mac_ver()[0] if system == "Darwin" else ""

    host = HostEnvironment(
        system=system,
        machine=machine,
        release=release,
        ci=is_ci_environment(),
    )
    vlog(f"Detected host: {host}", verbose)
    if host.is_macos:
        prefix = BREW_PREFIX_APPLE_SILICON if host.is_apple_silicon else BREW_PREFIX_INTEL
        vlog(f"A fresh Homebrew install on this host uses {prefix}", verbose)
    return host
