"""
External command execution.

Every provisioning step shells out to a package manager or tool CLI.
CommandRunner runs those commands sequentially against its own copy of
the process environment, so PATH changes made while bootstrapping
Homebrew are visible to every later command.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import Mapping, Sequence

from .common import first_line, vlog
from .logging_config import get_logger


@dataclass(frozen=True)
class CommandResult:
    """
    Result of running a single external command.

    Attributes:
        command: Command tuple that was executed
        exit_code: Process exit code (127 if not found, -1 on OS error)
        stdout: Captured standard output ("" when streamed)
        stderr: Captured standard error ("" when streamed)
        duration_seconds: Wall-clock time taken
        error_message: Human-readable error message if failed
        dry_run: Whether the command was only printed, not executed
    """
    command: tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_seconds: float = 0.0
    error_message: str | None = None
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    def first_line(self) -> str:
        """First non-empty output line, preferring stdout over stderr."""
        return first_line(self.stdout) or first_line(self.stderr)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "command": list(self.command),
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "duration_seconds": self.duration_seconds,
            "error_message": self.error_message,
            "dry_run": self.dry_run,
        }


class CommandError(Exception):
    """
    An unguarded command failed.

    Attributes:
        message: Human-readable error message
        result: The failed CommandResult, if a command ran
        remediation: Suggested fix for the error
    """
    def __init__(
        self,
        message: str,
        result: CommandResult | None = None,
        remediation: str | None = None,
    ):
        self.message = message
        self.result = result
        self.remediation = remediation
        super().__init__(message)


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in command)


class CommandRunner:
    """
    Sequential, blocking command executor.

    Commands flagged ``mutates=True`` change the machine; in dry-run mode
    they are logged and reported as successful without running. Read-only
    queries (``mutates=False``) always run.
    """

    def __init__(
        self,
        env: Mapping[str, str] | None = None,
        dry_run: bool = False,
        verbose: bool = False,
    ):
        self.env: dict[str, str] = dict(os.environ if env is None else env)
        self.dry_run = dry_run
        self.verbose = verbose

    @property
    def path(self) -> str:
        return self.env.get("PATH", "")

    def which(self, name: str) -> str | None:
        """Resolve an executable against the runner's PATH."""
        return shutil.which(name, path=self.path)

    def update_env(self, values: Mapping[str, str]) -> None:
        self.env.update(values)

    def run(
        self,
        command: Sequence[str],
        capture: bool = True,
        mutates: bool = True,
    ) -> CommandResult:
        """
        Run a command and return its result. Never raises.

        Args:
            command: Command and arguments
            capture: Capture output; False streams it to the terminal
            mutates: Whether the command changes the system (skipped in dry-run)

        Returns:
            CommandResult with execution outcome
        """
        command = tuple(command)
        rendered = format_command(command)

        if self.dry_run and mutates:
            get_logger().info(f"[dry-run] {rendered}")
            return CommandResult(command=command, exit_code=0, dry_run=True)

        vlog(f"Executing: {rendered}", self.verbose)
        start_time = time.time()

        try:
            if capture:
                proc = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    env=self.env,
                    check=False,
                )
                stdout, stderr = proc.stdout or "", proc.stderr or ""
            else:
                proc = subprocess.run(command, env=self.env, check=False)
                stdout, stderr = "", ""
        except FileNotFoundError:
            return CommandResult(
                command=command,
                exit_code=127,
                duration_seconds=time.time() - start_time,
                error_message=f"Command not found: {command[0]}",
            )
        except OSError as e:
            return CommandResult(
                command=command,
                exit_code=-1,
                duration_seconds=time.time() - start_time,
                error_message=f"Could not run {command[0]}: {e}",
            )

        duration = time.time() - start_time
        error_msg = None
        if proc.returncode != 0:
            error_msg = f"Command failed with exit code {proc.returncode}"
            if stderr.strip():
                error_msg += f": {stderr.strip()[:200]}"
            vlog(f"{rendered}: {error_msg}", self.verbose)

        return CommandResult(
            command=command,
            exit_code=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            duration_seconds=duration,
            error_message=error_msg,
        )

    def check(
        self,
        command: Sequence[str],
        capture: bool = True,
        mutates: bool = True,
    ) -> CommandResult:
        """
        Run a command that must succeed.

        Raises:
            CommandError: If the command exits non-zero or cannot be started
        """
        result = self.run(command, capture=capture, mutates=mutates)
        if not result.success:
            raise CommandError(
                f"{format_command(result.command)} failed: "
                f"{result.error_message or f'exit code {result.exit_code}'}",
                result=result,
            )
        return result


class StepSkipped(Exception):
    """A step's precondition is missing, so the step did nothing."""
