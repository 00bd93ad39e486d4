"""
The provisioning pipeline.

Steps run once each, strictly in order:

    xcode_clt → homebrew → python → node → npm_packages →
    powershell → azure_cli → terraform → terraform_docs

A step returning True is "ok", False is "warning" (tool missing or a
follow-up is needed), StepSkipped is "skipped", CommandError is "failed".
By default a failed step does not stop the run; Homebrew is required by
everything after it, so its failure always does.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Sequence

from .azure import ensure_azure_cli
from .config import SetupConfig
from .homebrew import ensure_homebrew
from .logging_config import get_logger
from .node import ensure_node_and_npm, install_npm_packages
from .powershell import ensure_powershell
from .python_env import ensure_python_and_pip
from .runner import CommandError, CommandRunner, StepSkipped
from .terraform import ensure_terraform, ensure_terraform_docs
from .xcode import ensure_xcode_clt


STEP_STATUSES = ("ok", "warning", "failed", "skipped")


@dataclass(frozen=True)
class SetupStep:
    """
    One ensurer in the pipeline.

    Attributes:
        name: Step identifier
        description: Human-readable description
        run: Callable taking (runner, config); returns True when the tool is ready
        required: Stop the whole run if this step fails
    """
    name: str
    description: str
    run: Callable[[CommandRunner, SetupConfig], bool]
    required: bool = False


@dataclass(frozen=True)
class StepOutcome:
    """
    Result of one pipeline step.

    Attributes:
        name: Step identifier
        status: "ok", "warning", "failed" or "skipped"
        message: Error or skip reason
        duration_seconds: Time spent in the step
    """
    name: str
    status: str
    message: str = ""
    duration_seconds: float = 0.0

    def __post_init__(self):
        if self.status not in STEP_STATUSES:
            raise ValueError(f"Invalid step status: {self.status}")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "status": self.status,
            "message": self.message,
            "duration_seconds": self.duration_seconds,
        }


@dataclass(frozen=True)
class SetupReport:
    """
    Complete result of a provisioning run.

    Attributes:
        outcomes: One outcome per step, in pipeline order
        duration_seconds: Total execution time
        dry_run: Whether commands were only printed
    """
    outcomes: tuple[StepOutcome, ...]
    duration_seconds: float = 0.0
    dry_run: bool = False

    @property
    def failed(self) -> tuple[StepOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status == "failed")

    @property
    def warnings(self) -> tuple[StepOutcome, ...]:
        return tuple(o for o in self.outcomes if o.status == "warning")

    @property
    def success(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        counts = {status: 0 for status in STEP_STATUSES}
        for outcome in self.outcomes:
            counts[outcome.status] += 1
        return (
            f"{counts['ok']} ok, {counts['warning']} warnings, "
            f"{counts['failed']} failed, {counts['skipped']} skipped "
            f"in {self.duration_seconds:.0f}s"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "outcomes": [o.to_dict() for o in self.outcomes],
            "duration_seconds": self.duration_seconds,
            "dry_run": self.dry_run,
            "success": self.success,
        }


def _npm_packages(runner: CommandRunner, config: SetupConfig) -> bool:
    return install_npm_packages(runner, config.npm_packages).success


def default_steps() -> tuple[SetupStep, ...]:
    """The fixed provisioning order."""
    return (
        SetupStep("xcode_clt", "Xcode Command Line Tools",
                  lambda runner, config: ensure_xcode_clt(runner)),
        SetupStep("homebrew", "Homebrew",
                  lambda runner, config: ensure_homebrew(runner), required=True),
        SetupStep("python", "Python 3 and pip", ensure_python_and_pip),
        SetupStep("node", "Node.js and npm",
                  lambda runner, config: ensure_node_and_npm(runner)),
        SetupStep("npm_packages", "Global npm packages", _npm_packages),
        SetupStep("powershell", "PowerShell and modules",
                  lambda runner, config: ensure_powershell(runner, config.powershell_modules)),
        SetupStep("azure_cli", "Azure CLI",
                  lambda runner, config: ensure_azure_cli(runner, config.azure_extensions)),
        SetupStep("terraform", "Terraform",
                  lambda runner, config: ensure_terraform(runner)),
        SetupStep("terraform_docs", "terraform-docs",
                  lambda runner, config: ensure_terraform_docs(runner)),
    )


def run_step(step: SetupStep, runner: CommandRunner, config: SetupConfig) -> StepOutcome:
    """Run one step and convert its result or exception into an outcome."""
    logger = get_logger()
    start_time = time.time()

    try:
        ready = step.run(runner, config)
    except StepSkipped as e:
        return StepOutcome(step.name, "skipped", str(e), time.time() - start_time)
    except CommandError as e:
        logger.error(f"{step.description}: {e.message}")
        if e.remediation:
            logger.error(f"  Fix: {e.remediation}")
        return StepOutcome(step.name, "failed", e.message, time.time() - start_time)

    status = "ok" if ready else "warning"
    return StepOutcome(step.name, status, "", time.time() - start_time)


def run_setup(
    config: SetupConfig,
    runner: CommandRunner,
    steps: Sequence[SetupStep] | None = None,
) -> SetupReport:
    """
    Run the provisioning pipeline.

    Args:
        config: Setup configuration
        runner: Command runner shared by all steps
        steps: Steps to run (defaults to default_steps())

    Returns:
        SetupReport with one outcome per step
    """
    logger = get_logger()
    steps = tuple(default_steps() if steps is None else steps)
    start_time = time.time()
    outcomes: list[StepOutcome] = []

    logger.info("Starting macOS developer environment setup")

    for index, step in enumerate(steps):
        outcome = run_step(step, runner, config)
        outcomes.append(outcome)

        if outcome.status == "failed" and (step.required or config.fail_fast):
            reason = "required step" if step.required else "fail_fast"
            logger.error(f"Stopping: {step.name} failed ({reason})")
            for remaining in steps[index + 1:]:
                outcomes.append(StepOutcome(remaining.name, "skipped", f"{step.name} failed"))
            break

    report = SetupReport(
        outcomes=tuple(outcomes),
        duration_seconds=time.time() - start_time,
        dry_run=runner.dry_run,
    )

    for outcome in report.failed:
        logger.warning(f"{outcome.name} failed: {outcome.message}")
    if report.success:
        logger.info(f"Done! {report.summary()}")
    else:
        logger.error(f"Finished with failures: {report.summary()}")
    return report
