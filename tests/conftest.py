"""
Shared fixtures: a scripted CommandRunner that never touches the system.
"""

import pytest

from mac_dev_setup.logging_config import setup_logging
from mac_dev_setup.runner import CommandResult, CommandRunner


class FakeRunner(CommandRunner):
    """
    CommandRunner with canned responses.

    Responses are matched by command prefix; the most recently registered
    match wins. Unmatched commands succeed with empty output.
    """

    def __init__(self, available=(), dry_run=False, path="/usr/bin:/bin"):
        super().__init__(env={"PATH": path, "HOME": "/Users/dev"}, dry_run=dry_run)
        self.available = set(available)
        self.responses = []
        self.commands = []

    def respond(self, *prefix, exit_code=0, stdout="", stderr=""):
        self.responses.append((tuple(prefix), exit_code, stdout, stderr))
        return self

    def fail(self, *prefix, stderr="boom"):
        return self.respond(*prefix, exit_code=1, stderr=stderr)

    def run(self, command, capture=True, mutates=True):
        command = tuple(command)
        if self.dry_run and mutates:
            self.commands.append(command)
            return CommandResult(command=command, exit_code=0, dry_run=True)

        self.commands.append(command)
        for prefix, exit_code, stdout, stderr in reversed(self.responses):
            if command[:len(prefix)] == prefix:
                return CommandResult(
                    command=command,
                    exit_code=exit_code,
                    stdout=stdout,
                    stderr=stderr,
                    error_message=f"Command failed with exit code {exit_code}" if exit_code else None,
                )
        return CommandResult(command=command, exit_code=0)

    def which(self, name):
        return f"/usr/local/bin/{name}" if name in self.available else None

    def ran(self, *prefix):
        return any(command[:len(prefix)] == prefix for command in self.commands)

    def index_of(self, *prefix):
        for i, command in enumerate(self.commands):
            if command[:len(prefix)] == prefix:
                return i
        raise AssertionError(f"{prefix} was never run; ran: {self.commands}")


@pytest.fixture
def fake_runner():
    """Factory for FakeRunner instances."""
    return FakeRunner


@pytest.fixture(autouse=True)
def log_to_caplog():
    """Route records through the root logger so caplog sees them."""
    setup_logging(level="DEBUG", propagate=True)
    yield
