"""
Tests for the Python ensurer (mac_dev_setup/python_env.py).
"""

from unittest.mock import patch

import pytest

from mac_dev_setup.config import SetupConfig
from mac_dev_setup.profile import path_export_line
from mac_dev_setup.python_env import (
    ensure_python_and_pip,
    ensure_user_bin_on_path,
    upgrade_packaging_tools,
)
from mac_dev_setup.runner import CommandError


USER_BASE = "/Users/dev/Library/Python/3.13"


@pytest.fixture
def profile(tmp_path):
    return tmp_path / ".zshrc"


class TestUpgradePackagingTools:
    """Tests for pip/setuptools/wheel upgrade."""

    def test_runs_ensurepip_and_pip(self, fake_runner):
        runner = fake_runner()
        assert upgrade_packaging_tools(runner) is True
        assert runner.ran("python3", "-m", "ensurepip", "--upgrade")
        assert (
            "python3", "-m", "pip", "install", "--user", "--upgrade",
            "pip", "setuptools", "wheel", "--break-system-packages",
        ) in runner.commands

    def test_failures_are_best_effort(self, fake_runner):
        """Test ensurepip and pip failures do not raise."""
        runner = fake_runner().fail("python3", "-m", "ensurepip").fail("python3", "-m", "pip")
        assert upgrade_packaging_tools(runner) is False


class TestEnsureUserBinOnPath:
    """Tests for the profile update."""

    def test_appends_export(self, fake_runner, profile):
        runner = fake_runner().respond("python3", "-m", "site", stdout=f"{USER_BASE}\n")

        assert ensure_user_bin_on_path(runner, str(profile)) is True
        assert profile.read_text() == f"{path_export_line(USER_BASE + '/bin')}\n"

    def test_skips_when_on_path(self, fake_runner, profile):
        runner = fake_runner(path=f"{USER_BASE}/bin:/usr/bin")
        runner.respond("python3", "-m", "site", stdout=f"{USER_BASE}\n")

        assert ensure_user_bin_on_path(runner, str(profile)) is False
        assert not profile.exists()

    def test_second_run_does_not_duplicate(self, fake_runner, profile):
        runner = fake_runner().respond("python3", "-m", "site", stdout=f"{USER_BASE}\n")

        ensure_user_bin_on_path(runner, str(profile))
        assert ensure_user_bin_on_path(runner, str(profile)) is False
        assert profile.read_text().count("export PATH=") == 1

    def test_dry_run_does_not_write(self, fake_runner, profile):
        runner = fake_runner(dry_run=True).respond("python3", "-m", "site", stdout=f"{USER_BASE}\n")

        assert ensure_user_bin_on_path(runner, str(profile)) is True
        assert not profile.exists()

    def test_empty_user_base(self, fake_runner, profile, caplog):
        runner = fake_runner().respond("python3", "-m", "site", stdout="")

        assert ensure_user_bin_on_path(runner, str(profile)) is False
        assert "did not report a user base" in caplog.text

    def test_user_base_failure_raises(self, fake_runner, profile):
        """Test the user-base query is an unguarded command."""
        runner = fake_runner().fail("python3", "-m", "site")
        with pytest.raises(CommandError):
            ensure_user_bin_on_path(runner, str(profile))

    @patch("mac_dev_setup.python_env.write_profile", side_effect=PermissionError(13, "Permission denied"))
    def test_unwritable_profile_raises_command_error(self, mock_write, fake_runner, profile):
        """Test a read-only profile fails the step with a manual fix."""
        runner = fake_runner().respond("python3", "-m", "site", stdout=f"{USER_BASE}\n")

        with pytest.raises(CommandError) as exc_info:
            ensure_user_bin_on_path(runner, str(profile))

        assert "Permission denied" in exc_info.value.message
        assert path_export_line(f"{USER_BASE}/bin") in exc_info.value.remediation

    def test_unreadable_profile_raises_command_error(self, fake_runner, tmp_path):
        """Test a profile path that cannot be read fails the step."""
        runner = fake_runner().respond("python3", "-m", "site", stdout=f"{USER_BASE}\n")

        with pytest.raises(CommandError, match="Could not read"):
            ensure_user_bin_on_path(runner, str(tmp_path))


class TestEnsurePythonAndPip:
    """Tests for the full Python ensurer."""

    def test_full_flow(self, fake_runner, profile):
        runner = fake_runner(available={"python3"})
        runner.respond("brew", "list", exit_code=1)
        runner.respond("python3", "-m", "site", stdout=f"{USER_BASE}\n")
        runner.respond("python3", "--version", stdout="Python 3.13.1\n")

        assert ensure_python_and_pip(runner, SetupConfig(profile_path=str(profile))) is True

        assert runner.ran("brew", "install", "python")
        assert runner.index_of("brew", "install") < runner.index_of("python3", "-m", "pip", "install")
        assert profile.exists()

    def test_missing_python3_warns(self, fake_runner, profile, caplog):
        runner = fake_runner()

        assert ensure_python_and_pip(runner, SetupConfig(profile_path=str(profile))) is False
        assert "'python3' not found" in caplog.text
        assert not runner.ran("python3")
