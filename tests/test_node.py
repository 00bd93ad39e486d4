"""
Tests for Node.js and global npm packages (mac_dev_setup/node.py).
"""

import pytest

from mac_dev_setup.config import DEFAULT_NPM_PACKAGES
from mac_dev_setup.node import (
    NpmInstallReport,
    NpmPackageQuery,
    ensure_node_and_npm,
    install_npm_packages,
)
from mac_dev_setup.runner import StepSkipped


class TestNpmPackageQuery:
    """Tests for npm-backed PackageQuery."""

    def test_query_command(self, fake_runner):
        runner = fake_runner()
        assert NpmPackageQuery(runner).is_installed("typescript", "global") is True
        assert runner.commands == [("npm", "list", "-g", "--depth=0", "typescript")]

    def test_missing_package(self, fake_runner):
        runner = fake_runner().fail("npm", "list")
        assert NpmPackageQuery(runner).is_installed("wscat", "global") is False


class TestInstallNpmPackages:
    """Tests for the global npm package loop."""

    def test_installs_only_missing(self, fake_runner):
        """Test present packages are left alone and missing ones installed."""
        runner = fake_runner(available={"npm"})
        runner.fail("npm", "list")
        runner.respond("npm", "list", "-g", "--depth=0", "eslint")

        report = install_npm_packages(runner, ["typescript", "eslint", "prettier"])

        assert report.present == ("eslint",)
        assert report.installed == ("typescript", "prettier")
        assert not runner.ran("npm", "install", "-g", "eslint")

    def test_failure_does_not_stop_loop(self, fake_runner):
        """Test one failed install does not prevent later packages."""
        runner = fake_runner(available={"npm"})
        runner.fail("npm", "list")
        runner.fail("npm", "install", "-g", "eslint")

        report = install_npm_packages(runner, ["typescript", "eslint", "prettier", "nodemon"])

        assert report.failed == ("eslint",)
        assert report.installed == ("typescript", "prettier", "nodemon")
        assert runner.index_of("npm", "install", "-g", "eslint") < runner.index_of("npm", "install", "-g", "prettier")
        assert report.success is False

    def test_npm_missing_skips(self, fake_runner, caplog):
        """Test the whole routine is skipped without npm."""
        runner = fake_runner()

        with pytest.raises(StepSkipped):
            install_npm_packages(runner, DEFAULT_NPM_PACKAGES)

        assert runner.commands == []
        assert "skipping global npm packages" in caplog.text

    def test_order_is_preserved(self, fake_runner):
        """Test packages are handled in the configured order."""
        runner = fake_runner(available={"npm"})
        runner.fail("npm", "list")

        install_npm_packages(runner, DEFAULT_NPM_PACKAGES)

        installs = [c[-1] for c in runner.commands if c[:3] == ("npm", "install", "-g")]
        assert installs == list(DEFAULT_NPM_PACKAGES)

    def test_custom_query(self, fake_runner):
        """Test an injected PackageQuery replaces npm list."""
        class Everything:
            def is_installed(self, name, kind):
                return True

        runner = fake_runner(available={"npm"})
        report = install_npm_packages(runner, ["typescript"], query=Everything())

        assert report.present == ("typescript",)
        assert runner.commands == []


class TestNpmInstallReport:
    """Tests for NpmInstallReport."""

    def test_to_dict(self):
        report = NpmInstallReport(installed=("a",), present=("b",), failed=("c",))
        assert report.to_dict() == {"installed": ["a"], "present": ["b"], "failed": ["c"]}

    def test_success_without_failures(self):
        assert NpmInstallReport(installed=("a",)).success is True


class TestEnsureNodeAndNpm:
    """Tests for the Node ensurer."""

    def test_logs_versions(self, fake_runner, caplog):
        runner = fake_runner(available={"node", "npm"})
        runner.respond("node", "-v", stdout="v22.11.0\n")
        runner.respond("npm", "-v", stdout="10.9.0\n")

        assert ensure_node_and_npm(runner) is True
        assert "Node.js: v22.11.0" in caplog.text
        assert "npm: 10.9.0" in caplog.text

    def test_missing_node_warns(self, fake_runner, caplog):
        runner = fake_runner()
        assert ensure_node_and_npm(runner) is False
        assert "'node' not found" in caplog.text
