"""
Tests for the Azure CLI ensurer (mac_dev_setup/azure.py).
"""

from mac_dev_setup.azure import add_extensions, azure_cli_version, ensure_azure_cli


class TestAzureCliVersion:
    """Tests for version reporting."""

    def test_json_version(self, fake_runner):
        runner = fake_runner().respond(
            "az", "version", stdout='{"azure-cli": "2.67.0", "azure-cli-core": "2.67.0", "extensions": {}}'
        )
        assert azure_cli_version(runner) == "2.67.0"

    def test_falls_back_to_plain_version(self, fake_runner):
        runner = fake_runner()
        runner.fail("az", "version")
        runner.respond("az", "--version", stdout="azure-cli                         2.40.0\n\ncore 2.40.0\n")
        assert azure_cli_version(runner) == "azure-cli                         2.40.0"

    def test_non_json_output_is_reported_raw(self, fake_runner):
        runner = fake_runner().respond("az", "version", stdout="something odd\n")
        assert azure_cli_version(runner) == "something odd"


class TestExtensions:
    """Tests for extension installation."""

    def test_each_extension_added(self, fake_runner):
        runner = fake_runner()
        assert add_extensions(runner, ["resource-graph", "aks-preview"]) == []
        assert runner.commands == [
            ("az", "extension", "add", "--name", "resource-graph", "--upgrade", "--only-show-errors"),
            ("az", "extension", "add", "--name", "aks-preview", "--upgrade", "--only-show-errors"),
        ]

    def test_failure_continues(self, fake_runner):
        runner = fake_runner().fail("az", "extension", "add", "--name", "resource-graph")
        assert add_extensions(runner, ["resource-graph", "aks-preview"]) == ["resource-graph"]
        assert runner.ran("az", "extension", "add", "--name", "aks-preview")


class TestEnsureAzureCli:
    """Tests for the Azure CLI ensurer."""

    def test_upgrades_and_reports(self, fake_runner, caplog):
        runner = fake_runner(available={"az"})
        runner.respond("az", "version", stdout='{"azure-cli": "2.67.0"}')

        assert ensure_azure_cli(runner) is True

        assert runner.ran("az", "upgrade", "--yes", "--only-show-errors")
        assert "Azure CLI version: 2.67.0" in caplog.text
        assert not runner.ran("az", "extension")

    def test_self_upgrade_failure_is_ignored(self, fake_runner):
        runner = fake_runner(available={"az"}).fail("az", "upgrade")
        assert ensure_azure_cli(runner) is True

    def test_configured_extensions(self, fake_runner):
        runner = fake_runner(available={"az"})
        ensure_azure_cli(runner, extensions=("resource-graph",))
        assert runner.ran("az", "extension", "add", "--name", "resource-graph")

    def test_missing_az_warns(self, fake_runner, caplog):
        runner = fake_runner()
        assert ensure_azure_cli(runner) is False
        assert "'az' not found" in caplog.text
        assert not runner.ran("az")
