#!/usr/bin/env python3
"""
Integration tests for CLI Main Entry Point

Tests end-to-end CLI command execution with real command invocation against a
snapshot in the test data directory.
"""

import json

import click
import pytest
from click.testing import CliRunner

from ledger.cli.main import main
from ledger.cli.state import parse_assignments


@pytest.mark.integration
class TestCLIMainIntegration:
    """Test main CLI entry point with real command execution."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_help_command_lists_all_subcommands(self):
        """Test ledger --help shows all registered subcommands."""
        result = self.runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Finance Dashboard Ledger" in result.output
        for command in ["show", "dispatch", "recalc", "export", "import", "cycles", "summary"]:
            assert command in result.output

    def test_version_command_shows_version_info(self):
        result = self.runner.invoke(main, ["version"])

        assert result.exit_code == 0
        assert "Finance Dashboard Ledger v" in result.output
        assert "Author:" in result.output

    def test_config_command_shows_configuration(self):
        result = self.runner.invoke(main, ["config"])

        assert result.exit_code == 0
        for label in ["Current Configuration:", "Environment: test", "State File:", "Currency: THB", "Log Level:"]:
            assert label in result.output

    def test_invalid_command_shows_error(self):
        result = self.runner.invoke(main, ["invalid-command"])

        assert result.exit_code != 0
        assert "Error" in result.output or "No such" in result.output

    def test_verbose_flag_enables_verbose_output(self):
        result = self.runner.invoke(main, ["--verbose", "config"])

        assert result.exit_code == 0
        assert "Data directory:" in result.output
        assert "Current Configuration:" in result.output

    def test_config_env_override_changes_environment(self):
        result = self.runner.invoke(main, ["--config-env", "test", "config"])

        assert result.exit_code == 0
        assert "Environment: test" in result.output

    def test_invalid_configuration_is_reported(self, monkeypatch):
        monkeypatch.setenv("LEDGER_CURRENCY", "BAHT")

        result = self.runner.invoke(main, ["config"])

        assert result.exit_code == 1
        assert "Configuration validation failed" in result.output


@pytest.mark.integration
class TestLedgerStateCommands:
    """Test show, dispatch, recalc, export and import."""

    def setup_method(self):
        self.runner = CliRunner()

    def snapshot(self):
        result = self.runner.invoke(main, ["show", "--json"])
        assert result.exit_code == 0
        return json.loads(result.output)

    def test_show_lists_seeded_accounts(self):
        result = self.runner.invoke(main, ["show"])

        assert result.exit_code == 0
        for name in ["Wallet", "True Wallet", "BK Bank", "Line Pay", "Total"]:
            assert name in result.output

    def test_show_json_is_normalized_snapshot(self):
        data = self.snapshot()

        assert len(data["accounts"]) == 4
        assert len(data["baseAccounts"]) == 4
        assert all(acc["balance"] == 0 for acc in data["baseAccounts"])

    def test_show_verbose_includes_store_summary(self):
        result = self.runner.invoke(main, ["--verbose", "show"])

        assert result.exit_code == 0
        assert "Ledger snapshot: 12 transactions" in result.output

    def test_dispatch_with_assignments(self):
        result = self.runner.invoke(main, ["dispatch", "ADD_ACCOUNT", "--set", "name=Savings", "--set", "balance=1500"])

        assert result.exit_code == 0
        assert "✅ Applied ADD_ACCOUNT" in result.output
        assert "Savings" in result.output
        assert self.snapshot()["accounts"][-1]["balance"] == 1500

    def test_dispatch_with_json_payload(self):
        payload = json.dumps({"amount": 120, "fromAccount": "acc-1", "note": "Groceries"})

        result = self.runner.invoke(main, ["dispatch", "add_transaction", "--payload", payload])

        assert result.exit_code == 0
        assert "✅ Applied ADD_TRANSACTION" in result.output
        assert self.snapshot()["transactions"][-1]["note"] == "Groceries"

    def test_dispatch_no_op(self):
        result = self.runner.invoke(main, ["dispatch", "DELETE_TRANSACTION", "--set", "id=txn-missing"])

        assert result.exit_code == 0
        assert "DELETE_TRANSACTION made no changes" in result.output

    @pytest.mark.parametrize("args", [["--payload", "[1, 2]"], ["--payload", "{bad"], ["--set", "no-equals"]])
    def test_dispatch_bad_payload(self, args):
        result = self.runner.invoke(main, ["dispatch", "ADD_ACCOUNT", *args])
        assert result.exit_code == 2

    def test_dispatch_unknown_command_type(self):
        result = self.runner.invoke(main, ["dispatch", "EXPLODE"])
        assert result.exit_code == 2

    def test_recalc(self):
        result = self.runner.invoke(main, ["recalc"])

        assert result.exit_code == 0
        assert "✅ Recalculated 4 account balances" in result.output

    def test_export_to_stdout(self):
        result = self.runner.invoke(main, ["export", "--output", "-"])

        assert result.exit_code == 0
        envelope = json.loads(result.output)
        assert envelope["version"] == 1
        assert envelope["app"] == "finance-dashboard"
        assert len(envelope["state"]["accounts"]) == 4

    def test_export_then_import(self, tmp_path):
        export_file = tmp_path / "export.json"
        self.runner.invoke(main, ["dispatch", "ADD_ACCOUNT", "--set", "name=Savings"])

        exported = self.runner.invoke(main, ["export", "-o", str(export_file)])
        self.runner.invoke(main, ["dispatch", "ADD_ACCOUNT", "--set", "name=Extra"])
        imported = self.runner.invoke(main, ["import", str(export_file)])

        assert exported.exit_code == 0
        assert export_file.exists()
        assert imported.exit_code == 0
        assert "✅ Imported" in imported.output
        assert "Previous ledger backed up to" in imported.output
        assert [acc["name"] for acc in self.snapshot()["accounts"]][-1] == "Savings"

    def test_import_rejects_bad_envelope(self, tmp_path):
        bad_file = tmp_path / "bad.json"
        bad_file.write_text(json.dumps({"state": {}}), encoding="utf-8")

        result = self.runner.invoke(main, ["import", str(bad_file)])

        assert result.exit_code == 1
        assert "Import rejected" in result.output


@pytest.mark.integration
class TestReportCommands:
    """Test cycles and summary."""

    def setup_method(self):
        self.runner = CliRunner()

    def test_cycles_around_center(self):
        result = self.runner.invoke(main, ["cycles", "--center", "2026-01", "--range", "1"])

        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert len(lines) == 3
        assert "2026-01  2025-12-27 to 2026-01-26" in lines[1]
        assert "2026-02  2026-01-27 to 2026-02-26" in lines[2]

    def test_cycles_default_range_from_config(self):
        result = self.runner.invoke(main, ["cycles"])

        assert result.exit_code == 0
        assert len(result.output.strip().splitlines()) == 7
        assert sum(line.startswith("*") for line in result.output.splitlines()) == 1

    def test_cycles_invalid_center(self):
        result = self.runner.invoke(main, ["cycles", "--center", "someday"])
        assert result.exit_code == 2

    def test_summary_of_seeded_cycle(self):
        result = self.runner.invoke(main, ["summary", "--cycle", "2026-01"])

        assert result.exit_code == 0
        assert "Cycle 2026-01" in result.output
        assert "Total Balance" in result.output
        assert "Budgets:" in result.output
        assert "Top spending:" in result.output
        assert "Food and Drinks" in result.output
        assert "Dangling references" not in result.output

    def test_summary_invalid_cycle(self):
        result = self.runner.invoke(main, ["summary", "--cycle", "2026-13"])
        assert result.exit_code == 2


class TestParseAssignments:
    """Test key=value payload parsing."""

    def test_values_are_read_as_json_when_possible(self):
        payload = parse_assignments(("amount=12.5", "name=Cash", "note=null", "flag=true", "empty="))

        assert payload == {"amount": 12.5, "name": "Cash", "note": None, "flag": True, "empty": ""}

    @pytest.mark.parametrize("assignment", ["novalue", "=5"])
    def test_malformed_assignment(self, assignment):
        with pytest.raises(click.BadParameter):
            parse_assignments((assignment,))
