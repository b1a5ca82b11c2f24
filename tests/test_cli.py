"""Tests for newrelic_export/cli.py."""

import logging
import os
from unittest.mock import patch

import pytest

from newrelic_export.cli import main
from newrelic_export.common import ExportTimeoutError


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run each CLI test without .env files or New Relic variables."""
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    original_level = root.level
    original_handlers = root.handlers[:]
    with patch.dict(os.environ, {}, clear=True):
        yield tmp_path
    root.setLevel(original_level)
    root.handlers = original_handlers


class TestMissingConfiguration:
    """Configuration failures exit non-zero before any export."""

    @patch("newrelic_export.cli.export_all_dashboards")
    def test_missing_account(self, mock_export, capsys):
        assert main(["--user-key", "NRAK-X"]) == 1

        mock_export.assert_not_called()
        assert "NEW_RELIC_ACCOUNT" in capsys.readouterr().out

    @patch("newrelic_export.cli.export_all_dashboards")
    def test_non_integer_account(self, mock_export, capsys):
        assert main(["--account-id", "prod", "--user-key", "NRAK-X"]) == 1

        mock_export.assert_not_called()
        assert "to an integer" in capsys.readouterr().out

    @patch("newrelic_export.cli.export_all_dashboards")
    def test_missing_user_key_from_env(self, mock_export, capsys):
        os.environ["NEW_RELIC_ACCOUNT"] = "1234567"

        assert main([]) == 1

        mock_export.assert_not_called()
        assert "NEW_RELIC_USER_KEY" in capsys.readouterr().out


class TestExportCommand:
    @patch("newrelic_export.cli.export_all_dashboards")
    def test_success(self, mock_export, capsys):
        mock_export.return_value = {
            "csv_path": "output/dashboards_1234567.csv",
            "account_id": 1234567,
            "mode": "pages",
            "dashboard_count": 3,
            "parent_count": 2,
            "widget_count": 9,
            "row_count": 11,
        }

        code = main(["--account-id", "1234567", "--user-key", "NRAK-ABCDEFGH", "--max-workers", "4"])

        assert code == 0
        config = mock_export.call_args.args[0]
        assert config.ACCOUNT_ID == 1234567
        assert config.MAX_WORKERS == 4
        out = capsys.readouterr().out
        assert "Export Completed Successfully!" in out
        assert "output/dashboards_1234567.csv" in out
        assert "NRAK-ABCDEFGH" not in out

    @patch("newrelic_export.cli.export_all_dashboards")
    def test_env_file_configuration(self, mock_export, isolated_env):
        (isolated_env / ".env.newrelic").write_text(
            "NEW_RELIC_ACCOUNT=42\nNEW_RELIC_USER_KEY=NRAK-FILE\nEXPORT_MODE=summary\n"
        )
        mock_export.return_value = {
            "csv_path": "output/dashboards_42.csv",
            "account_id": 42,
            "mode": "summary",
            "dashboard_count": 1,
            "parent_count": 0,
            "widget_count": 0,
            "row_count": 1,
        }

        assert main([]) == 0

        config = mock_export.call_args.args[0]
        assert config.ACCOUNT_ID == 42
        assert config.EXPORT_MODE == "summary"

    @patch("newrelic_export.cli.export_all_dashboards")
    def test_failure_returns_one(self, mock_export, capsys):
        mock_export.side_effect = ExportTimeoutError("Run deadline passed")

        assert main(["--account-id", "1", "--user-key", "NRAK-X"]) == 1

        out = capsys.readouterr().out
        assert "Export Failed!" in out
        assert "Run deadline passed" in out
