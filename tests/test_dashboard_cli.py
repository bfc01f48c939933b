"""Tests for the dashboard command-line interface.

Run with: pytest tests/test_dashboard_cli.py -v
"""

import json

import pytest

from cli.dashboard_cli import main

SHEET_CSV = (
    "Date,Account_1,Creative_1,Users_1\n"
    "2024-01-01,acct1,cr_A,5\n"
    "2024-01-02,acct1,cr_A,7\n"
    "2024-01-02,acct2,cr_B,3\n"
)


@pytest.fixture
def sheet_file(tmp_path):
    path = tmp_path / "snellcoin.csv"
    path.write_text(SHEET_CSV, encoding="utf-8")
    return path


class TestAggregateCommand:
    """Tests for aggregating local CSV exports."""

    def test_prints_dashboard(self, sheet_file, capsys):
        main(["aggregate", str(sheet_file), "--project", "SnellCoin"])
        out = capsys.readouterr().out
        assert "CREATIVE USAGE DASHBOARD" in out
        assert "Latest date:        2024-01-02" in out
        assert "cr_A" in out
        assert "SnellCoin: 2 creatives, 2 active" in out

    def test_json_output(self, sheet_file, capsys):
        main(["aggregate", str(sheet_file), "--json", "--search", "cr_b"])
        payload = json.loads(capsys.readouterr().out)
        assert payload["latestDate"] == "2024-01-02"
        assert [c["creative"] for c in payload["creativeAnalytics"]] == ["cr_B"]
        assert payload["summary"]["totalCreatives"] == 2
        assert list(payload["projectStats"]) == ["snellcoin"]

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["aggregate", str(tmp_path / "missing.csv")])
        assert "File not found" in capsys.readouterr().out

    def test_project_count_must_match(self, sheet_file):
        with pytest.raises(SystemExit):
            main(["aggregate", str(sheet_file), "--project", "A", "--project", "B"])

    def test_same_file_name_in_two_directories(self, tmp_path, capsys):
        """Test that files whose names collide are refused, not dropped."""
        for folder, creative in (("a", "cr_1"), ("b", "cr_2")):
            (tmp_path / folder).mkdir()
            (tmp_path / folder / "data.csv").write_text(
                f"Date,Account_1,Creative_1,Users_1\n2024-01-01,acct1,{creative},5\n",
                encoding="utf-8",
            )

        with pytest.raises(SystemExit):
            main(["aggregate", str(tmp_path / "a" / "data.csv"), str(tmp_path / "b" / "data.csv"), "--json"])
        assert "Duplicate project names: data" in capsys.readouterr().out

        main([
            "aggregate", str(tmp_path / "a" / "data.csv"), str(tmp_path / "b" / "data.csv"),
            "--project", "A", "--project", "B", "--json",
        ])
        payload = json.loads(capsys.readouterr().out)
        assert payload["summary"]["totalCreatives"] == 2

    def test_repeated_project_name_rejected(self, sheet_file):
        with pytest.raises(SystemExit):
            main(["aggregate", str(sheet_file), str(sheet_file), "--project", "A", "--project", "A"])

    def test_schema_error(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text("Date,Creative_1,Users_1\n2024-01-01,cr_A,5\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            main(["aggregate", str(path), "--project", "Bad"])
        assert "No account columns found for Bad" in capsys.readouterr().out


class TestConfigCommands:
    """Tests for project configuration commands."""

    def test_configure_and_show(self, tmp_path, capsys):
        config_dir = tmp_path / "config"
        main(["--config-dir", str(config_dir), "configure", "SnellCoin", "--url", "https://x", "--gid", "0"])
        assert "Saved SnellCoin" in capsys.readouterr().out

        main(["--config-dir", str(config_dir), "show-config"])
        out = capsys.readouterr().out
        assert "✓ SnellCoin" in out
        assert "✗ EarnTube" in out
        assert "not configured yet" in out

    def test_remove_unknown(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["--config-dir", str(tmp_path), "remove", "Nope"])
        assert "❌" in capsys.readouterr().out

    def test_refresh_requires_configuration(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["--config-dir", str(tmp_path), "refresh"])
        assert "Please configure your Google Sheets URLs first" in capsys.readouterr().out
