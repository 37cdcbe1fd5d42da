import json

import pytest

from vsa.__main__ import build_parser, main
from vsa.wbs import CSV_HEADERS


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage: vsa" in capsys.readouterr().out


def test_analyze(capsys):
    assert main(["analyze", "Upgrade network for 50 users across 3 offices"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["complexity"] in ("Low", "Medium", "High")
    assert "scopeReview" in data


def test_questions(capsys):
    assert main(["questions", "help"]) == 0
    out = capsys.readouterr().out
    assert "Needs questioning: YES" in out
    assert "1. " in out


class TestMatch:
    def test_prints_ranked_table(self, capsys):
        assert main(["match", "office 365 migration"]) == 0
        assert "Office 365 Migration" in capsys.readouterr().out

    def test_no_matches(self, capsys):
        assert main(["match", "zzzz qqqq"]) == 1
        assert "No matching services found" in capsys.readouterr().out

    def test_unknown_strategy_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["match", "x", "--strategy", "fuzzy"])

    def test_configuration_error_exits_nonzero(self, monkeypatch):
        monkeypatch.setenv("VSA_HTTP_TIMEOUT", "never")
        assert main(["match", "office 365 migration", "--live"]) == 1


class TestWbs:
    def test_csv_to_stdout(self, capsys):
        assert main(["wbs", "office 365 migration", "-p", "Acme", "-f", "csv"]) == 0
        captured = capsys.readouterr()
        assert captured.out.splitlines()[0] == ",".join(CSV_HEADERS)
        assert "WBS: Acme" in captured.err

    def test_json_to_file(self, tmp_path):
        output = tmp_path / "plan.json"
        assert main(["wbs", "office 365 migration", "-p", "Acme", "--top", "1", "-o", str(output)]) == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["projectName"] == "Acme"
        # PM phase plus the single selected service
        assert len(data["phases"]) == 2

    def test_xlsx(self, tmp_path):
        output = tmp_path / "plan.xlsx"
        assert main(["wbs", "office 365 migration", "-p", "Acme", "-f", "xlsx", "-o", str(output)]) == 0
        assert output.read_bytes()[:2] == b"PK"

    def test_project_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["wbs", "firewall"])
