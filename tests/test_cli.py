# test_cli.py
import json

import pytest
from click.testing import CliRunner

from Rollmark import cli


@pytest.fixture
def runner(monkeypatch, tmp_path):
    # Keep the global logging config untouched and ignore any local config.toml
    monkeypatch.setattr(cli, "setup_logging", lambda settings: None)
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def test_roll_text(runner):
    result = runner.invoke(cli.app, ["roll", "1d1+5"])
    assert result.exit_code == 0, result.output
    assert "`1d1+5`" in result.output
    assert "= **6**" in result.output


def test_roll_json(runner):
    result = runner.invoke(cli.app, ["--seed", "1", "roll", "4d6kh3", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["notation"] == "4d6kh3"
    assert len(payload["rolls"]) == 4
    assert sum(1 for r in payload["rolls"] if r["kept"]) == 3


def test_roll_times(runner):
    result = runner.invoke(cli.app, ["roll", "1d4", "--times", "3"])
    assert result.exit_code == 0, result.output
    assert len(result.output.strip().splitlines()) == 3


def test_seed_is_repeatable(runner):
    first = runner.invoke(cli.app, ["--seed", "9", "roll", "5d20", "--json"])
    second = runner.invoke(cli.app, ["--seed", "9", "roll", "5d20", "--json"])
    assert json.loads(first.output)["rolls"] == json.loads(second.output)["rolls"]


def test_roll_advantage(runner):
    result = runner.invoke(cli.app, ["roll", "d20+2", "--advantage"])
    assert result.exit_code == 0, result.output
    assert "`2d20kh1+2`" in result.output


def test_advantage_needs_single_d20(runner):
    result = runner.invoke(cli.app, ["roll", "2d6", "--advantage"])
    assert result.exit_code == 2
    assert "single d20" in result.output


def test_invalid_notation(runner):
    result = runner.invoke(cli.app, ["roll", "fireball"])
    assert result.exit_code == 2
    assert "Invalid dice notation" in result.output


def test_check(runner):
    result = runner.invoke(cli.app, ["check", "10", "--modifier", "100"])
    assert result.exit_code == 0, result.output
    assert result.output.strip().endswith("vs DC 10: success")


def test_scan(runner):
    result = runner.invoke(cli.app, ["scan", "Attack: +7 to hit, deals 2d6+4 slashing"])
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines == [
        "8-10\tattack-bonus\t1d20+7\t+7",
        "25-30\tplain-dice\t2d6+4\t2d6+4",
    ]


def test_scan_json_from_stdin(runner):
    result = runner.invoke(cli.app, ["scan", "--json"], input="DC 14 Dexterity saving throw")
    assert result.exit_code == 0, result.output
    token = json.loads(result.output)
    assert token["kind"] == "saving-throw-dc"
    assert token["dc"] == 14


def test_annotate_stdin(runner):
    result = runner.invoke(cli.app, ["annotate"], input="Hit: 1d6")
    assert result.exit_code == 0, result.output
    assert result.output == (
        'Hit: <span class="dice-roll" data-dice="1d6" data-kind="plain-dice" '
        'role="button" tabindex="0">1d6</span>'
    )


def test_too_many_dice(runner):
    result = runner.invoke(cli.app, ["roll", "99999999999d6"])
    assert result.exit_code == 2
    assert "too many dice" in result.output
