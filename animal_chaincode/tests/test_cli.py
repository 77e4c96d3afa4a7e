"""
Integration tests for the animal-cc CLI.

Each test runs against its own state file under tmp_path.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer.testing

from animal_chaincode.cli import main as cli_main
from animal_chaincode.cli.main import app

runner = typer.testing.CliRunner()


@pytest.fixture(autouse=True)
def _no_log_setup(monkeypatch):
    # The runner swaps sys.stderr per invocation; keep the root handlers alone.
    monkeypatch.setattr(cli_main, "setup_logging", lambda **kw: None)


@pytest.fixture
def state(tmp_path: Path) -> Path:
    return tmp_path / "state.json"


def run(state: Path, *args: str):
    return runner.invoke(app, ["--state", str(state), *args])


class TestCLIBasics:
    def test_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for cmd in ("init", "create", "query", "query-all", "invoke", "metadata"):
            assert cmd in result.stdout

    def test_no_args_shows_help(self) -> None:
        result = runner.invoke(app, [])
        assert "Usage" in result.output


class TestTransactions:
    def test_init_writes_state_file(self, state: Path) -> None:
        result = run(state, "init")
        assert result.exit_code == 0, result.output
        assert result.stdout == ""
        on_disk = json.loads(state.read_text(encoding="utf-8"))
        assert sorted(on_disk) == ["ANIMAL0", "ANIMAL1", "ANIMAL2"]

    def test_query_prints_record(self, state: Path) -> None:
        run(state, "init")
        result = run(state, "query", "ANIMAL0")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {
            "origin": "Africa",
            "name": "African Elefant",
            "colour": "grey",
        }

    def test_create_then_query_all(self, state: Path) -> None:
        run(state, "init")
        result = run(state, "create", "ANIMAL3", "Australia", "Kangaroo", "brown")
        assert result.exit_code == 0, result.output
        rows = json.loads(run(state, "query-all").stdout)
        assert [r["Key"] for r in rows] == ["ANIMAL0", "ANIMAL1", "ANIMAL2", "ANIMAL3"]
        assert rows[3]["Record"]["name"] == "Kangaroo"

    def test_query_missing_fails(self, state: Path) -> None:
        result = run(state, "query", "ANIMAL42")
        assert result.exit_code == 1
        assert "Error: ANIMAL42 does not exist" in result.output

    def test_invoke_generic(self, state: Path) -> None:
        run(state, "init")
        result = run(state, "invoke", "SmartContract:QueryAnimal", "ANIMAL1")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["name"] == "Cow"

    def test_invoke_without_args(self, state: Path) -> None:
        result = run(state, "invoke", "QueryAllAnimals")
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == []

    def test_invoke_unknown_function(self, state: Path) -> None:
        result = run(state, "invoke", "Nope")
        assert result.exit_code == 1
        assert "not found in contract SmartContract" in result.output

    def test_metadata(self, state: Path) -> None:
        result = run(state, "metadata")
        assert result.exit_code == 0, result.output
        meta = json.loads(result.stdout)
        names = [t["name"] for t in meta["contracts"]["SmartContract"]["transactions"]]
        assert names == ["InitLedger", "CreateAnimal", "QueryAnimal", "QueryAllAnimals"]

    def test_corrupt_state_file(self, state: Path) -> None:
        state.write_text("{oops", encoding="utf-8")
        result = run(state, "query-all")
        assert result.exit_code == 1
        assert "cannot read state file" in result.output

    def test_state_from_env(self, state: Path, monkeypatch) -> None:
        monkeypatch.setenv("ANIMAL_CC_STATE_FILE", str(state))
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0, result.output
        assert state.exists()
