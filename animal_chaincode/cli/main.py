"""
animal-cc - local runner for the animal ledger chaincode.

Each command runs one transaction through the chaincode dispatcher against a
file-backed world state. Submit transactions (init, create) persist their
writes to the state file; evaluate transactions (query, query-all) only read.

Global options:
  --state PATH           World-state JSON file (env ANIMAL_CC_STATE_FILE)
  --log-level TEXT       Log level (env LOG_LEVEL, default WARNING)
  --log-format TEXT      "json" or "console" (env LOG_FORMAT, default console)

Examples:
  animal-cc init
  animal-cc create ANIMAL7 Australia Kangaroo brown
  animal-cc query ANIMAL7
  animal-cc query-all
  animal-cc invoke SmartContract:QueryAnimal ANIMAL0
  animal-cc metadata

Exit codes:
  0 on success, 1 when the transaction fails.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer

from .. import new_chaincode
from ..config import load_config
from ..errors import ChaincodeError
from ..logging import setup_logging
from ..shim.chaincode import SYSTEM_METADATA_FN
from ..shim.stub import FileStub

log = logging.getLogger(__name__)

app = typer.Typer(
    name="animal-cc",
    help="Animal ledger chaincode - local runner",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.state_path: Optional[Path] = None


_ctx = GlobalContext()


@app.callback()
def main_callback(
    state: Optional[Path] = typer.Option(
        None,
        "--state",
        help="World-state JSON file",
        envvar="ANIMAL_CC_STATE_FILE",
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
        envvar="LOG_LEVEL",
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: json or console",
        envvar="LOG_FORMAT",
    ),
) -> None:
    """Animal ledger chaincode - local runner."""
    setup_logging(level=log_level, log_format=log_format)
    _ctx.state_path = state or load_config().state_file


def _print_payload(payload: bytes) -> None:
    if not payload:
        return
    text = payload.decode("utf-8", errors="replace")
    try:
        typer.echo(json.dumps(json.loads(text), indent=2, ensure_ascii=False))
    except ValueError:
        typer.echo(text)


def _run(function: str, args: List[str]) -> None:
    path = _ctx.state_path or load_config().state_file
    try:
        stub = FileStub(path)
    except ChaincodeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    resp = new_chaincode().invoke(stub, function, args)
    log.debug("invoked %s -> %s", function, resp.status, extra={"state": str(path)})
    if not resp.ok:
        typer.echo(f"Error: {resp.message}", err=True)
        raise typer.Exit(1)
    _print_payload(resp.payload)


@app.command()
def init() -> None:
    """Seed the ledger with the base set of animals."""
    _run("InitLedger", [])


@app.command()
def create(
    key: str = typer.Argument(..., help="Animal key, e.g. ANIMAL7"),
    origin: str = typer.Argument(..., help="Origin"),
    name: str = typer.Argument(..., help="Name"),
    colour: str = typer.Argument(..., help="Colour"),
) -> None:
    """Create (or overwrite) an animal record."""
    _run("CreateAnimal", [key, origin, name, colour])


@app.command()
def query(key: str = typer.Argument(..., help="Animal key")) -> None:
    """Show one animal record."""
    _run("QueryAnimal", [key])


@app.command("query-all")
def query_all() -> None:
    """List every animal in the scanned key range."""
    _run("QueryAllAnimals", [])


@app.command()
def invoke(
    function: str = typer.Argument(..., help="Transaction name, optionally Contract:Function"),
    args: Optional[List[str]] = typer.Argument(None, help="String arguments"),
) -> None:
    """Invoke any transaction function by name."""
    _run(function, list(args or []))


@app.command()
def metadata() -> None:
    """Show the contract metadata (transactions and parameters)."""
    _run(SYSTEM_METADATA_FN, [])


if __name__ == "__main__":
    app()
