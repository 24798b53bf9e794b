"""
hostcall - invoke smart-contract functions in a local sandbox or on a network.

Commands:
  hostcall invoke        Call a contract function
  hostcall token create  Deploy and initialise a built-in token contract

Global options:
  --log-format [json|text]  Log format on stderr (env HOSTCALL_LOG_FORMAT)
  --log-level LEVEL         Log level (env HOSTCALL_LOG_LEVEL, default WARNING)
  --version                 Print the version and exit

Settings resolve flags first, then HOSTCALL_* environment variables, then
built-in defaults. Setting an RPC URL selects remote execution.
"""

from __future__ import annotations

from typing import Optional

import typer

from .. import logging as hlog
from ..version import __version__
from . import invoke, token

app = typer.Typer(
    name="hostcall",
    help="Smart-contract invocation: local sandbox or remote RPC",
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hostcall {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    log_format: Optional[str] = typer.Option(None, "--log-format", help="json or text"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    json_logs = None if log_format is None else log_format.strip().lower() == "json"
    hlog.configure(json=json_logs, level=log_level)


app.command("invoke", context_settings=invoke.CONTEXT_SETTINGS)(invoke.invoke)
app.add_typer(token.app, name="token")


def main() -> None:
    """Entry point for the hostcall CLI."""
    app()


if __name__ == "__main__":
    main()
