"""
hostcall token: built-in token contract commands

    hostcall token create --name NAME --symbol SYM [--decimal 7] [--admin G...] [--salt HEX]

Prints the new token's contract id (hex).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from ..dispatch.token import DEFAULT_DECIMALS, DEFAULT_SALT_HEX, TokenCreateRequest, TokenCreator
from .common import cli_errors, load_config, parse_account

app = typer.Typer(help="Built-in token contract operations")


@app.command()
def create(
    name: str = typer.Option(..., "--name", help="Token name"),
    symbol: str = typer.Option(..., "--symbol", help="Asset code, at most 12 bytes (UTF-8)"),
    decimal: int = typer.Option(DEFAULT_DECIMALS, "--decimal", min=0, max=0xFFFFFFFF, help="Decimal places"),
    admin: Optional[str] = typer.Option(
        None, "--admin", help="Administrator (G... strkey); defaults to the zero account or the signer"
    ),
    salt: str = typer.Option(DEFAULT_SALT_HEX, "--salt", help="Deployment salt (64 hex characters)"),
    ledger_file: Optional[Path] = typer.Option(None, "--ledger-file", help="Sandbox ledger snapshot file"),
    host: Optional[str] = typer.Option(None, "--host", help="Host factory 'package.module:factory' (sandbox)"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-server-url", help="RPC server; selects remote execution"),
    secret_key: Optional[str] = typer.Option(
        None, "--secret-key", envvar="HOSTCALL_SECRET_KEY", help="Signing seed (S... strkey)"
    ),
    passphrase: Optional[str] = typer.Option(None, "--network-passphrase", help="Network passphrase"),
) -> None:
    """Deploy and initialise a token contract."""
    with cli_errors():
        request = TokenCreateRequest(
            name=name,
            symbol=symbol,
            decimals=decimal,
            salt=salt,
            admin=parse_account(admin),
        )
        config = load_config(
            rpc_url=rpc_url,
            secret_key=secret_key,
            network_passphrase=passphrase,
            ledger_file=ledger_file,
            host=host,
        )
        result = TokenCreator(config).run(request)
    typer.echo(result.contract_id)


__all__ = ["app", "create"]
