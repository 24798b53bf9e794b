"""
hostcall invoke: call one contract function

    hostcall invoke --id <hex> --fn <name> [--arg TEXT | --arg-xdr B64]... [--wasm FILE]

Without --rpc-server-url the call runs in the sandbox against --ledger-file
and its result is printed to stdout; --cost and host events go to stderr.
With --rpc-server-url the call is simulated, signed with --secret-key and
submitted; the transaction id is printed.

--arg and --arg-xdr may be interleaved; their relative order on the command
line is the order of the function's parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import typer

from ..contract.args import CallArgument, TypedArg, XdrArg
from ..contract.ids import parse_contract_id
from ..dispatch.invoke import InvokeRequest, Invoker
from ..errors import ArgumentError
from .common import cli_errors, load_config, parse_account, read_wasm

CONTEXT_SETTINGS = {"allow_extra_args": True, "ignore_unknown_options": True}

_ARG = "--arg"
_ARG_XDR = "--arg-xdr"


def scan_call_arguments(tokens: Sequence[str]) -> List[CallArgument]:
    """
    Pick `--arg V`, `--arg=V`, `--arg-xdr V` and `--arg-xdr=V` out of raw
    command-line tokens, numbering them in the order they appear.
    """
    out: List[CallArgument] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        flag, eq, value = tok.partition("=")
        if flag not in (_ARG, _ARG_XDR):
            raise ArgumentError(f"unexpected argument {tok!r}", token=tok)
        if not eq:
            if i + 1 >= len(tokens):
                raise ArgumentError(f"{flag} requires a value", token=tok)
            i += 1
            value = tokens[i]
        position = len(out)
        out.append(XdrArg(value, position) if flag == _ARG_XDR else TypedArg(value, position))
        i += 1
    return out


def invoke(
    ctx: typer.Context,
    contract_id: str = typer.Option(..., "--id", help="Contract id (64 hex characters)"),
    function: str = typer.Option(..., "--fn", help="Function to call"),
    wasm: Optional[Path] = typer.Option(None, "--wasm", help="WASM file to install/use for the contract"),
    account: Optional[str] = typer.Option(None, "--account", help="Sandbox source account (G... strkey)"),
    cost: bool = typer.Option(False, "--cost", help="Print execution cost to stderr (sandbox)"),
    ledger_file: Optional[Path] = typer.Option(None, "--ledger-file", help="Sandbox ledger snapshot file"),
    host: Optional[str] = typer.Option(None, "--host", help="Host factory 'package.module:factory' (sandbox)"),
    rpc_url: Optional[str] = typer.Option(None, "--rpc-server-url", help="RPC server; selects remote execution"),
    secret_key: Optional[str] = typer.Option(
        None, "--secret-key", envvar="HOSTCALL_SECRET_KEY", help="Signing seed (S... strkey)"
    ),
    passphrase: Optional[str] = typer.Option(None, "--network-passphrase", help="Network passphrase"),
    fee: Optional[int] = typer.Option(None, "--fee", help="Transaction fee"),
) -> None:
    """
    Invoke a contract function. Pass parameters with --arg (typed text) or
    --arg-xdr (base64 XDR value), in declaration order.
    """
    with cli_errors():
        config = load_config(
            rpc_url=rpc_url,
            secret_key=secret_key,
            network_passphrase=passphrase,
            ledger_file=ledger_file,
            host=host,
            fee=fee,
        )
        request = InvokeRequest(
            contract_id=parse_contract_id(contract_id),
            function=function,
            arguments=scan_call_arguments(ctx.args),
            wasm=read_wasm(wasm),
            account_id=parse_account(account),
            cost=cost,
        )
        result = Invoker(config).run(request)

    typer.echo(result.output)
    if result.cost is not None:
        for line in result.cost.lines():
            typer.echo(line, err=True)
    for i, event in enumerate(result.events):
        typer.echo(f"#{i}: {event}", err=True)


__all__ = ["CONTEXT_SETTINGS", "invoke", "scan_call_arguments"]
