from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import pytest
import respx
from typer.testing import CliRunner

from fakes import demo_wasm
from hostcall.cli.invoke import scan_call_arguments
from hostcall.cli.main import app
from hostcall.contract.args import TypedArg, XdrArg
from hostcall.errors import ArgumentError
from hostcall.sandbox import snapshot
from hostcall.types.ledger import LedgerFootprint
from hostcall.version import __version__

runner = CliRunner()
CID = "11" * 32
RPC_URL = "http://localhost:9999/rpc"


@pytest.fixture(autouse=True)
def _detach_cli_logging():
    yield
    logger = logging.getLogger("hostcall")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True


@pytest.fixture
def wasm_file(tmp_path: Path) -> Path:
    p = tmp_path / "contract.wasm"
    p.write_bytes(demo_wasm())
    return p


def sandbox_args(ledger_file: Path, *extra: str) -> list:
    return ["--ledger-file", str(ledger_file), "--host", "fakes:make_host", *extra]


def test_scan_call_arguments_keeps_relative_order():
    args = scan_call_arguments(["--arg", "1", "--arg-xdr=AAAAAQAAAAI=", "--arg=x", "--arg-xdr", "AAAA"])
    assert args == [TypedArg("1", 0), XdrArg("AAAAAQAAAAI=", 1), TypedArg("x", 2), XdrArg("AAAA", 3)]


@pytest.mark.parametrize("tokens", [["--arg"], ["stray"], ["--args", "1"]])
def test_scan_call_arguments_errors(tokens):
    with pytest.raises(ArgumentError):
        scan_call_arguments(tokens)


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_sandbox_invoke(tmp_path: Path, wasm_file: Path):
    ledger = tmp_path / "ledger.json"
    result = runner.invoke(
        app,
        ["invoke", "--id", CID, "--fn", "add", "--wasm", str(wasm_file), "--arg", "2", "--arg=3"]
        + sandbox_args(ledger),
    )
    assert result.exit_code == 0, result.output
    assert "5" in result.output.splitlines()
    assert snapshot.read(ledger).ledger_info.sequence_number == 1


def test_sandbox_invoke_cost_and_events(tmp_path: Path, wasm_file: Path):
    result = runner.invoke(
        app,
        ["invoke", "--id", CID, "--fn", "hello", "--wasm", str(wasm_file), "--arg", "you", "--cost"]
        + sandbox_args(tmp_path / "ledger.json"),
    )
    assert result.exit_code == 0, result.output
    assert '["Hello","you"]' in result.output
    assert "Cpu Insns: 100" in result.output
    assert "#0: call hello" in result.output


def test_invoke_argument_count_error(tmp_path: Path, wasm_file: Path):
    ledger = tmp_path / "ledger.json"
    result = runner.invoke(
        app,
        ["invoke", "--id", CID, "--fn", "add", "--wasm", str(wasm_file), "--arg", "1"] + sandbox_args(ledger),
    )
    assert result.exit_code == 1
    assert "error:" in result.output
    assert "takes 2 argument(s), 1 provided" in result.output
    assert not ledger.exists()


@pytest.mark.parametrize(
    "extra, message",
    [
        (["--id", "xyz", "--fn", "add"], "contract id"),
        (["--id", CID, "--fn", "add", "--wasm", "/nonexistent/contract.wasm"], "cannot read contract file"),
        (["--id", CID, "--fn", "add", "--account", "GBAD"], "account id"),
    ],
)
def test_invoke_input_errors(tmp_path: Path, extra, message):
    result = runner.invoke(app, ["invoke", *extra] + sandbox_args(tmp_path / "ledger.json"))
    assert result.exit_code == 1
    assert message in result.output


def test_token_create_sandbox(tmp_path: Path):
    ledger = tmp_path / "ledger.json"
    result = runner.invoke(
        app, ["token", "create", "--name", "Coin", "--symbol", "COIN", "--decimal", "2"] + sandbox_args(ledger)
    )
    assert result.exit_code == 0, result.output
    contract_id = result.output.strip().splitlines()[-1]
    assert len(contract_id) == 64
    assert len(snapshot.read(ledger).entries) == 3


def test_token_create_rejects_long_symbol(tmp_path: Path):
    ledger = tmp_path / "ledger.json"
    result = runner.invoke(
        app, ["token", "create", "--name", "Coin", "--symbol", "ABCDEFGHIJKLM"] + sandbox_args(ledger)
    )
    assert result.exit_code == 1
    assert "asset code" in result.output
    assert not ledger.exists()


@respx.mock
def test_remote_invoke(keypair, wasm_file: Path):
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method = payload["method"]
        if method == "getAccount":
            result = {"id": payload["params"]["address"], "sequence": "5"}
        elif method == "simulateTransaction":
            result = {"footprint": LedgerFootprint().to_xdr_base64(), "cost": {}}
        else:
            sent.append(payload["params"]["transaction"])
            result = {"id": "ff" * 32, "status": "pending"}
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    respx.post(RPC_URL).mock(side_effect=handler)
    result = runner.invoke(
        app,
        ["invoke", "--id", CID, "--fn", "incr", "--wasm", str(wasm_file), "--rpc-server-url", RPC_URL],
        env={"HOSTCALL_SECRET_KEY": keypair.secret()},
    )
    assert result.exit_code == 0, result.output
    assert "ff" * 32 in result.output
    assert len(sent) == 1


@respx.mock
def test_remote_invoke_rpc_failure(keypair, wasm_file: Path):
    respx.post(RPC_URL).mock(return_value=httpx.Response(500, text="boom"))
    result = runner.invoke(
        app,
        [
            "invoke", "--id", CID, "--fn", "incr", "--wasm", str(wasm_file),
            "--rpc-server-url", RPC_URL, "--secret-key", keypair.secret(),
        ],
    )
    assert result.exit_code == 1
    assert "getAccount failed" in result.output
