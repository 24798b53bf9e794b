from __future__ import annotations

from pathlib import Path

import pytest

from fakes import PASSPHRASE, FakeRpc, demo_wasm
from hostcall.config import HostcallConfig
from hostcall.wallet.signer import Keypair


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "HOSTCALL_RPC_URL",
        "HOSTCALL_NETWORK_PASSPHRASE",
        "HOSTCALL_SECRET_KEY",
        "HOSTCALL_FEE",
        "HOSTCALL_TIMEOUT",
        "HOSTCALL_LEDGER_FILE",
        "HOSTCALL_HOST",
        "HOSTCALL_LOG_FORMAT",
        "HOSTCALL_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def keypair() -> Keypair:
    # Deterministic test seed: 0x00, 0x01, ..., 0x1f
    return Keypair.from_seed(bytes(range(32)))


@pytest.fixture
def contract_id() -> bytes:
    return bytes.fromhex("11" * 32)


@pytest.fixture
def wasm() -> bytes:
    return demo_wasm()


@pytest.fixture
def ledger_file(tmp_path: Path) -> Path:
    return tmp_path / "ledger.json"


@pytest.fixture
def sandbox_config(ledger_file: Path) -> HostcallConfig:
    return HostcallConfig(ledger_file=ledger_file)


@pytest.fixture
def remote_config(keypair: Keypair) -> HostcallConfig:
    return HostcallConfig(
        rpc_url="http://localhost:8000/rpc",
        network_passphrase=PASSPHRASE,
        secret_key=keypair.secret(),
    )


@pytest.fixture
def fake_rpc() -> FakeRpc:
    return FakeRpc()
