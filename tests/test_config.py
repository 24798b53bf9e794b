from __future__ import annotations

import io
import json
import logging
from pathlib import Path

import pytest

from hostcall import logging as hlog
from hostcall.config import DEFAULT_FEE, DEFAULT_LEDGER_FILE, HostcallConfig
from hostcall.errors import ArgumentError


def test_defaults_select_the_sandbox():
    cfg = HostcallConfig.from_env()
    assert not cfg.is_remote
    assert cfg.fee == DEFAULT_FEE
    assert cfg.ledger_file == DEFAULT_LEDGER_FILE
    assert cfg.user_agent.startswith("hostcall-py/")


def test_from_env(monkeypatch):
    monkeypatch.setenv("HOSTCALL_RPC_URL", "https://rpc.example/soroban")
    monkeypatch.setenv("HOSTCALL_FEE", "300")
    monkeypatch.setenv("HOSTCALL_LEDGER_FILE", "/tmp/l.json")
    monkeypatch.setenv("HOSTCALL_HOST", "pkg.mod:factory")
    cfg = HostcallConfig.from_env()
    assert cfg.is_remote
    assert cfg.fee == 300
    assert cfg.ledger_file == Path("/tmp/l.json")
    assert cfg.host == "pkg.mod:factory"


@pytest.mark.parametrize("var, value", [("HOSTCALL_RPC_URL", "ftp://x"), ("HOSTCALL_FEE", "lots")])
def test_from_env_rejects_bad_values(monkeypatch, var, value):
    monkeypatch.setenv(var, value)
    with pytest.raises(ArgumentError):
        HostcallConfig.from_env()


def test_overrides_win_and_none_is_ignored(monkeypatch):
    monkeypatch.setenv("HOSTCALL_FEE", "300")
    cfg = HostcallConfig.with_overrides(None, fee=None, secret_key="SXYZ", host="a.b:c")
    assert cfg.fee == 300
    assert cfg.secret_key == "SXYZ"
    assert cfg.host == "a.b:c"
    assert "secret_key" not in cfg.to_dict()
    assert "SXYZ" not in repr(cfg)


@pytest.mark.parametrize("fee", [-1, 1 << 32])
def test_fee_must_fit_u32(fee):
    with pytest.raises(ArgumentError):
        HostcallConfig.with_overrides(HostcallConfig(), fee=fee)


@pytest.fixture
def captured_log():
    buf = io.StringIO()
    hlog.configure(json=True, level="INFO", stream=buf)
    yield buf
    logger = logging.getLogger("hostcall")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.propagate = True


def test_json_log_carries_bound_context(captured_log):
    log = hlog.get_logger("hostcall.test")
    with hlog.trace_scope("t-1", component="invoke", strategy="sandbox"):
        hlog.bind(contract_id=b"\x11" * 2)
        log.info("state transition", extra={"state": "EXECUTE"})
    log.info("outside")

    first, second = (json.loads(line) for line in captured_log.getvalue().splitlines())
    assert first["msg"] == "state transition"
    assert first["trace_id"] == "t-1"
    assert first["strategy"] == "sandbox"
    assert first["contract_id"] == "1111"
    assert first["state"] == "EXECUTE"
    assert "trace_id" not in second


def test_text_formatter_includes_fields():
    record = logging.LogRecord("hostcall.x", logging.WARNING, __file__, 1, "hello", None, None)
    record.state = "FAILED"
    with hlog.trace_scope("t-2", component="token"):
        line = hlog.TextFormatter(io.StringIO()).format(record)
    assert "trace_id=t-2" in line
    assert "component=token" in line
    assert "state=FAILED" in line
    assert line.endswith("| hello")


def test_http_headers_carry_user_agent():
    headers = HostcallConfig().http_headers()
    assert headers["Content-Type"] == "application/json"
    assert headers["User-Agent"].startswith("hostcall-py/")
