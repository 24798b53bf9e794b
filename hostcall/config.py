"""
hostcall configuration: RPC endpoint, network passphrase, signing key, sandbox
ledger file and Host factory.

- Loads sane defaults and supports overrides via environment variables (HOSTCALL_*).
- CLI flags are applied on top with `with_overrides`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ArgumentError
from .version import __version__

DEFAULT_LEDGER_FILE = Path(".hostcall") / "ledger.json"
DEFAULT_PASSPHRASE = "Standalone Network ; February 2017"
DEFAULT_FEE = 100


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v not in (None, "") else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ArgumentError(f"URL must start with {allowed}", url=url)
    return url


@dataclass(slots=True)
class HostcallConfig:
    # Remote strategy; None selects the sandbox
    rpc_url: Optional[str] = None
    network_passphrase: str = DEFAULT_PASSPHRASE
    secret_key: Optional[str] = field(default=None, repr=False)
    fee: int = DEFAULT_FEE
    request_timeout: float = 30.0
    # Sandbox strategy
    ledger_file: Path = field(default_factory=lambda: DEFAULT_LEDGER_FILE)
    host: Optional[str] = None
    user_agent: str = field(default_factory=lambda: f"hostcall-py/{__version__}")

    @property
    def is_remote(self) -> bool:
        return bool(self.rpc_url)

    @classmethod
    def from_env(cls, prefix: str = "HOSTCALL_") -> "HostcallConfig":
        """
        Create config from environment variables:

        HOSTCALL_RPC_URL             (http/https) selects the remote strategy
        HOSTCALL_NETWORK_PASSPHRASE  (str)
        HOSTCALL_SECRET_KEY          (S... strkey seed)
        HOSTCALL_FEE                 (int, default 100)
        HOSTCALL_TIMEOUT             (float seconds, HTTP)
        HOSTCALL_LEDGER_FILE         (path, default .hostcall/ledger.json)
        HOSTCALL_HOST                (pkg.module:factory)
        """
        rpc = _ensure_scheme(_env(f"{prefix}RPC_URL"), ("http", "https"))
        try:
            fee = int(_env(f"{prefix}FEE", str(DEFAULT_FEE)))
            timeout = float(_env(f"{prefix}TIMEOUT", "30.0"))
        except ValueError as e:
            raise ArgumentError(f"invalid numeric setting: {e}") from e
        return cls(
            rpc_url=rpc,
            network_passphrase=_env(f"{prefix}NETWORK_PASSPHRASE", DEFAULT_PASSPHRASE),
            secret_key=_env(f"{prefix}SECRET_KEY"),
            fee=fee,
            request_timeout=timeout,
            ledger_file=Path(_env(f"{prefix}LEDGER_FILE", str(DEFAULT_LEDGER_FILE))),
            host=_env(f"{prefix}HOST"),
        )

    @classmethod
    def with_overrides(cls, base: Optional["HostcallConfig"] = None, **overrides: Any) -> "HostcallConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys and None values are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict(include_secret=True)
        data.update({k: v for k, v in overrides.items() if k in data and v is not None})
        if "rpc_url" in overrides:
            _ensure_scheme(data["rpc_url"], ("http", "https"))
        data["ledger_file"] = Path(data["ledger_file"])
        if int(data["fee"]) < 0 or int(data["fee"]) > 0xFFFFFFFF:
            raise ArgumentError("fee must fit in an unsigned 32-bit integer", fee=data["fee"])
        return cls(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self, include_secret: bool = False) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "rpc_url": self.rpc_url,
            "network_passphrase": self.network_passphrase,
            "fee": int(self.fee),
            "request_timeout": float(self.request_timeout),
            "ledger_file": str(self.ledger_file),
            "host": self.host,
            "user_agent": self.user_agent,
        }
        if include_secret:
            out["secret_key"] = self.secret_key
        return out


__all__ = ["HostcallConfig", "DEFAULT_LEDGER_FILE", "DEFAULT_PASSPHRASE", "DEFAULT_FEE"]
