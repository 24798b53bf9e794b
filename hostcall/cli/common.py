"""
Shared plumbing for CLI commands: configuration from flags + env, account
parsing and uniform error rendering.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

import typer

from ..config import HostcallConfig
from ..dispatch.invoke import read_contract_file
from ..errors import HostcallError, InvalidAccountId
from ..utils.strkey import StrkeyError, decode_account


def load_config(**overrides: Any) -> HostcallConfig:
    """Environment first, then any flag that was actually given."""
    return HostcallConfig.with_overrides(None, **overrides)


def parse_account(text: Optional[str]) -> Optional[bytes]:
    if text is None:
        return None
    try:
        return decode_account(text)
    except StrkeyError as e:
        raise InvalidAccountId(text, str(e), cause=e) from e


def read_wasm(path: Optional[Path]) -> Optional[bytes]:
    if path is None:
        return None
    return read_contract_file(path)


def fail(message: str) -> None:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(1)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Render HostcallError to stderr and exit 1; anything else propagates."""
    try:
        yield
    except HostcallError as e:
        fail(str(e))


__all__ = ["load_config", "parse_account", "read_wasm", "fail", "cli_errors"]
