"""
hostcall.sandbox.host: the execution-engine capability (loaded at runtime)

The sandbox does not ship a contract execution engine. It talks to one through
a narrow, duck-typed surface and loads the implementation by dotted path:

    HOSTCALL_HOST=my_engine.soroban:make_host   (or --host on the CLI)

Expected surface
----------------
• factory(storage: RecordingStorage) -> Host
• Host.set_source_account(account_id: bytes) -> None
• Host.set_ledger_info(info: LedgerInfo) -> None
• Host.invoke_function(function: HostFunction, parameters: tuple[ScVal, ...]) -> ScVal
• Host.finish() -> HostOutcome

The Host reads and writes ledger entries only through the storage it was
constructed with; that is how the footprint and the post-call state are
captured. Any exception raised by `invoke_function` is an execution failure.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Protocol, Tuple, runtime_checkable

from ..errors import HostUnavailable
from ..types.ledger import LedgerInfo
from ..types.scval import ScVal
from ..types.tx import HostFunction


@dataclass(frozen=True)
class CostReport:
    cpu_insns: int = 0
    mem_bytes: int = 0
    # per cost-type counters, opaque to this package
    by_type: Dict[str, Any] = field(default_factory=dict)

    def lines(self) -> Tuple[str, ...]:
        out = [f"Cpu Insns: {self.cpu_insns}", f"Mem Bytes: {self.mem_bytes}"]
        out.extend(f"{name}: {value}" for name, value in self.by_type.items())
        return tuple(out)


@dataclass(frozen=True)
class HostOutcome:
    cost: CostReport = field(default_factory=CostReport)
    events: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class HostCall:
    function: HostFunction
    parameters: Tuple[ScVal, ...]


@runtime_checkable
class Host(Protocol):
    def set_source_account(self, account_id: bytes) -> None: ...

    def set_ledger_info(self, info: LedgerInfo) -> None: ...

    def invoke_function(self, function: HostFunction, parameters: Tuple[ScVal, ...]) -> ScVal: ...

    def finish(self) -> HostOutcome: ...


HostFactory = Callable[[Any], Host]


def load_host_factory(target: str) -> HostFactory:
    """Resolve "package.module:attribute" to a Host factory."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise HostUnavailable(target, "expected 'package.module:factory'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise HostUnavailable(target, str(e), cause=e) from e
    factory = module
    for part in attr.split("."):
        try:
            factory = getattr(factory, part)
        except AttributeError as e:
            raise HostUnavailable(target, f"{module_name} has no attribute {attr!r}", cause=e) from e
    if not callable(factory):
        raise HostUnavailable(target, "factory is not callable")
    return factory  # type: ignore[return-value]


__all__ = ["CostReport", "HostOutcome", "HostCall", "Host", "HostFactory", "load_host_factory"]
