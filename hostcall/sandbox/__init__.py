"""
Local execution against a persisted simulated ledger.

- snapshot: read / commit the ledger file
- host:     the execution-engine capability and its loader
"""

from .host import CostReport, Host, HostCall, HostOutcome, load_host_factory  # noqa: F401
from .snapshot import LedgerSnapshot  # noqa: F401

__all__ = ["CostReport", "Host", "HostCall", "HostOutcome", "LedgerSnapshot", "load_host_factory"]
