"""Command line entry points: `hostcall invoke` and `hostcall token create`."""

from __future__ import annotations

__all__ = ["main", "invoke", "token"]
