"""Execution dispatch: `invoke` and `token create` over the sandbox or an RPC server."""

from .invoke import InvokeRequest, InvokeResult, Invoker  # noqa: F401
from .state import DispatchState, DispatchTracker  # noqa: F401
from .token import TokenCreateRequest, TokenCreateResult, TokenCreator  # noqa: F401

__all__ = [
    "DispatchState",
    "DispatchTracker",
    "InvokeRequest",
    "InvokeResult",
    "Invoker",
    "TokenCreateRequest",
    "TokenCreateResult",
    "TokenCreator",
]
