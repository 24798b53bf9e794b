"""
hostcall: smart-contract invocation core
Convenience exports for the most common APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import HostcallConfig  # noqa: F401
from .errors import HostcallError  # noqa: F401

# Contract ids & arguments
from .contract.args import TypedArg, XdrArg  # noqa: F401
from .contract.ids import contract_id_from_source_account  # noqa: F401

# Dispatch
from .dispatch.invoke import InvokeRequest, Invoker  # noqa: F401
from .dispatch.token import TokenCreateRequest, TokenCreator  # noqa: F401

# Signing
from .wallet.signer import Keypair  # noqa: F401

__all__ = [
    "__version__",
    "HostcallConfig",
    "HostcallError",
    "TypedArg",
    "XdrArg",
    "contract_id_from_source_account",
    "InvokeRequest",
    "Invoker",
    "TokenCreateRequest",
    "TokenCreator",
    "Keypair",
]
