"""
hostcall.types
==============

Data model shared by every layer:

- :mod:`hostcall.types.scval`  - contract call values
- :mod:`hostcall.types.ledger` - ledger keys, entries, footprints, ledger info
- :mod:`hostcall.types.tx`     - operations, transactions, envelopes, preimages
- :mod:`hostcall.types.spec`   - contract interface entries read from WASM
"""

from .ledger import LedgerEntry, LedgerFootprint, LedgerInfo, LedgerKey  # noqa: F401
from .scval import ScObjectType, ScStatic, ScVal, ScValType  # noqa: F401
from .spec import FunctionSpec, ScSpecType, ScSpecTypeDef  # noqa: F401
from .tx import HostFunction, Operation, Transaction, TransactionEnvelope  # noqa: F401

__all__ = [
    "ScVal",
    "ScValType",
    "ScStatic",
    "ScObjectType",
    "LedgerKey",
    "LedgerEntry",
    "LedgerFootprint",
    "LedgerInfo",
    "HostFunction",
    "Operation",
    "Transaction",
    "TransactionEnvelope",
    "FunctionSpec",
    "ScSpecType",
    "ScSpecTypeDef",
]
