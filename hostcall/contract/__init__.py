"""
Contract-facing helpers: identifiers, interface (spec) reading and argument
marshaling.
"""

from .args import CallArgument, TypedArg, XdrArg, build_host_function_parameters  # noqa: F401
from .ids import contract_id_from_source_account, parse_contract_id, parse_salt, resolve_salt  # noqa: F401

__all__ = [
    "CallArgument",
    "TypedArg",
    "XdrArg",
    "build_host_function_parameters",
    "contract_id_from_source_account",
    "parse_contract_id",
    "parse_salt",
    "resolve_salt",
]
