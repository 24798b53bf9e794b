"""JSON-RPC access to a remote network."""

from .http import AccountInfo, RpcClient, SendResult, SimulationResult  # noqa: F401

__all__ = ["RpcClient", "AccountInfo", "SimulationResult", "SendResult"]
