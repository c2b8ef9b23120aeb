"""Exceptions raised by the Squads multisig tools."""

from typing import Optional


class SquadsError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(SquadsError):
    """Invalid or missing configuration (cluster name, keypair file...)."""


class RpcError(SquadsError):
    """JSON-RPC error returned by the cluster.

    Simulation failures attach the program log lines under ``error.data.logs``;
    they are kept on ``logs`` for diagnostics.
    """

    def __init__(self, message: str, code: Optional[int] = None, logs: Optional[list[str]] = None):
        super().__init__(message)
        self.code = code
        self.logs = logs


class AccountNotFoundError(SquadsError):
    """No account exists at the requested address."""

    def __init__(self, account_type: str, address: str):
        super().__init__(f"Unable to find {account_type} account at {address}")
        self.account_type = account_type
        self.address = address


class AccountDecodeError(SquadsError):
    """Account data does not match the expected layout."""


class TransactionConfirmationError(SquadsError):
    """A submitted transaction failed or was not confirmed in time."""

    def __init__(self, message: str, signature: str, err: Optional[object] = None):
        super().__init__(message)
        self.signature = signature
        self.err = err
