"""Solana JSON-RPC calls used by the multisig tools."""

import base64
import logging
import time
from typing import Optional

import requests

from .config import COMMITMENT
from .errors import RpcError, TransactionConfirmationError

CONFIRM_TIMEOUT = 30.0
CONFIRM_POLL_INTERVAL = 0.5

# One session per process
session = requests.Session()
session.headers.update({"User-Agent": "squads-multisig-tools/1.0"})


def rpc_request(endpoint: str, method: str, params: list):
    """Make a JSON-RPC request to Solana and return its ``result``."""
    payload = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": method,
        "params": params,
    }
    logging.debug(f"RPC {method} -> {endpoint}")
    response = session.post(endpoint, json=payload, timeout=30)
    response.raise_for_status()
    result = response.json()
    if "error" in result:
        error = result["error"]
        data = error.get("data") or {}
        logs = data.get("logs") if isinstance(data, dict) else None
        raise RpcError(
            f"RPC error: {error.get('message', error)}",
            code=error.get("code"),
            logs=logs,
        )
    return result.get("result")


def get_account_info(endpoint: str, address: str) -> Optional[dict]:
    """Fetch account info, or None when the account does not exist."""
    result = rpc_request(endpoint, "getAccountInfo", [
        address,
        {"encoding": "base64", "commitment": COMMITMENT},
    ])
    return result.get("value") if result else None


def decode_account_data(account_info: dict) -> bytes:
    """Decode base64 account data from an RPC response."""
    data = account_info.get("data", [])
    if isinstance(data, list) and len(data) >= 1:
        return base64.b64decode(data[0])
    return b""


def get_balance(endpoint: str, address: str) -> int:
    """Lamport balance of an address."""
    result = rpc_request(endpoint, "getBalance", [address, {"commitment": COMMITMENT}])
    return result["value"]


def get_latest_blockhash(endpoint: str) -> str:
    result = rpc_request(endpoint, "getLatestBlockhash", [{"commitment": COMMITMENT}])
    return result["value"]["blockhash"]


def send_transaction(endpoint: str, raw_transaction: bytes) -> str:
    """Submit a signed, serialized transaction and return its signature."""
    encoded = base64.b64encode(raw_transaction).decode()
    return rpc_request(endpoint, "sendTransaction", [
        encoded,
        {"encoding": "base64", "preflightCommitment": COMMITMENT},
    ])


def get_signature_status(endpoint: str, signature: str) -> Optional[dict]:
    result = rpc_request(endpoint, "getSignatureStatuses", [[signature]])
    statuses = result.get("value") or [None]
    return statuses[0]


def confirm_transaction(endpoint: str, signature: str, timeout: float = CONFIRM_TIMEOUT) -> dict:
    """Poll the signature status until it reaches ``confirmed`` commitment.

    Raises TransactionConfirmationError if the transaction failed or was not
    confirmed within ``timeout`` seconds.
    """
    deadline = time.monotonic() + timeout
    while True:
        status = get_signature_status(endpoint, signature)
        if status:
            if status.get("err"):
                raise TransactionConfirmationError(
                    f"Transaction {signature} failed: {status['err']}",
                    signature,
                    status["err"],
                )
            if status.get("confirmationStatus") in ("confirmed", "finalized"):
                return status

        if time.monotonic() >= deadline:
            raise TransactionConfirmationError(
                f"Transaction {signature} was not confirmed in {timeout:.0f} seconds",
                signature,
            )
        time.sleep(CONFIRM_POLL_INTERVAL)
