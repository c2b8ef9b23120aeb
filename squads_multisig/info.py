"""Multisig info query: configuration, members, default vault and recent proposals."""

import logging
from typing import Optional

import requests
from solders.pubkey import Pubkey

from .accounts import fetch_multisig, fetch_proposal
from .errors import SquadsError
from .pda import get_proposal_pda, get_vault_pda
from .rpc import decode_account_data, get_account_info, get_balance
from .types import AccountProbe, MultisigReport, RecentTransaction

DEFAULT_VAULT_INDEX = 0
RECENT_TRANSACTIONS = 5


def recent_transaction_indices(transaction_index: int, count: int = RECENT_TRANSACTIONS) -> list[int]:
    """Indices N, N-1, ... down to max(1, N - count + 1)."""
    lowest = max(1, transaction_index - count + 1)
    return list(range(transaction_index, lowest - 1, -1))


def fetch_recent_transactions(
    endpoint: str,
    multisig_pda: Pubkey,
    transaction_index: int,
    program_id: Pubkey,
) -> list[RecentTransaction]:
    """Fetch proposals for the most recent transaction indices.

    A proposal that cannot be fetched is reported as not found: the transaction
    may never have had one, and one bad index must not hide the rest.
    """
    recent = []
    for index in recent_transaction_indices(transaction_index):
        proposal_pda, _ = get_proposal_pda(multisig_pda, index, program_id)
        try:
            proposal = fetch_proposal(endpoint, proposal_pda)
        except (SquadsError, requests.RequestException) as e:
            logging.debug(f"Transaction #{index}: {e}")
            proposal = None
        recent.append(RecentTransaction(index=index, proposal=proposal))
    return recent


def query_multisig_info(endpoint: str, multisig_pda: Pubkey, program_id: Pubkey) -> MultisigReport:
    multisig = fetch_multisig(endpoint, multisig_pda)

    vault_pda, _ = get_vault_pda(multisig_pda, DEFAULT_VAULT_INDEX, program_id)
    vault_balance = get_balance(endpoint, str(vault_pda))

    recent = fetch_recent_transactions(endpoint, multisig_pda, multisig.transaction_index, program_id)

    return MultisigReport(
        multisig=multisig,
        vault_index=DEFAULT_VAULT_INDEX,
        vault_address=vault_pda,
        vault_balance=vault_balance,
        recent_transactions=recent,
    )


def probe_account(endpoint: str, address: Pubkey) -> Optional[AccountProbe]:
    """Raw existence check used when the multisig cannot be fetched."""
    account_info = get_account_info(endpoint, str(address))
    if not account_info:
        return None

    return AccountProbe(
        address=str(address),
        owner=account_info.get("owner", ""),
        data_length=len(decode_account_data(account_info)),
        lamports=account_info.get("lamports", 0),
    )
