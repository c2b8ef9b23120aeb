"""Squads Multisig Tools - Query and withdraw from Squads v4 multisigs on Solana."""

__version__ = "1.0.0"

from .info import query_multisig_info, probe_account
from .withdraw import run_withdrawal
from .draft import new_multisig_draft
from .accounts import (
    decode_multisig,
    decode_proposal,
    decode_vault_transaction,
    fetch_multisig,
    fetch_proposal,
    fetch_vault_transaction,
)
from .formatters import (
    format_report,
    format_report_json,
    format_account_probe,
    format_draft,
)
from .errors import (
    SquadsError,
    ConfigError,
    RpcError,
    AccountNotFoundError,
    AccountDecodeError,
    TransactionConfirmationError,
)
from .types import (
    Member,
    MultisigAccount,
    ProposalAccount,
    ProposalStatus,
    VaultTransaction,
    MultisigReport,
    WithdrawalResult,
)

__all__ = [
    "query_multisig_info",
    "probe_account",
    "run_withdrawal",
    "new_multisig_draft",
    "decode_multisig",
    "decode_proposal",
    "decode_vault_transaction",
    "fetch_multisig",
    "fetch_proposal",
    "fetch_vault_transaction",
    "format_report",
    "format_report_json",
    "format_account_probe",
    "format_draft",
    "SquadsError",
    "ConfigError",
    "RpcError",
    "AccountNotFoundError",
    "AccountDecodeError",
    "TransactionConfirmationError",
    "Member",
    "MultisigAccount",
    "ProposalAccount",
    "ProposalStatus",
    "VaultTransaction",
    "MultisigReport",
    "WithdrawalResult",
]
