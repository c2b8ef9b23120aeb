"""Type definitions for the Squads multisig tools."""

from dataclasses import dataclass, field
from typing import Optional

from solders.pubkey import Pubkey


PERMISSION_INITIATE = 1
PERMISSION_VOTE = 2
PERMISSION_EXECUTE = 4


@dataclass
class Member:
    """Multisig member and its permission mask."""
    key: Pubkey
    mask: int

    @property
    def permission_names(self) -> list[str]:
        perms = []
        if self.mask & PERMISSION_INITIATE:
            perms.append("Proposer")
        if self.mask & PERMISSION_VOTE:
            perms.append("Voter")
        if self.mask & PERMISSION_EXECUTE:
            perms.append("Executor")
        return perms if perms else ["Unknown"]


@dataclass
class MultisigAccount:
    """Squads v4 multisig account."""
    address: Pubkey
    create_key: Pubkey
    config_authority: Pubkey
    threshold: int
    time_lock: int  # seconds
    transaction_index: int
    stale_transaction_index: int
    rent_collector: Optional[Pubkey]
    bump: int
    members: list[Member]


@dataclass
class ProposalStatus:
    """Proposal status tag, with the timestamp every variant but ``Executing`` carries."""
    kind: str
    timestamp: Optional[int] = None

    def to_dict(self) -> dict:
        data = {"__kind": self.kind}
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data


@dataclass
class ProposalAccount:
    """Squads v4 proposal account."""
    address: Pubkey
    multisig: Pubkey
    transaction_index: int
    status: ProposalStatus
    bump: int
    approved: list[Pubkey]
    rejected: list[Pubkey]
    cancelled: list[Pubkey]

    @property
    def is_approved(self) -> bool:
        return self.status.kind == "Approved"


@dataclass
class CompiledInstruction:
    program_id_index: int
    account_indexes: list[int]
    data: bytes


@dataclass
class AddressTableLookup:
    account_key: Pubkey
    writable_indexes: list[int]
    readonly_indexes: list[int]


@dataclass
class VaultTransactionMessage:
    """Message executed by the vault, as the program stores it."""
    num_signers: int
    num_writable_signers: int
    num_writable_non_signers: int
    account_keys: list[Pubkey]
    instructions: list[CompiledInstruction]
    address_table_lookups: list[AddressTableLookup] = field(default_factory=list)

    def is_signer_index(self, index: int) -> bool:
        return index < self.num_signers

    def is_static_writable_index(self, index: int) -> bool:
        if index < self.num_writable_signers:
            return True
        if self.num_signers <= index < self.num_signers + self.num_writable_non_signers:
            return True
        return False


@dataclass
class VaultTransaction:
    """Squads v4 vault transaction account."""
    address: Pubkey
    multisig: Pubkey
    creator: Pubkey
    index: int
    bump: int
    vault_index: int
    vault_bump: int
    ephemeral_signer_bumps: list[int]
    message: VaultTransactionMessage


@dataclass
class AccountProbe:
    """Raw account fields shown when a multisig cannot be decoded."""
    address: str
    owner: str
    data_length: int
    lamports: int


@dataclass
class ClusterConfig:
    """Resolved cluster, program and endpoint for one invocation."""
    cluster: str
    program_id: Pubkey
    endpoint: str


@dataclass
class RecentTransaction:
    """One probed transaction index; ``proposal`` is None when not found."""
    index: int
    proposal: Optional[ProposalAccount]


@dataclass
class MultisigReport:
    """Result of the info query."""
    multisig: MultisigAccount
    vault_index: int
    vault_address: Pubkey
    vault_balance: int
    recent_transactions: list[RecentTransaction]


@dataclass
class WithdrawalResult:
    """Outcome of the withdrawal pipeline.

    ``outcome`` is one of ``"empty_vault"``, ``"awaiting_approvals"`` or
    ``"executed"``.
    """
    outcome: str
    vault_address: Pubkey
    vault_balance: int
    transaction_index: Optional[int] = None
    signatures: dict[str, str] = field(default_factory=dict)
    proposal: Optional[ProposalAccount] = None
    final_vault_balance: Optional[int] = None
    final_destination_balance: Optional[int] = None


@dataclass
class MultisigDraft:
    """Unsubmitted configuration collected by the draft form."""
    name: Optional[str]
    threshold: Optional[int]
    members: list[str]
    create_key: Pubkey
    multisig_address: Pubkey
