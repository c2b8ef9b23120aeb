"""Decoding and fetching of Squads v4 accounts.

Squads v4 is an Anchor program: every account starts with an 8-byte
discriminator, ``sha256("account:<Name>")[:8]``, followed by Borsh fields.

Multisig layout:
- discriminator (8)
- createKey (32)
- configAuthority (32)
- threshold (u16)
- timeLock (u32)
- transactionIndex (u64)
- staleTransactionIndex (u64)
- rentCollector (Option<Pubkey>: 1 byte flag + 32 bytes if Some)
- bump (u8)
- members (u32 length + [key (32) + permissions mask (u8)])

Proposal layout:
- discriminator (8)
- multisig (32)
- transactionIndex (u64)
- status (u8 variant + i64 timestamp, except Executing)
- bump (u8)
- approved, rejected, cancelled (Vec<Pubkey> each)
"""

import hashlib
import logging
import struct

from solders.pubkey import Pubkey

from .errors import AccountDecodeError, AccountNotFoundError
from .rpc import decode_account_data, get_account_info
from .types import (
    AddressTableLookup,
    CompiledInstruction,
    Member,
    MultisigAccount,
    ProposalAccount,
    ProposalStatus,
    VaultTransaction,
    VaultTransactionMessage,
)

PROPOSAL_STATUSES = [
    "Draft",
    "Active",
    "Rejected",
    "Approved",
    "Executing",
    "Executed",
    "Cancelled",
]
# Deprecated variant without a timestamp
UNTIMED_STATUSES = {"Executing"}


def account_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode()).digest()[:8]


MULTISIG_DISCRIMINATOR = account_discriminator("Multisig")
PROPOSAL_DISCRIMINATOR = account_discriminator("Proposal")
VAULT_TRANSACTION_DISCRIMINATOR = account_discriminator("VaultTransaction")


class BorshReader:
    """Sequential reader over Borsh-encoded account data."""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.offset = offset

    def _unpack(self, fmt: str):
        size = struct.calcsize(fmt)
        if self.offset + size > len(self.data):
            raise AccountDecodeError(
                f"Account data too short: need {self.offset + size} bytes, have {len(self.data)}"
            )
        value = struct.unpack_from(fmt, self.data, self.offset)[0]
        self.offset += size
        return value

    def u8(self) -> int:
        return self._unpack("<B")

    def u16(self) -> int:
        return self._unpack("<H")

    def u32(self) -> int:
        return self._unpack("<I")

    def u64(self) -> int:
        return self._unpack("<Q")

    def i64(self) -> int:
        return self._unpack("<q")

    def flag(self) -> bool:
        return self.u8() == 1

    def fixed(self, length: int) -> bytes:
        if self.offset + length > len(self.data):
            raise AccountDecodeError(
                f"Account data too short: need {self.offset + length} bytes, have {len(self.data)}"
            )
        value = self.data[self.offset:self.offset + length]
        self.offset += length
        return value

    def pubkey(self) -> Pubkey:
        return Pubkey.from_bytes(self.fixed(32))

    def vec_u8(self) -> bytes:
        return self.fixed(self.u32())

    def vec(self, read_item) -> list:
        return [read_item() for _ in range(self.u32())]


def _check_discriminator(data: bytes, expected: bytes, account_type: str) -> BorshReader:
    if data[:8] != expected:
        raise AccountDecodeError(f"Account is not a {account_type} (discriminator mismatch)")
    return BorshReader(data, 8)


def decode_multisig(address: Pubkey, data: bytes) -> MultisigAccount:
    """Decode Multisig account data."""
    reader = _check_discriminator(data, MULTISIG_DISCRIMINATOR, "Multisig")

    create_key = reader.pubkey()
    config_authority = reader.pubkey()
    threshold = reader.u16()
    time_lock = reader.u32()
    transaction_index = reader.u64()
    stale_transaction_index = reader.u64()

    # No padding when the Option is None
    rent_collector = reader.pubkey() if reader.flag() else None

    bump = reader.u8()
    members = reader.vec(lambda: Member(key=reader.pubkey(), mask=reader.u8()))

    return MultisigAccount(
        address=address,
        create_key=create_key,
        config_authority=config_authority,
        threshold=threshold,
        time_lock=time_lock,
        transaction_index=transaction_index,
        stale_transaction_index=stale_transaction_index,
        rent_collector=rent_collector,
        bump=bump,
        members=members,
    )


def _read_proposal_status(reader: BorshReader) -> ProposalStatus:
    variant = reader.u8()
    if variant >= len(PROPOSAL_STATUSES):
        raise AccountDecodeError(f"Unknown proposal status variant: {variant}")
    kind = PROPOSAL_STATUSES[variant]
    if kind in UNTIMED_STATUSES:
        return ProposalStatus(kind=kind)
    return ProposalStatus(kind=kind, timestamp=reader.i64())


def decode_proposal(address: Pubkey, data: bytes) -> ProposalAccount:
    """Decode Proposal account data."""
    reader = _check_discriminator(data, PROPOSAL_DISCRIMINATOR, "Proposal")

    multisig = reader.pubkey()
    transaction_index = reader.u64()
    status = _read_proposal_status(reader)
    bump = reader.u8()
    approved = reader.vec(reader.pubkey)
    rejected = reader.vec(reader.pubkey)
    cancelled = reader.vec(reader.pubkey)

    return ProposalAccount(
        address=address,
        multisig=multisig,
        transaction_index=transaction_index,
        status=status,
        bump=bump,
        approved=approved,
        rejected=rejected,
        cancelled=cancelled,
    )


def _read_vault_message(reader: BorshReader) -> VaultTransactionMessage:
    num_signers = reader.u8()
    num_writable_signers = reader.u8()
    num_writable_non_signers = reader.u8()
    account_keys = reader.vec(reader.pubkey)
    instructions = reader.vec(lambda: CompiledInstruction(
        program_id_index=reader.u8(),
        account_indexes=list(reader.vec_u8()),
        data=reader.vec_u8(),
    ))
    address_table_lookups = reader.vec(lambda: AddressTableLookup(
        account_key=reader.pubkey(),
        writable_indexes=list(reader.vec_u8()),
        readonly_indexes=list(reader.vec_u8()),
    ))
    return VaultTransactionMessage(
        num_signers=num_signers,
        num_writable_signers=num_writable_signers,
        num_writable_non_signers=num_writable_non_signers,
        account_keys=account_keys,
        instructions=instructions,
        address_table_lookups=address_table_lookups,
    )


def decode_vault_transaction(address: Pubkey, data: bytes) -> VaultTransaction:
    """Decode VaultTransaction account data (the stored message uses u32 Vec prefixes)."""
    reader = _check_discriminator(data, VAULT_TRANSACTION_DISCRIMINATOR, "VaultTransaction")

    multisig = reader.pubkey()
    creator = reader.pubkey()
    index = reader.u64()
    bump = reader.u8()
    vault_index = reader.u8()
    vault_bump = reader.u8()
    ephemeral_signer_bumps = list(reader.vec_u8())
    message = _read_vault_message(reader)

    return VaultTransaction(
        address=address,
        multisig=multisig,
        creator=creator,
        index=index,
        bump=bump,
        vault_index=vault_index,
        vault_bump=vault_bump,
        ephemeral_signer_bumps=ephemeral_signer_bumps,
        message=message,
    )


def _fetch_account_data(endpoint: str, address: Pubkey, account_type: str) -> bytes:
    account_info = get_account_info(endpoint, str(address))
    if not account_info:
        raise AccountNotFoundError(account_type, str(address))
    return decode_account_data(account_info)


def fetch_multisig(endpoint: str, address: Pubkey) -> MultisigAccount:
    data = _fetch_account_data(endpoint, address, "Multisig")
    return decode_multisig(address, data)


def fetch_proposal(endpoint: str, address: Pubkey) -> ProposalAccount:
    data = _fetch_account_data(endpoint, address, "Proposal")
    return decode_proposal(address, data)


def fetch_vault_transaction(endpoint: str, address: Pubkey) -> VaultTransaction:
    data = _fetch_account_data(endpoint, address, "VaultTransaction")
    logging.debug(f"VaultTransaction {address}: {len(data)} bytes")
    return decode_vault_transaction(address, data)
