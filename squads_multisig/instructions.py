"""Squads v4 instruction builders.

Instruction data is the Anchor discriminator ``sha256("global:<name>")[:8]``
followed by Borsh-encoded arguments.
"""

import hashlib
import struct
from typing import Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.system_program import TransferParams, transfer

from .pda import get_ephemeral_signer_pda, get_proposal_pda, get_transaction_pda, get_vault_pda
from .types import CompiledInstruction, VaultTransaction, VaultTransactionMessage


def instruction_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def encode_option_string(value: Optional[str]) -> bytes:
    if value is None:
        return b"\x00"
    encoded = value.encode("utf-8")
    return b"\x01" + struct.pack("<I", len(encoded)) + encoded


def encode_vec_u8(value: bytes) -> bytes:
    return struct.pack("<I", len(value)) + value


def transfer_instruction(from_pubkey: Pubkey, to_pubkey: Pubkey, lamports: int) -> Instruction:
    return transfer(TransferParams(from_pubkey=from_pubkey, to_pubkey=to_pubkey, lamports=lamports))


def compile_vault_message(payer: Pubkey, instructions: list[Instruction]) -> VaultTransactionMessage:
    """Compile instructions into the message a vault will execute.

    Keys are ordered writable signers, readonly signers, writable non-signers,
    readonly non-signers, with the payer first and insertion order otherwise.
    """
    keys: dict[Pubkey, dict] = {payer: {"signer": True, "writable": True}}
    for ix in instructions:
        keys.setdefault(ix.program_id, {"signer": False, "writable": False})
        for meta in ix.accounts:
            flags = keys.setdefault(meta.pubkey, {"signer": False, "writable": False})
            flags["signer"] = flags["signer"] or meta.is_signer
            flags["writable"] = flags["writable"] or meta.is_writable

    def category(item):
        key, flags = item
        if key == payer:
            return -1
        if flags["signer"]:
            return 0 if flags["writable"] else 1
        return 2 if flags["writable"] else 3

    ordered = sorted(keys.items(), key=category)
    account_keys = [key for key, _ in ordered]
    index_of = {key: i for i, key in enumerate(account_keys)}

    num_signers = sum(1 for _, flags in ordered if flags["signer"])
    num_writable_signers = sum(1 for _, flags in ordered if flags["signer"] and flags["writable"])
    num_writable_non_signers = sum(1 for _, flags in ordered if not flags["signer"] and flags["writable"])

    compiled = [
        CompiledInstruction(
            program_id_index=index_of[ix.program_id],
            account_indexes=[index_of[meta.pubkey] for meta in ix.accounts],
            data=bytes(ix.data),
        )
        for ix in instructions
    ]

    return VaultTransactionMessage(
        num_signers=num_signers,
        num_writable_signers=num_writable_signers,
        num_writable_non_signers=num_writable_non_signers,
        account_keys=account_keys,
        instructions=compiled,
    )


def serialize_vault_message(message: VaultTransactionMessage) -> bytes:
    """Compact encoding expected by ``vault_transaction_create``.

    Arrays carry a u8 length prefix, except instruction data which uses u16.
    """
    out = bytearray()
    out += bytes([message.num_signers, message.num_writable_signers, message.num_writable_non_signers])

    out += bytes([len(message.account_keys)])
    for key in message.account_keys:
        out += bytes(key)

    out += bytes([len(message.instructions)])
    for ix in message.instructions:
        out += bytes([ix.program_id_index])
        out += bytes([len(ix.account_indexes)]) + bytes(ix.account_indexes)
        out += struct.pack("<H", len(ix.data)) + ix.data

    out += bytes([len(message.address_table_lookups)])
    for lookup in message.address_table_lookups:
        out += bytes(lookup.account_key)
        out += bytes([len(lookup.writable_indexes)]) + bytes(lookup.writable_indexes)
        out += bytes([len(lookup.readonly_indexes)]) + bytes(lookup.readonly_indexes)

    return bytes(out)


def vault_transaction_create(
    multisig_pda: Pubkey,
    transaction_index: int,
    creator: Pubkey,
    rent_payer: Pubkey,
    vault_index: int,
    ephemeral_signers: int,
    message: VaultTransactionMessage,
    program_id: Pubkey,
    memo: Optional[str] = None,
) -> Instruction:
    transaction_pda, _ = get_transaction_pda(multisig_pda, transaction_index, program_id)

    data = (
        instruction_discriminator("vault_transaction_create")
        + bytes([vault_index, ephemeral_signers])
        + encode_vec_u8(serialize_vault_message(message))
        + encode_option_string(memo)
    )
    accounts = [
        AccountMeta(multisig_pda, is_signer=False, is_writable=True),
        AccountMeta(transaction_pda, is_signer=False, is_writable=True),
        AccountMeta(creator, is_signer=True, is_writable=False),
        AccountMeta(rent_payer, is_signer=True, is_writable=True),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, data, accounts)


def proposal_create(
    multisig_pda: Pubkey,
    transaction_index: int,
    creator: Pubkey,
    rent_payer: Pubkey,
    program_id: Pubkey,
    draft: bool = False,
) -> Instruction:
    proposal_pda, _ = get_proposal_pda(multisig_pda, transaction_index, program_id)

    data = (
        instruction_discriminator("proposal_create")
        + struct.pack("<Q", transaction_index)
        + bytes([1 if draft else 0])
    )
    accounts = [
        AccountMeta(multisig_pda, is_signer=False, is_writable=False),
        AccountMeta(proposal_pda, is_signer=False, is_writable=True),
        AccountMeta(creator, is_signer=True, is_writable=False),
        AccountMeta(rent_payer, is_signer=True, is_writable=True),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(program_id, data, accounts)


def proposal_approve(
    multisig_pda: Pubkey,
    transaction_index: int,
    member: Pubkey,
    program_id: Pubkey,
    memo: Optional[str] = None,
) -> Instruction:
    proposal_pda, _ = get_proposal_pda(multisig_pda, transaction_index, program_id)

    data = instruction_discriminator("proposal_approve") + encode_option_string(memo)
    accounts = [
        AccountMeta(multisig_pda, is_signer=False, is_writable=False),
        AccountMeta(member, is_signer=True, is_writable=True),
        AccountMeta(proposal_pda, is_signer=False, is_writable=True),
    ]
    return Instruction(program_id, data, accounts)


def vault_transaction_execute(
    multisig_pda: Pubkey,
    transaction: VaultTransaction,
    member: Pubkey,
    program_id: Pubkey,
) -> Instruction:
    """Execute a stored vault transaction.

    The message's account keys follow the fixed accounts as remaining accounts.
    The vault and ephemeral signers sign through the program, so they are not
    passed as signers.
    """
    proposal_pda, _ = get_proposal_pda(multisig_pda, transaction.index, program_id)
    vault_pda, _ = get_vault_pda(multisig_pda, transaction.vault_index, program_id)
    ephemeral_signers = {
        get_ephemeral_signer_pda(transaction.address, i, program_id)[0]
        for i in range(len(transaction.ephemeral_signer_bumps))
    }
    message = transaction.message

    # Static keys only; address lookup tables are not resolved
    remaining = [
        AccountMeta(
            key,
            is_signer=message.is_signer_index(i) and key != vault_pda and key not in ephemeral_signers,
            is_writable=message.is_static_writable_index(i),
        )
        for i, key in enumerate(message.account_keys)
    ]

    accounts = [
        AccountMeta(multisig_pda, is_signer=False, is_writable=False),
        AccountMeta(proposal_pda, is_signer=False, is_writable=True),
        AccountMeta(transaction.address, is_signer=False, is_writable=False),
        AccountMeta(member, is_signer=True, is_writable=False),
        *remaining,
    ]
    return Instruction(program_id, instruction_discriminator("vault_transaction_execute"), accounts)
