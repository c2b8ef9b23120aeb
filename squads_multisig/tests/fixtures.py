"""Builders for Borsh-encoded Squads account data used across the tests."""

import base64
import struct

from solders.pubkey import Pubkey

from squads_multisig.accounts import (
    MULTISIG_DISCRIMINATOR,
    PROPOSAL_DISCRIMINATOR,
    PROPOSAL_STATUSES,
    VAULT_TRANSACTION_DISCRIMINATOR,
)


def pubkey_vec(keys) -> bytes:
    return struct.pack("<I", len(keys)) + b"".join(bytes(k) for k in keys)


def u8_vec(values) -> bytes:
    return struct.pack("<I", len(values)) + bytes(values)


def multisig_data(
    create_key: Pubkey,
    config_authority: Pubkey,
    threshold: int = 2,
    time_lock: int = 0,
    transaction_index: int = 0,
    stale_transaction_index: int = 0,
    rent_collector: Pubkey = None,
    bump: int = 255,
    members=(),
) -> bytes:
    data = MULTISIG_DISCRIMINATOR
    data += bytes(create_key) + bytes(config_authority)
    data += struct.pack("<HIQQ", threshold, time_lock, transaction_index, stale_transaction_index)
    data += b"\x01" + bytes(rent_collector) if rent_collector is not None else b"\x00"
    data += bytes([bump])
    data += struct.pack("<I", len(members))
    for key, mask in members:
        data += bytes(key) + bytes([mask])
    return data


def proposal_data(
    multisig: Pubkey,
    transaction_index: int,
    status: str = "Active",
    timestamp: int = 1_700_000_000,
    approved=(),
    rejected=(),
    cancelled=(),
    bump: int = 254,
) -> bytes:
    data = PROPOSAL_DISCRIMINATOR + bytes(multisig) + struct.pack("<Q", transaction_index)
    data += bytes([PROPOSAL_STATUSES.index(status)])
    if status != "Executing":
        data += struct.pack("<q", timestamp)
    data += bytes([bump])
    data += pubkey_vec(approved) + pubkey_vec(rejected) + pubkey_vec(cancelled)
    return data


def vault_transaction_data(
    multisig: Pubkey,
    creator: Pubkey,
    index: int,
    account_keys,
    instructions,
    num_signers: int = 1,
    num_writable_signers: int = 1,
    num_writable_non_signers: int = 1,
    vault_index: int = 0,
    ephemeral_signer_bumps=(),
) -> bytes:
    data = VAULT_TRANSACTION_DISCRIMINATOR + bytes(multisig) + bytes(creator)
    data += struct.pack("<Q", index)
    data += bytes([253, vault_index, 252])
    data += u8_vec(ephemeral_signer_bumps)
    data += bytes([num_signers, num_writable_signers, num_writable_non_signers])
    data += pubkey_vec(account_keys)
    data += struct.pack("<I", len(instructions))
    for program_id_index, account_indexes, ix_data in instructions:
        data += bytes([program_id_index]) + u8_vec(account_indexes) + u8_vec(ix_data)
    data += struct.pack("<I", 0)
    return data


def account_info(data: bytes, owner: str = "SQDS4ep65T869zMMBKyuUq6aD6EgTu8psMjkvj52pCf", lamports: int = 1_000_000) -> dict:
    """getAccountInfo ``value`` as the RPC returns it."""
    return {
        "data": [base64.b64encode(data).decode(), "base64"],
        "executable": False,
        "lamports": lamports,
        "owner": owner,
        "rentEpoch": 0,
        "space": len(data),
    }
