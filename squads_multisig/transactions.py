"""Build, sign, send and confirm transactions."""

import logging
from typing import Sequence

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction

from .rpc import confirm_transaction, get_latest_blockhash, send_transaction


def build_transaction(instructions: list[Instruction], fee_payer: Keypair, signers: Sequence[Keypair], blockhash: str) -> Transaction:
    recent_blockhash = Hash.from_string(blockhash)
    message = Message.new_with_blockhash(instructions, fee_payer.pubkey(), recent_blockhash)

    # De-duplicate signers, fee payer first
    keypairs = {fee_payer.pubkey(): fee_payer}
    for signer in signers:
        keypairs.setdefault(signer.pubkey(), signer)

    return Transaction(list(keypairs.values()), message, recent_blockhash)


def send_and_confirm(endpoint: str, instructions: list[Instruction], fee_payer: Keypair, signers: Sequence[Keypair] = ()) -> str:
    """Sign with ``fee_payer`` and ``signers``, submit, and wait for confirmation.

    Returns the transaction signature.
    """
    blockhash = get_latest_blockhash(endpoint)
    transaction = build_transaction(instructions, fee_payer, list(signers), blockhash)

    signature = send_transaction(endpoint, bytes(transaction))
    logging.debug(f"Submitted {signature}, waiting for confirmation")
    confirm_transaction(endpoint, signature)
    return signature
