"""Draft of a new multisig.

Collects the fields of the "create multisig" form and derives the address the
multisig would get. Nothing is validated or submitted.
"""

from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .config import SQUADS_V4_PROGRAM
from .pda import get_multisig_pda
from .types import MultisigDraft


def new_multisig_draft(
    name: Optional[str] = None,
    threshold: Optional[int] = None,
    members: Optional[list[str]] = None,
    program_id: Optional[Pubkey] = None,
) -> MultisigDraft:
    if program_id is None:
        program_id = Pubkey.from_string(SQUADS_V4_PROGRAM)

    create_key = Keypair().pubkey()
    multisig_pda, _ = get_multisig_pda(create_key, program_id)

    return MultisigDraft(
        name=name,
        threshold=threshold,
        members=list(members or []),
        create_key=create_key,
        multisig_address=multisig_pda,
    )
