"""Program-derived addresses of the Squads v4 program."""

from solders.pubkey import Pubkey

SEED_PREFIX = b"multisig"
SEED_MULTISIG = b"multisig"
SEED_VAULT = b"vault"
SEED_TRANSACTION = b"transaction"
SEED_PROPOSAL = b"proposal"
SEED_EPHEMERAL_SIGNER = b"ephemeral_signer"


def to_u8_bytes(value: int) -> bytes:
    return value.to_bytes(1, "little")


def to_u64_bytes(value: int) -> bytes:
    return value.to_bytes(8, "little")


def get_multisig_pda(create_key: Pubkey, program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [SEED_PREFIX, SEED_MULTISIG, bytes(create_key)],
        program_id,
    )


def get_vault_pda(multisig_pda: Pubkey, index: int, program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [SEED_PREFIX, bytes(multisig_pda), SEED_VAULT, to_u8_bytes(index)],
        program_id,
    )


def get_transaction_pda(multisig_pda: Pubkey, index: int, program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [SEED_PREFIX, bytes(multisig_pda), SEED_TRANSACTION, to_u64_bytes(index)],
        program_id,
    )


def get_proposal_pda(multisig_pda: Pubkey, transaction_index: int, program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [SEED_PREFIX, bytes(multisig_pda), SEED_TRANSACTION, to_u64_bytes(transaction_index), SEED_PROPOSAL],
        program_id,
    )


def get_ephemeral_signer_pda(transaction_pda: Pubkey, index: int, program_id: Pubkey) -> tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [SEED_PREFIX, bytes(transaction_pda), SEED_EPHEMERAL_SIGNER, to_u8_bytes(index)],
        program_id,
    )
