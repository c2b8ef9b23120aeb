import hashlib
import struct
import unittest
from unittest import TestCase

from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from squads_multisig.config import SQUADS_V4_PROGRAM
from squads_multisig.instructions import (
    compile_vault_message,
    encode_option_string,
    instruction_discriminator,
    proposal_approve,
    proposal_create,
    serialize_vault_message,
    transfer_instruction,
    vault_transaction_create,
    vault_transaction_execute,
)
from squads_multisig.pda import get_proposal_pda, get_transaction_pda, get_vault_pda
from squads_multisig.types import VaultTransaction


class TestInstructionsBase(TestCase):
    def setUp(self):
        self.program_id = Pubkey.from_string(SQUADS_V4_PROGRAM)
        self.multisig = Pubkey.new_unique()
        self.member = Pubkey.new_unique()
        self.destination = Pubkey.new_unique()
        self.vault, _ = get_vault_pda(self.multisig, 0, self.program_id)
        self.transfer = transfer_instruction(self.vault, self.destination, 100_000_000)


class TestVaultMessage(TestInstructionsBase):
    def test_compile_transfer(self):
        message = compile_vault_message(self.vault, [self.transfer])

        self.assertEqual(message.account_keys, [self.vault, self.destination, SYSTEM_PROGRAM_ID])
        self.assertEqual(message.num_signers, 1)
        self.assertEqual(message.num_writable_signers, 1)
        self.assertEqual(message.num_writable_non_signers, 1)
        self.assertEqual(len(message.instructions), 1)
        self.assertEqual(message.instructions[0].program_id_index, 2)
        self.assertEqual(message.instructions[0].account_indexes, [0, 1])
        self.assertEqual(message.instructions[0].data, bytes(self.transfer.data))

    def test_key_ordering(self):
        second_signer = Pubkey.new_unique()
        other = Pubkey.new_unique()
        ix = transfer_instruction(second_signer, other, 1)
        # A second signing account sorts right after the payer
        message = compile_vault_message(self.vault, [self.transfer, ix])

        self.assertEqual(message.account_keys[0], self.vault)
        self.assertEqual(message.account_keys[1], second_signer)
        self.assertEqual(message.num_signers, 2)
        self.assertEqual(message.num_writable_signers, 2)
        self.assertEqual(message.account_keys[-1], SYSTEM_PROGRAM_ID)

    def test_serialize_compact_layout(self):
        message = compile_vault_message(self.vault, [self.transfer])
        raw = serialize_vault_message(message)

        self.assertEqual(raw[:4], bytes([1, 1, 1, 3]))
        self.assertEqual(raw[4:36], bytes(self.vault))
        self.assertEqual(raw[100], 1)  # instruction count
        self.assertEqual(raw[101], 2)  # program id index
        self.assertEqual(raw[102:105], bytes([2, 0, 1]))
        self.assertEqual(struct.unpack_from("<H", raw, 105)[0], 12)
        self.assertEqual(raw[-1], 0)  # no address table lookups
        self.assertEqual(len(raw), 120)


class TestSquadsInstructions(TestInstructionsBase):
    def test_discriminator(self):
        expected = hashlib.sha256(b"global:proposal_create").digest()[:8]
        self.assertEqual(instruction_discriminator("proposal_create"), expected)

    def test_option_string(self):
        self.assertEqual(encode_option_string(None), b"\x00")
        self.assertEqual(encode_option_string("hi"), b"\x01\x02\x00\x00\x00hi")

    def test_vault_transaction_create(self):
        message = compile_vault_message(self.vault, [self.transfer])
        ix = vault_transaction_create(
            self.multisig,
            7,
            creator=self.member,
            rent_payer=self.member,
            vault_index=0,
            ephemeral_signers=0,
            message=message,
            program_id=self.program_id,
            memo="Withdraw 0.1 SOL",
        )
        transaction_pda, _ = get_transaction_pda(self.multisig, 7, self.program_id)
        data = bytes(ix.data)

        self.assertEqual(ix.program_id, self.program_id)
        self.assertEqual(data[:8], instruction_discriminator("vault_transaction_create"))
        self.assertEqual(data[8:10], b"\x00\x00")
        self.assertEqual(struct.unpack_from("<I", data, 10)[0], 120)
        self.assertEqual(data[14:134], serialize_vault_message(message))
        self.assertEqual(data[134:], encode_option_string("Withdraw 0.1 SOL"))

        keys = [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts]
        self.assertEqual(keys, [
            (self.multisig, False, True),
            (transaction_pda, False, True),
            (self.member, True, False),
            (self.member, True, True),
            (SYSTEM_PROGRAM_ID, False, False),
        ])

    def test_proposal_create(self):
        ix = proposal_create(self.multisig, 7, self.member, self.member, self.program_id)
        proposal_pda, _ = get_proposal_pda(self.multisig, 7, self.program_id)

        self.assertEqual(
            bytes(ix.data),
            instruction_discriminator("proposal_create") + struct.pack("<Q", 7) + b"\x00",
        )
        self.assertEqual(ix.accounts[1].pubkey, proposal_pda)
        self.assertTrue(ix.accounts[1].is_writable)

    def test_proposal_approve(self):
        ix = proposal_approve(self.multisig, 7, self.member, self.program_id, memo="Approved")
        proposal_pda, _ = get_proposal_pda(self.multisig, 7, self.program_id)

        self.assertEqual(
            bytes(ix.data),
            instruction_discriminator("proposal_approve") + encode_option_string("Approved"),
        )
        keys = [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts]
        self.assertEqual(keys, [
            (self.multisig, False, False),
            (self.member, True, True),
            (proposal_pda, False, True),
        ])

    def test_vault_transaction_execute(self):
        message = compile_vault_message(self.vault, [self.transfer])
        transaction_pda, _ = get_transaction_pda(self.multisig, 7, self.program_id)
        transaction = VaultTransaction(
            address=transaction_pda,
            multisig=self.multisig,
            creator=self.member,
            index=7,
            bump=255,
            vault_index=0,
            vault_bump=254,
            ephemeral_signer_bumps=[],
            message=message,
        )

        ix = vault_transaction_execute(self.multisig, transaction, self.member, self.program_id)
        proposal_pda, _ = get_proposal_pda(self.multisig, 7, self.program_id)

        self.assertEqual(bytes(ix.data), instruction_discriminator("vault_transaction_execute"))
        keys = [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts]
        self.assertEqual(keys, [
            (self.multisig, False, False),
            (proposal_pda, False, True),
            (transaction_pda, False, False),
            (self.member, True, False),
            # vault signs through the program
            (self.vault, False, True),
            (self.destination, False, True),
            (SYSTEM_PROGRAM_ID, False, False),
        ])


if __name__ == "__main__":
    unittest.main()
