"""Withdraw SOL from a multisig vault through the proposal workflow.

Steps, each confirmed before the next:
1. create a vault transaction holding a system transfer
2. create a proposal for it
3. approve the proposal as the loaded member
4. execute once the proposal reaches the threshold

Nothing is rolled back if a later step fails.
"""

import click
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .accounts import fetch_multisig, fetch_proposal, fetch_vault_transaction
from .config import lamports_to_sol
from .formatters import format_proposal_status, format_sol
from .instructions import (
    compile_vault_message,
    proposal_approve,
    proposal_create,
    transfer_instruction,
    vault_transaction_create,
    vault_transaction_execute,
)
from .pda import get_proposal_pda, get_transaction_pda, get_vault_pda
from .rpc import get_balance
from .transactions import send_and_confirm
from .types import WithdrawalResult

VAULT_INDEX = 0


def run_withdrawal(
    endpoint: str,
    program_id: Pubkey,
    multisig_pda: Pubkey,
    member: Keypair,
    destination: Pubkey,
    lamports: int,
    echo=click.echo,
) -> WithdrawalResult:
    multisig = fetch_multisig(endpoint, multisig_pda)

    echo("📋 Multisig Info:")
    echo(f"  Threshold: {multisig.threshold}")
    echo(f"  Members: {len(multisig.members)}")
    echo(f"  Transaction Index: {multisig.transaction_index}")
    echo("")

    vault_pda, _ = get_vault_pda(multisig_pda, VAULT_INDEX, program_id)
    echo(f"🏦 Vault PDA: {vault_pda}")

    vault_balance = get_balance(endpoint, str(vault_pda))
    echo(f"  Vault Balance: {format_sol(vault_balance)} SOL")
    echo("")

    result = WithdrawalResult(outcome="empty_vault", vault_address=vault_pda, vault_balance=vault_balance)
    if vault_balance == 0:
        echo("⚠️  Warning: Vault has no balance to withdraw!")
        return result

    transaction_index = multisig.transaction_index + 1
    result.transaction_index = transaction_index
    echo(f"🔢 Transaction Index: {transaction_index}")

    message = compile_vault_message(vault_pda, [transfer_instruction(vault_pda, destination, lamports)])

    echo("\n📝 Step 1: Creating vault transaction...")
    signature = send_and_confirm(endpoint, [
        vault_transaction_create(
            multisig_pda,
            transaction_index,
            creator=member.pubkey(),
            rent_payer=member.pubkey(),
            vault_index=VAULT_INDEX,
            ephemeral_signers=0,
            message=message,
            program_id=program_id,
            memo=f"Withdraw {lamports_to_sol(lamports)} SOL",
        )
    ], member)
    result.signatures["create"] = signature
    echo(f"✅ Transaction created: {signature}")

    echo("\n📝 Step 2: Creating proposal...")
    signature = send_and_confirm(endpoint, [
        proposal_create(
            multisig_pda,
            transaction_index,
            creator=member.pubkey(),
            rent_payer=member.pubkey(),
            program_id=program_id,
        )
    ], member)
    result.signatures["propose"] = signature
    echo(f"✅ Proposal created: {signature}")

    echo("\n📝 Step 3: Approving proposal...")
    echo(f"ℹ️  Note: You need {multisig.threshold} approvals to execute")
    signature = send_and_confirm(endpoint, [
        proposal_approve(multisig_pda, transaction_index, member.pubkey(), program_id, memo="Approved")
    ], member)
    result.signatures["approve"] = signature
    echo(f"✅ Proposal approved (1/{multisig.threshold}): {signature}")

    proposal_pda, _ = get_proposal_pda(multisig_pda, transaction_index, program_id)
    proposal = fetch_proposal(endpoint, proposal_pda)
    result.proposal = proposal

    echo("\n📊 Proposal Status:")
    echo(f"  Status: {format_proposal_status(proposal.status)}")
    echo(f"  Approved: {len(proposal.approved)}")
    echo(f"  Rejected: {len(proposal.rejected)}")
    echo(f"  Cancelled: {len(proposal.cancelled)}")

    # The program flips the status to Approved once approvals reach the threshold
    if not proposal.is_approved:
        result.outcome = "awaiting_approvals"
        echo("\n⏳ Proposal needs more approvals before execution")
        echo(f"   Required: {multisig.threshold}")
        echo(f"   Current: {len(proposal.approved)}")
        return result

    echo("\n📝 Step 4: Executing transaction...")
    transaction_pda, _ = get_transaction_pda(multisig_pda, transaction_index, program_id)
    vault_transaction = fetch_vault_transaction(endpoint, transaction_pda)
    signature = send_and_confirm(endpoint, [
        vault_transaction_execute(multisig_pda, vault_transaction, member.pubkey(), program_id)
    ], member)
    result.signatures["execute"] = signature
    result.outcome = "executed"
    echo(f"✅ Transaction executed: {signature}")
    echo("\n🎉 Withdrawal completed successfully!")

    result.final_vault_balance = get_balance(endpoint, str(vault_pda))
    result.final_destination_balance = get_balance(endpoint, str(destination))
    echo("\n💰 Final Balances:")
    echo(f"  Vault: {format_sol(result.final_vault_balance)} SOL")
    echo(f"  Destination: {format_sol(result.final_destination_balance)} SOL")

    return result
