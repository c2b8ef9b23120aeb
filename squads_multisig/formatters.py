"""Output formatters for the Squads multisig tools."""

import json

from solders.pubkey import Pubkey

from .config import LAMPORTS_PER_SOL
from .types import AccountProbe, MultisigDraft, MultisigReport, ProposalStatus


def format_sol(lamports: int) -> str:
    """Lamports as a SOL amount without trailing zeros."""
    return f"{lamports / LAMPORTS_PER_SOL:.9f}".rstrip("0").rstrip(".")


def format_proposal_status(status: ProposalStatus) -> str:
    return json.dumps(status.to_dict())


def format_report(report: MultisigReport) -> str:
    """Format an info query result as console text."""
    lines = []
    multisig = report.multisig

    lines.append("📋 Multisig Configuration:")
    lines.append(f"  Threshold: {multisig.threshold}")
    lines.append(f"  Time Lock: {multisig.time_lock} seconds")
    lines.append(f"  Transaction Index: {multisig.transaction_index}")
    lines.append(f"  Stale Transaction Index: {multisig.stale_transaction_index}")
    lines.append(f"  Config Authority: {multisig.config_authority}")
    lines.append(f"  Rent Collector: {multisig.rent_collector if multisig.rent_collector is not None else 'None'}")
    lines.append("")

    lines.append(f"👥 Members: {len(multisig.members)}")
    for i, member in enumerate(multisig.members, start=1):
        lines.append(f"  [{i}] {member.key}")
        lines.append(f"      Permissions: {member.mask} ({', '.join(member.permission_names)})")
    lines.append("")

    lines.append(f"🏦 Default Vault (Index {report.vault_index}):")
    lines.append(f"  PDA: {report.vault_address}")
    lines.append(f"  Balance: {format_sol(report.vault_balance)} SOL")
    lines.append("")

    lines.append("📝 Recent Transactions:")
    for tx in report.recent_transactions:
        if tx.proposal is None:
            lines.append(f"  Transaction #{tx.index}: Not found")
            continue
        lines.append(f"  Transaction #{tx.index}:")
        lines.append(f"    Status: {format_proposal_status(tx.proposal.status)}")
        lines.append(f"    Approved: {len(tx.proposal.approved)}")
        lines.append(f"    Rejected: {len(tx.proposal.rejected)}")
        lines.append(f"    Cancelled: {len(tx.proposal.cancelled)}")

    return "\n".join(lines)


def format_report_json(report: MultisigReport, pretty: bool = True) -> str:
    """Format an info query result as JSON."""
    def to_dict(obj):
        if isinstance(obj, ProposalStatus):
            return obj.to_dict()
        if hasattr(obj, "__dataclass_fields__"):
            return {k: to_dict(v) for k, v in obj.__dict__.items()}
        elif isinstance(obj, list):
            return [to_dict(item) for item in obj]
        elif isinstance(obj, Pubkey):
            return str(obj)
        else:
            return obj

    data = to_dict(report)
    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)


def format_account_probe(probe: AccountProbe) -> str:
    lines = [
        "✅ Account exists",
        f"   Owner: {probe.owner}",
        f"   Data length: {probe.data_length} bytes",
        f"   Lamports: {probe.lamports}",
    ]
    return "\n".join(lines)


def format_draft(draft: MultisigDraft) -> str:
    lines = []
    divider = "─" * 70

    lines.append(divider)
    lines.append("CREATE MULTISIG (draft)")
    lines.append(divider)
    lines.append(f"Wallet Name:   {draft.name or '-'}")
    lines.append(f"Threshold:     {draft.threshold if draft.threshold is not None else '-'}")
    lines.append("Members:")
    if draft.members:
        for member in draft.members:
            lines.append(f"  {member}")
    else:
        lines.append("  -")
    lines.append("")
    lines.append(f"Create Key:    {draft.create_key}")
    lines.append(f"Multisig PDA:  {draft.multisig_address}")
    lines.append(divider)
    lines.append("Draft only: nothing was submitted.")

    return "\n".join(lines)
