"""Cluster, program and keypair configuration."""

import json
import os
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .errors import ConfigError
from .types import ClusterConfig

SQUADS_V4_PROGRAM = "SQDS4ep65T869zMMBKyuUq6aD6EgTu8psMjkvj52pCf"
LOCAL_TEST_PROGRAM = "SMPL1JzvaVRmKLfqeuD6EfHxGtkC8HnVioC6HBnK3zg"

DEFAULT_MULTISIG_ADDRESS = "5cSM7kjqnKcSvYkhzNiLx65RvX3oi3VYKuZ4pwqSjBHk"
DEFAULT_CLUSTER = "devnet"
DEFAULT_WITHDRAW_SOL = 0.1

LOCALHOST_ENDPOINT = "http://127.0.0.1:8899"
CLUSTER_URLS = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
}
HELIUS_URLS = {
    "mainnet-beta": "https://mainnet.helius-rpc.com/?api-key={api_key}",
    "devnet": "https://devnet.helius-rpc.com/?api-key={api_key}",
}
CLUSTERS = [*CLUSTER_URLS, "localhost"]

COMMITMENT = "confirmed"
LAMPORTS_PER_SOL = 1_000_000_000


def get_cluster() -> str:
    """Get cluster name from SOLANA_CLUSTER or use the default."""
    cluster = os.environ.get("SOLANA_CLUSTER") or DEFAULT_CLUSTER
    if cluster not in CLUSTERS:
        raise ConfigError(f"Unknown cluster: {cluster}. Supported clusters: {', '.join(CLUSTERS)}.")
    return cluster


def get_program_id(cluster: str) -> Pubkey:
    if cluster == "localhost":
        return Pubkey.from_string(LOCAL_TEST_PROGRAM)
    return Pubkey.from_string(SQUADS_V4_PROGRAM)


def get_rpc_endpoint(cluster: str) -> str:
    """Get RPC endpoint for a cluster, honouring SOLANA_RPC_URL and HELIUS_API_KEY."""
    if rpc_url := os.environ.get("SOLANA_RPC_URL"):
        return rpc_url
    if cluster == "localhost":
        return LOCALHOST_ENDPOINT
    if (api_key := os.environ.get("HELIUS_API_KEY")) and cluster in HELIUS_URLS:
        return HELIUS_URLS[cluster].format(api_key=api_key)
    return CLUSTER_URLS[cluster]


def resolve_cluster(cluster: Optional[str] = None, rpc: Optional[str] = None) -> ClusterConfig:
    """Resolve cluster name, program ID and endpoint for one invocation."""
    if cluster is None:
        cluster = get_cluster()
    elif cluster not in CLUSTERS:
        raise ConfigError(f"Unknown cluster: {cluster}. Supported clusters: {', '.join(CLUSTERS)}.")

    return ClusterConfig(
        cluster=cluster,
        program_id=get_program_id(cluster),
        endpoint=rpc or get_rpc_endpoint(cluster),
    )


def mask_api_key(url: str) -> str:
    """Mask API key in URL for display."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url


def load_keypair(path: str) -> Keypair:
    """Load a keypair from a JSON array secret key file (solana-keygen format)."""
    path = os.path.expanduser(path)
    try:
        with open(path, encoding="utf-8") as f:
            secret_key = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read keypair file {path}: {e}") from e

    if not isinstance(secret_key, list) or len(secret_key) != 64:
        raise ConfigError(f"Keypair file {path} must contain a JSON array of 64 bytes")

    try:
        return Keypair.from_bytes(bytes(secret_key))
    except ValueError as e:
        raise ConfigError(f"Invalid keypair in {path}: {e}") from e


def get_member_keypair_path() -> Optional[str]:
    return os.environ.get("MEMBER_KEYPAIR_PATH") or None


def sol_to_lamports(amount_sol: float) -> int:
    return int(round(amount_sol * LAMPORTS_PER_SOL))


def lamports_to_sol(lamports: int) -> float:
    return lamports / LAMPORTS_PER_SOL
