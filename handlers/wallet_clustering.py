"""Wallet clustering tool: classify a wallet by what it holds and how it trades."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from config import ServerConfig
from core.errors import ToolExecutionError
from core.registry import Tool

from .wallet_data import fetch_wallet_data, wallet_address_from

NFT_WHALE = "NFT Whale"
DEFI_FARMER = "DeFi Farmer"
HODLER = "Hodler"
TRADER = "Trader"
STAKER = "Staker"
DIVERSIFIED = "Diversified"

DEFI_PROGRAMS = {"saber", "raydium", "marinade", "solend"}

PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "wallet_address": {
            "type": "string",
            "description": "The Solana wallet address to analyze",
        },
    },
    "required": ["wallet_address"],
}


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def nft_value(nfts: List[Dict[str, Any]]) -> float:
    return sum(n.get("estimatedValue") or 0 for n in nfts)


def defi_activity(transactions: List[Dict[str, Any]]) -> int:
    return sum(1 for tx in transactions if tx.get("program") in DEFI_PROGRAMS)


def staking_amount(staking: List[Dict[str, Any]]) -> float:
    return sum(s.get("amount") or 0 for s in staking)


def trading_frequency(transactions: List[Dict[str, Any]], now: Optional[datetime] = None) -> int:
    """Number of swaps in the seven days before `now`."""
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=7)
    count = 0
    for tx in transactions:
        if tx.get("type") != "swap":
            continue
        ts = _parse_timestamp(tx.get("timestamp"))
        if ts is not None and ts > cutoff:
            count += 1
    return count


def determine_cluster(wallet: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    transactions = wallet.get("transactions", [])
    nft = nft_value(wallet.get("nfts", []))
    defi = defi_activity(transactions)
    staked = staking_amount(wallet.get("staking", []))
    trades = trading_frequency(transactions, now)
    diversity = len(wallet.get("tokens", []))

    traits: List[str] = []
    if nft > 100:
        traits.append("High NFT holdings")
    if defi > 50:
        traits.append("Active in DeFi protocols")
    if staked > 100:
        traits.append("Significant staking positions")
    if trades > 20:
        traits.append("Frequent trader")
    if diversity > 10:
        traits.append("Diversified portfolio")

    # First matching rule wins; order matters
    if nft > 500 and nft > defi and nft > staked:
        cluster, confidence = NFT_WHALE, 0.8
        description = "A wallet primarily focused on collecting and trading NFTs"
    elif defi > 100 and defi > nft and defi > staked:
        cluster, confidence = DEFI_FARMER, 0.85
        description = "A wallet actively participating in DeFi protocols for yield farming"
    elif staked > 200 and staked > nft and staked > defi:
        cluster, confidence = STAKER, 0.9
        description = "A wallet primarily focused on staking for passive income"
    elif trades > 50 and trades > staked:
        cluster, confidence = TRADER, 0.75
        description = "A wallet frequently trading tokens and actively managing positions"
    elif diversity < 5 and trades < 10:
        cluster, confidence = HODLER, 0.7
        description = "A wallet holding a small number of tokens for the long term"
    else:
        cluster, confidence = DIVERSIFIED, 0.6
        description = "A wallet with a balanced and diverse portfolio of assets"

    return {"type": cluster, "description": description, "confidence": confidence, "traits": traits}


def build_cluster_wallet_tool(config: ServerConfig) -> Tool:
    async def execute(parameters: Dict[str, Any]) -> Dict[str, Any]:
        try:
            wallet_address = wallet_address_from(parameters)
            wallet = await fetch_wallet_data(wallet_address, config)
            cluster = determine_cluster(wallet)
        except Exception as e:
            raise ToolExecutionError(f"Failed to cluster wallet: {e}") from e
        return {
            "wallet_address": wallet_address,
            "cluster": cluster["type"],
            "cluster_description": cluster["description"],
            "confidence_score": cluster["confidence"],
            "traits": cluster["traits"],
        }

    return Tool(
        name="cluster_wallet",
        description="Analyzes a Solana wallet and categorizes it into a specific cluster based on its holdings and behavior",
        parameters=PARAMETERS,
        execute=execute,
    )
