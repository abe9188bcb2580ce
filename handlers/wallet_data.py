from __future__ import annotations

import asyncio
import copy
import logging
import re
from typing import Any, Dict

from config import ServerConfig
from core.errors import ToolExecutionError, ValidationError
from core.registry import Tool

logger = logging.getLogger(__name__)

_SOLANA_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

# Mock snapshot until on-chain fetching is wired to config.rpc_url
MOCK_WALLET: Dict[str, Any] = {
    "tokens": [
        {"symbol": "SOL", "amount": 25.5, "price": 150.75, "priceChange24h": 2.5},
        {"symbol": "USDC", "amount": 1250, "price": 1, "priceChange24h": 0},
        {"symbol": "RAY", "amount": 100, "price": 0.75, "priceChange24h": -1.2},
        {"symbol": "BONK", "amount": 1000000, "price": 0.00002, "priceChange24h": 5.7},
    ],
    "nfts": [
        {"name": "DeGod #1234", "collection": "DeGods", "estimatedValue": 150},
        {"name": "Okay Bear #567", "collection": "Okay Bears", "estimatedValue": 80},
        {"name": "Solana Monkey #789", "collection": "SMB", "estimatedValue": 65},
    ],
    "staking": [
        {"validator": "Lido", "amount": 10, "apy": 6.2, "rewards": 0.15},
        {"validator": "Marinade", "amount": 5, "apy": 6.5, "rewards": 0.08},
    ],
    "transactions": [
        {
            "type": "swap",
            "tokenIn": "SOL",
            "tokenOut": "USDC",
            "amount": 2,
            "priceUsd": 145.5,
            "timestamp": "2023-05-15T10:30:00Z",
            "program": "jupiter",
        },
        {
            "type": "swap",
            "tokenIn": "USDC",
            "tokenOut": "RAY",
            "amount": 100,
            "priceUsd": 0.8,
            "timestamp": "2023-05-10T14:20:00Z",
            "program": "raydium",
        },
        {"type": "stake", "token": "SOL", "amount": 5, "timestamp": "2023-04-20T09:15:00Z", "program": "marinade"},
        {"type": "nft_purchase", "nft": "DeGod #1234", "price": 140, "timestamp": "2023-03-05T16:45:00Z", "program": "magiceden"},
    ],
}

PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "wallet_address": {
            "type": "string",
            "description": "The Solana wallet address to fetch data for",
        },
    },
    "required": ["wallet_address"],
}


def is_valid_solana_address(address: Any) -> bool:
    return isinstance(address, str) and bool(_SOLANA_ADDRESS_RE.match(address))


def wallet_address_from(parameters: Any) -> str:
    if not isinstance(parameters, dict):
        raise ValidationError("parameters must be an object")
    address = parameters.get("wallet_address")
    if not address:
        raise ValidationError("wallet_address is required")
    return address


async def fetch_wallet_data(wallet_address: str, config: ServerConfig) -> Dict[str, Any]:
    """Return the holdings snapshot for a wallet.

    Raises ValidationError for anything that is not a base58 Solana address.
    """
    if not is_valid_solana_address(wallet_address):
        raise ValidationError("Invalid Solana wallet address")
    logger.info("Fetching data for wallet %s via %s", wallet_address, config.rpc_url)
    if config.wallet_fetch_delay > 0:
        await asyncio.sleep(config.wallet_fetch_delay)
    data = copy.deepcopy(MOCK_WALLET)
    data["wallet_address"] = wallet_address
    return data


def build_fetch_wallet_data_tool(config: ServerConfig) -> Tool:
    async def execute(parameters: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return await fetch_wallet_data(wallet_address_from(parameters), config)
        except Exception as e:
            raise ToolExecutionError(f"Failed to fetch wallet data: {e}") from e

    return Tool(
        name="fetch_wallet_data",
        description=(
            "Fetches comprehensive data about a Solana wallet including tokens, NFTs, "
            "staking positions, and transaction history"
        ),
        parameters=PARAMETERS,
        execute=execute,
    )
