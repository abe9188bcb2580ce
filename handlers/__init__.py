"""Tools registered by the walletwise MCP server."""

from __future__ import annotations

from typing import List

from config import ServerConfig
from core.registry import Tool

from .wallet_clustering import build_cluster_wallet_tool
from .wallet_data import build_fetch_wallet_data_tool


def build_default_tools(config: ServerConfig) -> List[Tool]:
    return [
        build_cluster_wallet_tool(config),
        build_fetch_wallet_data_tool(config),
    ]
