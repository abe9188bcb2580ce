"""
Process configuration for the walletwise MCP server.

Values are read from the environment once, at startup, into a ServerConfig that
is handed to the tools that need it. The dispatcher itself takes no config.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

_DEF_SECRETS_PATH = Path('.secrets/.env.local')
_TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_METRICS_BIND = "127.0.0.1:9099"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class ServerConfig:
    openai_api_key: str = ""
    rpc_url: str = DEFAULT_RPC_URL
    solana_private_key: str = ""
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"
    metrics_enabled: bool = True
    # Prometheus exporter address, separate from the MCP endpoint
    metrics_host: str = "127.0.0.1"
    metrics_port: int = 9099
    # Simulated latency of the mock wallet fetch, in seconds
    wallet_fetch_delay: float = 0.5


def load_local_secrets(path: Path = _DEF_SECRETS_PATH) -> None:
    """Merge KEY=VALUE lines from a local secrets file into os.environ.

    Existing non-empty variables are never overwritten.
    """
    if not path.exists():
        return
    logger.info("Loading local secrets from %s", path)
    try:
        text = path.read_text(encoding='utf-8')
    except OSError as e:
        logger.warning("Failed to load local secrets: %s", e)
        return
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if '=' not in line:
            continue
        k, v = line.split('=', 1)
        k = k.strip()
        v = v.strip()
        if k and (k not in os.environ or not os.environ[k]):
            os.environ[k] = v


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}")
    return value


def _env_log_level(env: Mapping[str, str]) -> str:
    raw = env.get("LOG_LEVEL", "").strip()
    level = raw.upper() or "INFO"
    if level not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {raw!r}")
    return level


def _env_bind(env: Mapping[str, str], name: str, default: str) -> Tuple[str, int]:
    raw = env.get(name, "").strip() or default
    host, sep, port = raw.rpartition(":")
    if not sep or not host:
        raise ValueError(f"{name} must be host:port, got {raw!r}")
    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"{name} port must be an integer, got {raw!r}") from None


def load_config(env: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """Build a ServerConfig from the environment (or an explicit mapping)."""
    if env is None:
        load_local_secrets()
        env = os.environ
    metrics_host, metrics_port = _env_bind(env, "METRICS_BIND", DEFAULT_METRICS_BIND)
    return ServerConfig(
        openai_api_key=env.get("OPENAI_API_KEY", ""),
        rpc_url=env.get("RPC_URL", "") or DEFAULT_RPC_URL,
        solana_private_key=env.get("SOLANA_PRIVATE_KEY", ""),
        host=env.get("HOST", "").strip() or "0.0.0.0",
        port=_env_int(env, "PORT", 3000),
        log_level=_env_log_level(env),
        metrics_enabled=env.get("METRICS_ENABLED", "1").strip().lower() in _TRUTHY,
        metrics_host=metrics_host,
        metrics_port=metrics_port,
        wallet_fetch_delay=_env_float(env, "WALLET_FETCH_DELAY", 0.5),
    )
