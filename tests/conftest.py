import sys
import pathlib

import pytest

# Ensure project root is importable in tests
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import ServerConfig  # noqa: E402
from core.registry import Tool  # noqa: E402

ECHO_SCHEMA = {
    "type": "object",
    "properties": {"x": {"type": "integer", "enum": [1, 2, 3]}},
    "required": ["x"],
}

VALID_WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


async def _echo(parameters):
    return parameters


async def _boom(parameters):
    raise RuntimeError("kaboom")


def make_tool(name, execute=_echo, description=None, parameters=None) -> Tool:
    return Tool(
        name=name,
        description=description or f"{name} tool",
        parameters=parameters if parameters is not None else {"type": "object", "properties": {}},
        execute=execute,
    )


@pytest.fixture
def echo_tool() -> Tool:
    return make_tool("echo", _echo, "Returns its input", ECHO_SCHEMA)


@pytest.fixture
def failing_tool() -> Tool:
    return make_tool("boom", _boom, "Always fails")


@pytest.fixture
def test_config() -> ServerConfig:
    return ServerConfig(wallet_fetch_delay=0.0, metrics_enabled=True)
