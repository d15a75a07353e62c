from typing import Any, Dict, List, Optional, Tuple

import pytest

TRANSFER_TOPIC = "ddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
APPROVAL_TOPIC = "8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"

TOKEN_ADDRESS = "aa" * 20
ALICE = "0x" + "11" * 20
BOB = "0x" + "22" * 20


def word(value: int) -> str:
    return format(value, "064x")


def address_topic(address: str) -> str:
    return "00" * 12 + address[2:]


ERC20_ABI = [
    {
        "type": "function",
        "name": "balanceOf",
        "constant": True,
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "balance", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [{"name": "to", "type": "address"}, {"name": "value", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "event",
        "name": "Transfer",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "Approval",
        "anonymous": False,
        "inputs": [
            {"name": "owner", "type": "address", "indexed": True},
            {"name": "spender", "type": "address", "indexed": True},
            {"name": "value", "type": "uint256", "indexed": False},
        ],
    },
]

ERC721_ABI = [
    {
        "type": "event",
        "name": "Transfer",
        "anonymous": False,
        "inputs": [
            {"name": "from", "type": "address", "indexed": True},
            {"name": "to", "type": "address", "indexed": True},
            {"name": "tokenId", "type": "uint256", "indexed": True},
        ],
    },
]


class FakeProvider:
    """In-memory provider: answers RPC methods from a canned table and records every call."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        self.responses = dict(responses or {})
        self.calls: List[Tuple[str, List[Any]]] = []

    def raw_call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        self.calls.append((method, list(params or [])))
        response = self.responses.get(method)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params or [])
        return response


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def transfer_log() -> Dict[str, Any]:
    return {
        "blockNumber": 120,
        "transactionHash": "ab" * 32,
        "address": TOKEN_ADDRESS,
        "topics": [TRANSFER_TOPIC, address_topic(ALICE), address_topic(BOB)],
        "data": word(1000),
    }
