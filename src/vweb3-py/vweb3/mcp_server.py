"""
MCP server exposing ABI encode/decode and node log search for VIPSTARCOIN-style nodes.
"""

import argparse
import logging
from collections.abc import Mapping
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from . import abi as abi_codec
from .client import Vweb3
from .config import load_config
from .contract import encode_function_call as build_call_data
from .events import decode_search_log

logger = logging.getLogger(__name__)

server = FastMCP(
    name="vweb3",
    instructions="Encode contract calls, decode results and event logs, and query a VIPSTARCOIN node.",
)

_client: Optional[Vweb3] = None
_sender_address: Optional[str] = None


def _get_client() -> Vweb3:
    global _client, _sender_address
    if _client is None:
        cfg = load_config()
        _client = Vweb3.from_config(cfg)
        _sender_address = cfg.sender_address
    return _client


def _as_list(value: Optional[Any], name: str) -> list:
    """Positional tool arguments; a lone scalar is wrapped, a bare string is refused."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, (str, bytes, bytearray, Mapping)):
        raise ValueError(f"{name} must be a JSON array, e.g. [\"0x...\", 1].")
    return [value]


@server.tool(
    name="function_selector",
    title="Function Selector",
    description="Compute the 4-byte selector and 32-byte event topic for a signature such as transfer(address,uint256).",
)
def function_selector(signature: str) -> dict:
    name, types = abi_codec.parse_signature(signature)
    return {
        "signature": f"{name}({','.join(types)})",
        "selector": abi_codec.function_selector(name, types).hex(),
        "topic": abi_codec.event_signature_hash(name, types).hex(),
    }


@server.tool(
    name="encode_parameters",
    title="ABI Encode",
    description="ABI-encode `values` (array) against `types` (array of type strings). Returns hex without 0x.",
)
def encode_parameters(types: list, values: Any) -> dict:
    normalized_values = _as_list(values, "values")
    return {"types": types, "data": abi_codec.encode_parameters(types, normalized_values)}


@server.tool(
    name="decode_parameters",
    title="ABI Decode",
    description="Decode hex `data` against `types` (array of type strings, or JSON-ABI output entries).",
)
def decode_parameters(types: list, data: str) -> dict:
    return {"decoded": abi_codec.decode_named_parameters(types, data)}


@server.tool(
    name="encode_function_call",
    title="Encode Function Call",
    description="Build calldata from a full signature (or a name plus `abi`) and arguments. `args` must be an array.",
)
def encode_function_call(function: str, args: Optional[Any] = None, abi: Optional[list] = None) -> dict:
    normalized_args = _as_list(args, "args")
    return {"function": function, "data": build_call_data(function, normalized_args, abi)}


@server.tool(
    name="decode_logs",
    title="Decode Event Logs",
    description="Decode searchlogs output against contract metadata ({name_or_address: abi | {address, abi}}).",
)
def decode_logs(logs: list, contract_metadata: dict, remove_hex_prefix: bool = False) -> list:
    return decode_search_log(logs, contract_metadata, remove_hex_prefix)


@server.tool(
    name="search_logs",
    title="Search Logs",
    description="Call searchlogs on the node for a block range (to_block -1 = latest) and decode the results.",
)
def search_logs(
    from_block: int,
    to_block: int,
    addresses: Any,
    topics: Optional[Any] = None,
    contract_metadata: Optional[dict] = None,
    remove_hex_prefix: bool = False,
) -> list:
    client = _get_client()
    return client.search_logs(
        from_block,
        to_block,
        _as_list(addresses, "addresses"),
        _as_list(topics, "topics"),
        contract_metadata,
        remove_hex_prefix,
    )


@server.tool(
    name="call_contract",
    title="Call Contract",
    description="Execute a constant contract call via callcontract and decode the output with the given ABI.",
)
def call_contract(
    address: str,
    abi: list,
    method: str,
    args: Optional[Any] = None,
    sender_address: Optional[str] = None,
    remove_hex_prefix: bool = False,
) -> dict:
    client = _get_client()
    contract = client.contract(address, abi)
    return contract.call(
        method,
        _as_list(args, "args"),
        sender_address=sender_address or _sender_address,
        remove_hex_prefix=remove_hex_prefix,
    )


@server.tool(
    name="raw_call",
    title="Raw RPC Call",
    description="Forward a raw JSON-RPC method with positional params to the node.",
)
def raw_call(method: str, params: Optional[Any] = None) -> Any:
    client = _get_client()
    return client.raw_call(method, _as_list(params, "params"))


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the vweb3 MCP server.")
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default="stdio",
        help="Transport protocol for MCP.",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host for SSE/HTTP transports.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for SSE/HTTP transports.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level for server diagnostics (written to stderr).",
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Starting vweb3 MCP server over %s", args.transport)

    # FastMCP uses host/port only for SSE/HTTP transports; stdio ignores them.
    server.settings.host = args.host
    server.settings.port = args.port

    server.run(transport=args.transport)


if __name__ == "__main__":
    main()
