import argparse
import json
import logging
import sys
from typing import Any, Optional

from .abi import (
    decode_named_parameters,
    encode_parameters,
    event_signature_hash,
    function_selector,
    parse_signature,
)
from .client import Vweb3
from .config import load_config
from .contract import encode_function_call
from .events import decode_search_log


def _json_arg(text: str, name: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{name} must be valid JSON: {exc}") from exc


def _json_file(path: str, name: str) -> Any:
    with open(path, "r", encoding="utf-8") as handle:
        return _json_arg(handle.read(), name)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Encode/decode contract data and query a VIPSTARCOIN node over JSON-RPC.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--log-level",
        required=False,
        help="Logging level (DEBUG, INFO, WARNING...). Defaults to LOG_LEVEL env or WARNING.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    selector_parser = subparsers.add_parser("selector", help="Compute a function selector and event topic")
    selector_parser.add_argument(
        "--signature",
        required=True,
        help="Signature such as transfer(address,uint256).",
    )

    encode_parser = subparsers.add_parser("encode", help="ABI-encode values")
    encode_parser.add_argument("--types", required=True, help="Comma-separated types, e.g. uint256,address.")
    encode_parser.add_argument("--values", required=True, help="JSON array of values.")

    decode_parser = subparsers.add_parser("decode", help="ABI-decode hex data")
    decode_parser.add_argument("--types", required=True, help="Comma-separated types, e.g. uint256,address.")
    decode_parser.add_argument("--data", required=True, help="Hex data (0x optional).")

    call_data_parser = subparsers.add_parser("encode-call", help="Build calldata (selector + arguments)")
    call_data_parser.add_argument(
        "--function",
        required=True,
        help="Full signature, or a function name when --abi is given.",
    )
    call_data_parser.add_argument("--args", required=False, default="[]", help="JSON array of arguments.")
    call_data_parser.add_argument("--abi", required=False, help="Path to a JSON ABI file.")

    decode_logs_parser = subparsers.add_parser("decode-logs", help="Decode a saved searchlogs result")
    decode_logs_parser.add_argument("--logs", required=True, help="Path to a JSON file with searchlogs output.")
    decode_logs_parser.add_argument("--metadata", required=True, help="Path to a contract metadata JSON file.")
    decode_logs_parser.add_argument(
        "--remove-hex-prefix",
        action="store_true",
        help="Strip 0x from decoded address/bytes values.",
    )

    search_parser = subparsers.add_parser("search-logs", help="Search and decode logs from the node")
    search_parser.add_argument("--from-block", required=True, type=int, help="Starting block.")
    search_parser.add_argument("--to-block", required=True, type=int, help="Ending block, -1 for latest.")
    search_parser.add_argument(
        "--address",
        action="append",
        default=[],
        help="Contract address to search (repeatable).",
    )
    search_parser.add_argument(
        "--topic",
        action="append",
        default=[],
        help="Topic hash to filter on (repeatable).",
    )
    search_parser.add_argument("--metadata", required=False, help="Path to a contract metadata JSON file.")
    search_parser.add_argument(
        "--remove-hex-prefix",
        action="store_true",
        help="Strip 0x from decoded address/bytes values.",
    )

    contract_call_parser = subparsers.add_parser("call", help="Call a constant contract function")
    contract_call_parser.add_argument("--address", required=True, help="Contract address (hex).")
    contract_call_parser.add_argument("--abi", required=True, help="Path to a JSON ABI file.")
    contract_call_parser.add_argument("--method", required=True, help="Function name or signature.")
    contract_call_parser.add_argument("--args", required=False, default="[]", help="JSON array of arguments.")
    contract_call_parser.add_argument(
        "--sender",
        required=False,
        help="Sender address. Defaults to SENDER_ADDRESS env.",
    )

    rpc_parser = subparsers.add_parser("rpc", help="Issue a raw RPC call")
    rpc_parser.add_argument("--method", required=True, help="RPC method name.")
    rpc_parser.add_argument("--params", required=False, default="[]", help="JSON array of params.")

    return parser


def _configure_logging(level: Optional[str]) -> None:
    logging.basicConfig(
        level=(level or "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        _configure_logging(args.log_level)
        if args.command == "selector":
            name, types = parse_signature(args.signature)
            result = {
                "signature": f"{name}({','.join(types)})",
                "selector": function_selector(name, types).hex(),
                "topic": event_signature_hash(name, types).hex(),
            }
        elif args.command == "encode":
            values = _json_arg(args.values, "values")
            result = {"types": args.types, "data": encode_parameters(args.types, values)}
        elif args.command == "decode":
            result = {"types": args.types, "decoded": decode_named_parameters(args.types, args.data)}
        elif args.command == "encode-call":
            call_args = _json_arg(args.args, "args")
            abi = _json_file(args.abi, "abi") if args.abi else None
            result = {"function": args.function, "data": encode_function_call(args.function, call_args, abi)}
        elif args.command == "decode-logs":
            logs = _json_file(args.logs, "logs")
            metadata = _json_file(args.metadata, "metadata")
            result = decode_search_log(logs, metadata, args.remove_hex_prefix)
        else:
            config = load_config()
            if not args.log_level:
                logging.getLogger().setLevel(config.log_level)
            client = Vweb3.from_config(config)
            if args.command == "search-logs":
                metadata = _json_file(args.metadata, "metadata") if args.metadata else None
                result = client.search_logs(
                    args.from_block,
                    args.to_block,
                    args.address,
                    args.topic,
                    metadata,
                    args.remove_hex_prefix,
                )
            elif args.command == "call":
                contract = client.contract(args.address, _json_file(args.abi, "abi"))
                result = contract.call(
                    args.method,
                    _json_arg(args.args, "args"),
                    sender_address=args.sender or config.sender_address,
                )
            else:
                result = client.raw_call(args.method, _json_arg(args.params, "params"))
        print(json.dumps(result, indent=2))
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
