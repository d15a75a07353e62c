"""Client library for VIPSTARCOIN-style smart-contract nodes: JSON-RPC plus ABI encode/decode."""

from .abi import (
    Parameter,
    decode_named_parameters,
    decode_parameters,
    decode_primitive,
    encode_parameters,
    encode_primitive,
    event_signature_hash,
    function_selector,
    parse_type,
)
from .client import Vweb3
from .contract import Contract, encode_function_call
from .errors import AbiError, DecodeError, FormatError, RangeError, RpcError
from .events import DecodedLog, EventDefinition, EventTable, RawLog, Unresolved, decode_log, decode_search_log
from .rpc_client import HttpProvider, init_provider

__version__ = "0.1.0"

__all__ = [
    "AbiError",
    "Contract",
    "DecodeError",
    "DecodedLog",
    "EventDefinition",
    "EventTable",
    "FormatError",
    "HttpProvider",
    "Parameter",
    "RangeError",
    "RawLog",
    "RpcError",
    "Unresolved",
    "Vweb3",
    "decode_log",
    "decode_named_parameters",
    "decode_parameters",
    "decode_primitive",
    "decode_search_log",
    "encode_function_call",
    "encode_parameters",
    "encode_primitive",
    "event_signature_hash",
    "function_selector",
    "init_provider",
    "parse_type",
]
