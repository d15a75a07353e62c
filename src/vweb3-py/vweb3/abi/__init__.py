from .codec import decode_primitive, encode_primitive
from .layout import (
    decode_named_parameters,
    decode_parameters,
    decode_value,
    encode_parameters,
    encode_value,
    strip_hex_values,
)
from .signature import canonical_signature, event_signature_hash, function_selector, parse_signature
from .types import AbiType, Parameter, as_parameters, canonical_type, parse_type

__all__ = [
    "AbiType",
    "Parameter",
    "as_parameters",
    "canonical_signature",
    "canonical_type",
    "decode_named_parameters",
    "decode_parameters",
    "decode_primitive",
    "decode_value",
    "encode_parameters",
    "encode_primitive",
    "encode_value",
    "event_signature_hash",
    "function_selector",
    "parse_signature",
    "parse_type",
    "strip_hex_values",
]
