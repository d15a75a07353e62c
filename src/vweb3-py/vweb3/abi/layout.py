"""Head/tail layout of ABI parameter lists.

Every sequence (a parameter list, a tuple, the elements of an array) is laid
out the same way: a head holding static values inline and 32-byte offsets for
dynamic ones, followed by a tail holding the dynamic encodings in declaration
order. Offsets are measured from the start of the enclosing head.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Sequence, Union

from ..errors import AbiError, DecodeError, FormatError
from ..utils import hex_to_bytes, strip_hex_prefix
from .codec import as_abi_type, decode_primitive, encode_primitive, encode_uint, read_uint
from .types import WORD_SIZE, AbiType, as_parameters


def _as_sequence(abi_type: AbiType, value: Any) -> List[Any]:
    if isinstance(value, (str, bytes, bytearray)) or not isinstance(value, (list, tuple)):
        raise FormatError(f"{abi_type.canonical} value must be a list or tuple, got {type(value).__name__}.")
    return list(value)


def _encode_sequence(types: Sequence[AbiType], values: Sequence[Any]) -> bytes:
    head_size = sum(typ.head_size for typ in types)
    head_parts: List[bytes] = []
    tail_parts: List[bytes] = []
    tail_offset = head_size
    for idx, (typ, value) in enumerate(zip(types, values)):
        try:
            encoded = encode_value(typ, value)
        except AbiError as exc:
            raise exc.with_param(idx)
        if typ.is_dynamic:
            head_parts.append(encode_uint(tail_offset))
            tail_parts.append(encoded)
            tail_offset += len(encoded)
        else:
            head_parts.append(encoded)
    return b"".join(head_parts + tail_parts)


def encode_value(typ: Union[str, AbiType], value: Any) -> bytes:
    """Encode one value of any ABI type; dynamic types return their tail encoding."""
    abi_type = as_abi_type(typ)

    if abi_type.kind == "array":
        values = _as_sequence(abi_type, value)
        if abi_type.size is None:
            return encode_uint(len(values)) + _encode_sequence([abi_type.item] * len(values), values)
        if len(values) != abi_type.size:
            raise FormatError(f"Expected {abi_type.canonical} of length {abi_type.size}, got {len(values)}.")
        return _encode_sequence([abi_type.item] * abi_type.size, values)

    if abi_type.kind == "tuple":
        if isinstance(value, Mapping):
            raise FormatError("tuple value must be given positionally as a list or tuple.")
        values = _as_sequence(abi_type, value)
        if len(values) != len(abi_type.components):
            raise FormatError(
                f"Expected {len(abi_type.components)} tuple components for {abi_type.canonical}, got {len(values)}."
            )
        return _encode_sequence(abi_type.components, values)

    return encode_primitive(abi_type, value)


def _decode_sequence(types: Sequence[AbiType], data: bytes, base: int) -> List[Any]:
    values: List[Any] = []
    cursor = base
    for idx, typ in enumerate(types):
        try:
            if typ.is_dynamic:
                offset = read_uint(data, cursor)
                start = base + offset
                if start > len(data) - WORD_SIZE:
                    raise DecodeError(f"Offset {offset} points past end of {len(data)}-byte buffer.")
                values.append(decode_value(typ, data, start))
            else:
                values.append(decode_value(typ, data, cursor))
        except AbiError as exc:
            raise exc.with_param(idx)
        cursor += typ.head_size
    return values


def decode_value(typ: Union[str, AbiType], data: bytes, offset: int = 0) -> Any:
    """Decode one value whose encoding starts at ``offset`` (its tail start, for dynamic types)."""
    abi_type = as_abi_type(typ)

    if abi_type.kind == "array":
        if abi_type.size is None:
            length = read_uint(data, offset)
            start = offset + WORD_SIZE
            # every element occupies at least one head slot
            if length * abi_type.item.head_size > len(data) - start:
                raise DecodeError(f"Array length {length} runs past end of {len(data)}-byte buffer.")
            return _decode_sequence([abi_type.item] * length, data, start)
        return _decode_sequence([abi_type.item] * abi_type.size, data, offset)

    if abi_type.kind == "tuple":
        return tuple(_decode_sequence(abi_type.components, data, offset))

    return decode_primitive(abi_type, data, offset)


def encode_parameters(params: Any, values: Sequence[Any]) -> str:
    """Encode ``values`` against a parameter list, returning hex without a ``0x`` prefix."""
    parameters = as_parameters(params)
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        raise FormatError("values must be a list or tuple.")
    if len(parameters) != len(values):
        raise FormatError(f"Argument count mismatch: expected {len(parameters)}, got {len(values)}.")
    try:
        encoded = _encode_sequence([param.abi_type for param in parameters], values)
    except AbiError as exc:
        if isinstance(exc.param, int) and parameters[exc.param].name:
            exc.rename_param(parameters[exc.param].name)
        raise
    return encoded.hex()


def decode_parameters(params: Any, data: Union[str, bytes]) -> List[Any]:
    """Decode a hex string (``0x`` optional) or bytes against a parameter list."""
    parameters = as_parameters(params)
    raw = hex_to_bytes(data, "data")
    types = [param.abi_type for param in parameters]
    head_size = sum(typ.head_size for typ in types)
    if head_size > len(raw):
        raise DecodeError(
            f"Buffer of {len(raw)} bytes is shorter than the {head_size}-byte head of {len(parameters)} parameters."
        )
    try:
        return _decode_sequence(types, raw, 0)
    except AbiError as exc:
        if isinstance(exc.param, int) and parameters[exc.param].name:
            exc.rename_param(parameters[exc.param].name)
        raise


def decode_named_parameters(params: Any, data: Union[str, bytes]) -> Dict[str, Any]:
    parameters = as_parameters(params)
    values = decode_parameters(parameters, data)
    return {param.name or f"param{idx}": value for idx, (param, value) in enumerate(zip(parameters, values))}


def strip_hex_values(typ: Union[str, AbiType], value: Any) -> Any:
    """Drop the ``0x`` marker from address and byte values inside a decoded value."""
    abi_type = as_abi_type(typ)
    if abi_type.kind in {"address", "fixed_bytes", "bytes"} and isinstance(value, str):
        return strip_hex_prefix(value)
    if abi_type.kind == "array" and isinstance(value, list):
        return [strip_hex_values(abi_type.item, item) for item in value]
    if abi_type.kind == "tuple" and isinstance(value, tuple):
        return tuple(strip_hex_values(comp, item) for comp, item in zip(abi_type.components, value))
    return value
