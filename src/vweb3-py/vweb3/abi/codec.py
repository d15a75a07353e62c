from typing import Any, Union

from ..errors import DecodeError, FormatError, RangeError
from ..utils import hex_to_bytes
from .types import WORD_SIZE, AbiType, parse_type

TypeLike = Union[str, AbiType]


def as_abi_type(typ: TypeLike) -> AbiType:
    if isinstance(typ, AbiType):
        return typ
    return parse_type(typ)


def pad_left(data: bytes) -> bytes:
    if len(data) > WORD_SIZE:
        raise RangeError("Encoded value exceeds 32 bytes.")
    return data.rjust(WORD_SIZE, b"\x00")


def pad_right(data: bytes) -> bytes:
    remainder = len(data) % WORD_SIZE
    if remainder == 0:
        return data
    return data + b"\x00" * (WORD_SIZE - remainder)


def encode_uint(value: int) -> bytes:
    return value.to_bytes(WORD_SIZE, "big")


def read_word(data: bytes, offset: int) -> bytes:
    end = offset + WORD_SIZE
    if offset < 0 or end > len(data):
        raise DecodeError(f"Read of word at offset {offset} past end of {len(data)}-byte buffer.")
    return data[offset:end]


def read_uint(data: bytes, offset: int) -> int:
    return int.from_bytes(read_word(data, offset), "big")


def _require_int(abi_type: AbiType, value: Any) -> int:
    # bool is an int subclass; keep the categories apart
    if isinstance(value, bool) or not isinstance(value, int):
        raise FormatError(f"{abi_type.canonical} value must be an integer, got {type(value).__name__}.")
    return value


def _address_bytes(value: Any) -> bytes:
    if not isinstance(value, (str, bytes, bytearray)):
        raise FormatError(f"address value must be a hex string or bytes, got {type(value).__name__}.")
    raw = hex_to_bytes(value, "address")
    if len(raw) != 20:
        raise FormatError(f"address must be exactly 20 bytes, got {len(raw)}.")
    return raw


def _encode_dynamic_bytes(data: bytes) -> bytes:
    return encode_uint(len(data)) + pad_right(data)


def encode_primitive(typ: TypeLike, value: Any) -> bytes:
    """Encode an elementary ABI value.

    Static types produce one 32-byte word; ``bytes`` and ``string`` produce a
    length word followed by the right-padded content.
    """
    abi_type = as_abi_type(typ)
    kind = abi_type.kind

    if kind == "uint":
        number = _require_int(abi_type, value)
        if number < 0 or number >= 2**abi_type.bits:
            raise RangeError(f"{abi_type.canonical} value {number} out of range.")
        return encode_uint(number)

    if kind == "int":
        number = _require_int(abi_type, value)
        bound = 2 ** (abi_type.bits - 1)
        if number < -bound or number >= bound:
            raise RangeError(f"{abi_type.canonical} value {number} out of range.")
        return number.to_bytes(WORD_SIZE, "big", signed=True)

    if kind == "bool":
        if not isinstance(value, bool):
            raise FormatError(f"bool value must be True or False, got {type(value).__name__}.")
        return encode_uint(1 if value else 0)

    if kind == "address":
        return pad_left(_address_bytes(value))

    if kind == "fixed_bytes":
        raw = hex_to_bytes(value, abi_type.canonical)
        if len(raw) != abi_type.size:
            raise FormatError(f"{abi_type.canonical} requires {abi_type.size} bytes, got {len(raw)}.")
        return pad_right(raw)

    if kind == "bytes":
        return _encode_dynamic_bytes(hex_to_bytes(value, "bytes"))

    if kind == "string":
        if not isinstance(value, str):
            raise FormatError(f"string value must be a str, got {type(value).__name__}.")
        return _encode_dynamic_bytes(value.encode("utf-8"))

    raise FormatError(f"'{abi_type.canonical}' is not an elementary ABI type.")


def decode_primitive(typ: TypeLike, data: Union[bytes, str], offset: int = 0) -> Any:
    """Decode an elementary ABI value starting at ``offset`` of ``data``."""
    abi_type = as_abi_type(typ)
    if isinstance(data, str):
        data = hex_to_bytes(data, "data")
    kind = abi_type.kind
    word = read_word(data, offset)

    if kind == "uint":
        number = int.from_bytes(word, "big")
        if number >= 2**abi_type.bits:
            raise DecodeError(f"{abi_type.canonical} word holds out-of-range value.")
        return number

    if kind == "int":
        number = int.from_bytes(word, "big", signed=True)
        bound = 2 ** (abi_type.bits - 1)
        if number < -bound or number >= bound:
            raise DecodeError(f"{abi_type.canonical} word holds out-of-range value.")
        return number

    if kind == "bool":
        return any(word)

    if kind == "address":
        if any(word[:12]):
            raise DecodeError("address word has non-zero padding.")
        return "0x" + word[-20:].hex()

    if kind == "fixed_bytes":
        return "0x" + word[: abi_type.size].hex()

    if kind in {"bytes", "string"}:
        length = int.from_bytes(word, "big")
        start = offset + WORD_SIZE
        end = start + length
        if end > len(data):
            raise DecodeError(f"{kind} length {length} runs past end of {len(data)}-byte buffer.")
        content = data[start:end]
        if kind == "bytes":
            return "0x" + content.hex()
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("string content is not valid UTF-8.") from exc

    raise FormatError(f"'{abi_type.canonical}' is not an elementary ABI type.")
