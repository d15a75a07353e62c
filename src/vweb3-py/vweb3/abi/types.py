"""Parsed ABI type signatures.

A type string such as ``uint256``, ``bytes32``, ``(address,uint256)[]`` is
parsed once into an immutable :class:`AbiType` tree; the parse is cached per
distinct string.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from ..errors import FormatError

WORD_SIZE = 32

_ELEMENTARY_PATTERN = re.compile(r"^(uint|int|bytes)(\d*)$")

# kinds whose value fits one word and is stored as-is in an event topic
VALUE_KINDS = {"uint", "int", "bool", "address", "fixed_bytes"}


@dataclass(frozen=True)
class AbiType:
    kind: str
    bits: Optional[int] = None
    size: Optional[int] = None
    item: Optional["AbiType"] = None
    components: Tuple["AbiType", ...] = ()

    @property
    def canonical(self) -> str:
        if self.kind in {"uint", "int"}:
            return f"{self.kind}{self.bits}"
        if self.kind == "fixed_bytes":
            return f"bytes{self.size}"
        if self.kind == "array":
            dim = "" if self.size is None else str(self.size)
            return f"{self.item.canonical}[{dim}]"
        if self.kind == "tuple":
            return "(" + ",".join(comp.canonical for comp in self.components) + ")"
        return self.kind

    @property
    def is_dynamic(self) -> bool:
        if self.kind in {"bytes", "string"}:
            return True
        if self.kind == "array":
            return self.size is None or self.item.is_dynamic
        if self.kind == "tuple":
            return any(comp.is_dynamic for comp in self.components)
        return False

    @property
    def is_value_type(self) -> bool:
        return self.kind in VALUE_KINDS

    @property
    def head_size(self) -> int:
        """Bytes this type occupies in the head of its enclosing sequence."""
        if self.is_dynamic:
            return WORD_SIZE
        if self.kind == "array":
            return self.size * self.item.head_size
        if self.kind == "tuple":
            return sum(comp.head_size for comp in self.components)
        return WORD_SIZE

    def __str__(self) -> str:
        return self.canonical


def split_type_list(text: str) -> List[str]:
    """Split ``a,(b,c),d[]`` on top-level commas."""
    body = text.strip()
    if not body:
        return []
    parts: List[str] = []
    depth = 0
    buf = ""
    for ch in body:
        if ch == "," and depth == 0:
            parts.append(buf.strip())
            buf = ""
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise FormatError(f"Unbalanced parentheses in '{text}'.")
        buf += ch
    if depth != 0:
        raise FormatError(f"Unbalanced parentheses in '{text}'.")
    parts.append(buf.strip())
    if any(not part for part in parts):
        raise FormatError(f"Empty type in '{text}'.")
    return parts


@lru_cache(maxsize=1024)
def parse_type(signature: str) -> AbiType:
    if not isinstance(signature, str):
        raise FormatError("ABI type must be a string.")
    text = signature.strip().replace(" ", "")
    if not text:
        raise FormatError("ABI type cannot be empty.")

    if text.endswith("]"):
        lidx = text.rfind("[")
        dim = text[lidx + 1 : -1]
        if lidx <= 0 or (dim and not dim.isdigit()):
            raise FormatError(f"Invalid array type '{signature}'.")
        size = int(dim) if dim else None
        if size == 0:
            raise FormatError(f"Fixed array length must be positive in '{signature}'.")
        return AbiType(kind="array", size=size, item=parse_type(text[:lidx]))

    if text.startswith("tuple("):
        text = text[5:]
    if text.startswith("("):
        if not text.endswith(")"):
            raise FormatError(f"Invalid tuple type '{signature}'.")
        parts = split_type_list(text[1:-1])
        if not parts:
            raise FormatError(f"Tuple type must have at least one component in '{signature}'.")
        return AbiType(kind="tuple", components=tuple(parse_type(part) for part in parts))

    if text in {"bool", "address", "string", "bytes"}:
        return AbiType(kind=text)
    if text == "byte":
        return AbiType(kind="fixed_bytes", size=1)
    if text == "tuple":
        raise FormatError("Tuple type requires components.")

    match = _ELEMENTARY_PATTERN.match(text)
    if not match:
        raise FormatError(f"Unsupported ABI type '{signature}'.")
    base, suffix = match.groups()
    if base == "bytes":
        size = int(suffix)
        if size < 1 or size > 32:
            raise FormatError(f"bytesN size must be between 1 and 32, got '{signature}'.")
        return AbiType(kind="fixed_bytes", size=size)

    bits = int(suffix) if suffix else 256
    if bits < 8 or bits > 256 or bits % 8 != 0:
        raise FormatError(f"Unsupported {base} size {bits}.")
    return AbiType(kind=base, bits=bits)


def canonical_type(signature: str) -> str:
    return parse_type(signature).canonical


def type_from_abi(entry: Dict[str, Any]) -> str:
    """Render a JSON-ABI input/output entry as a type string, expanding tuple components."""
    typ = entry.get("type")
    if not isinstance(typ, str) or not typ:
        raise FormatError("ABI entry is missing its type.")
    if not typ.startswith("tuple"):
        return typ
    components = entry.get("components")
    if not isinstance(components, list):
        raise FormatError(f"Tuple entry '{entry.get('name', '')}' is missing components.")
    inner = ",".join(type_from_abi(comp) for comp in components)
    return f"({inner}){typ[len('tuple'):]}"


@dataclass(frozen=True)
class Parameter:
    name: str
    type: str
    indexed: bool = False

    @property
    def abi_type(self) -> AbiType:
        return parse_type(self.type)

    @classmethod
    def from_abi(cls, entry: Dict[str, Any]) -> "Parameter":
        if not isinstance(entry, dict):
            raise FormatError("ABI parameter entry must be an object.")
        return cls(
            name=entry.get("name") or "",
            type=canonical_type(type_from_abi(entry)),
            indexed=bool(entry.get("indexed", False)),
        )


def as_parameters(params: Any) -> List[Parameter]:
    """Normalize a parameter list given as Parameters, JSON-ABI entries, type strings or a CSV string."""
    if isinstance(params, str):
        params = split_type_list(params)
    result: List[Parameter] = []
    for item in params:
        if isinstance(item, Parameter):
            result.append(item)
        elif isinstance(item, AbiType):
            result.append(Parameter(name="", type=item.canonical))
        elif isinstance(item, dict):
            result.append(Parameter.from_abi(item))
        elif isinstance(item, str):
            result.append(Parameter(name="", type=canonical_type(item)))
        else:
            raise FormatError(f"Unsupported parameter description {item!r}.")
    return result
