import re
from functools import lru_cache
from typing import Any, Tuple

from eth_utils import keccak

from ..errors import FormatError
from .types import as_parameters, split_type_list

NAME_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def canonical_signature(name: str, params: Any) -> str:
    """Render ``name(type1,type2,...)`` with canonical type names."""
    if not isinstance(name, str) or not NAME_PATTERN.match(name):
        raise FormatError(f"Invalid function or event name {name!r}.")
    types = ",".join(param.abi_type.canonical for param in as_parameters(params))
    return f"{name}({types})"


def parse_signature(signature: str) -> Tuple[str, Tuple[str, ...]]:
    """Split ``transfer(address,uint)`` into its name and canonical types."""
    text = (signature or "").strip()
    if "(" not in text or not text.endswith(")"):
        raise FormatError("Signature must look like name(type1,type2,...).")
    name, rest = text.split("(", 1)
    name = name.strip()
    if not NAME_PATTERN.match(name):
        raise FormatError(f"Invalid function or event name {name!r}.")
    types = tuple(param.type for param in as_parameters(split_type_list(rest[:-1])))
    return name, types


@lru_cache(maxsize=1024)
def signature_hash(signature: str) -> bytes:
    return keccak(text=signature)


def function_selector(name: str, params: Any = ()) -> bytes:
    return signature_hash(canonical_signature(name, params))[:4]


def event_signature_hash(name: str, params: Any = ()) -> bytes:
    return signature_hash(canonical_signature(name, params))
