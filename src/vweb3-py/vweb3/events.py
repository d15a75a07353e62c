"""Event log decoding against caller-supplied contract metadata.

Contract metadata maps a contract name or address to its ABI, either directly
(``{"Token": [...abi...]}``) or wrapped (``{"Token": {"address": "...", "abi": [...]}}``).
An :class:`EventTable` is built from it per decode request; nothing here keeps
state between calls.
"""

import json
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from .abi.codec import decode_primitive
from .abi.layout import decode_parameters, strip_hex_values
from .abi.signature import canonical_signature, signature_hash
from .abi.types import WORD_SIZE, Parameter
from .errors import AbiError, DecodeError, FormatError
from .utils import hex_to_bytes, strip_hex_prefix

logger = logging.getLogger(__name__)

ADDRESS_BODY_PATTERN = re.compile(r"^[0-9a-fA-F]{40}$")


def normalize_hex_key(value: str) -> str:
    return strip_hex_prefix(value.strip()).lower()


def _address_key(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    body = normalize_hex_key(value)
    if not ADDRESS_BODY_PATTERN.match(body):
        return None
    return body


@dataclass(frozen=True)
class EventDefinition:
    name: str
    inputs: Tuple[Parameter, ...]
    anonymous: bool = False

    @property
    def signature(self) -> str:
        return canonical_signature(self.name, self.inputs)

    @property
    def topic(self) -> str:
        """Signature hash as lower-case hex without ``0x``."""
        return signature_hash(self.signature).hex()

    @property
    def indexed_inputs(self) -> List[Parameter]:
        return [param for param in self.inputs if param.indexed]

    @property
    def data_inputs(self) -> List[Parameter]:
        return [param for param in self.inputs if not param.indexed]

    @classmethod
    def from_abi(cls, entry: Dict[str, Any]) -> "EventDefinition":
        if not isinstance(entry, dict) or entry.get("type") != "event":
            raise FormatError("ABI entry is not an event.")
        inputs = entry.get("inputs") or []
        if not isinstance(inputs, list):
            raise FormatError(f"Event '{entry.get('name')}' has malformed inputs.")
        return cls(
            name=entry.get("name") or "",
            inputs=tuple(Parameter.from_abi(inp) for inp in inputs),
            anonymous=bool(entry.get("anonymous", False)),
        )


def _load_abi(abi: Any) -> List[Dict[str, Any]]:
    if isinstance(abi, str):
        try:
            abi = json.loads(abi)
        except json.JSONDecodeError as exc:
            raise FormatError("Invalid ABI JSON in contract metadata.") from exc
    if not isinstance(abi, list):
        raise FormatError("Contract ABI must be a list of entries.")
    return [entry for entry in abi if isinstance(entry, dict)]


class EventTable(Mapping):
    """Read-only lookup of event definitions by signature hash.

    Besides the flat hash table, definitions are also indexed per contract
    address so a log emitted by a known contract resolves against that
    contract's own ABI first.
    """

    def __init__(self) -> None:
        self._by_topic: Dict[str, List[EventDefinition]] = {}
        self._by_address: Dict[str, Dict[str, EventDefinition]] = {}

    def _add_abi(self, abi: Any, address: Optional[str] = None) -> None:
        for entry in _load_abi(abi):
            if entry.get("type") != "event":
                continue
            definition = EventDefinition.from_abi(entry)
            if definition.anonymous:
                logger.debug("Skipping anonymous event %s: it has no signature topic", definition.name)
                continue
            topic = definition.topic
            bucket = self._by_topic.setdefault(topic, [])
            if definition not in bucket:
                bucket.append(definition)
            if address:
                self._by_address.setdefault(address, {})[topic] = definition

    @classmethod
    def from_abi(cls, abi: Any, address: Optional[str] = None) -> "EventTable":
        table = cls()
        table._add_abi(abi, _address_key(address))
        return table

    @classmethod
    def from_metadata(cls, contract_metadata: Any) -> "EventTable":
        table = cls()
        if contract_metadata is None:
            return table
        if isinstance(contract_metadata, (list, str)):
            table._add_abi(contract_metadata)
            return table
        if not isinstance(contract_metadata, Mapping):
            raise FormatError("contract metadata must be a mapping of contract name or address to ABI.")
        for key, value in contract_metadata.items():
            if isinstance(value, Mapping):
                address = _address_key(value.get("address")) or _address_key(key)
                table._add_abi(value.get("abi", []), address)
            else:
                table._add_abi(value, _address_key(key))
        return table

    def candidates(self, topic: str, address: Optional[str] = None) -> List[EventDefinition]:
        key = normalize_hex_key(topic)
        ordered: List[EventDefinition] = []
        scoped = self._by_address.get(_address_key(address) or "", {})
        if key in scoped:
            ordered.append(scoped[key])
        for definition in self._by_topic.get(key, []):
            if definition not in ordered:
                ordered.append(definition)
        return ordered

    def __getitem__(self, topic: str) -> EventDefinition:
        found = self._by_topic.get(normalize_hex_key(topic))
        if not found:
            raise KeyError(topic)
        return found[0]

    def __iter__(self) -> Iterator[str]:
        return iter(self._by_topic)

    def __len__(self) -> int:
        return len(self._by_topic)


@dataclass(frozen=True)
class RawLog:
    address: Optional[str]
    topics: Tuple[str, ...]
    data: str
    source: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_rpc(cls, entry: Any) -> "RawLog":
        if not isinstance(entry, Mapping):
            raise FormatError("Log entry must be an object.")
        topics = entry.get("topics") or []
        if isinstance(topics, str) or not isinstance(topics, Sequence):
            raise FormatError("Log topics must be a list.")
        if any(not isinstance(topic, str) for topic in topics):
            raise FormatError("Log topics must be hex strings.")
        data = entry.get("data") or ""
        if not isinstance(data, str):
            raise FormatError("Log data must be a hex string.")
        return cls(address=entry.get("address"), topics=tuple(topics), data=data, source=dict(entry))


def _envelope(raw: RawLog) -> Dict[str, Any]:
    return {key: value for key, value in raw.source.items() if key not in {"topics", "data"}}


def _strip_prefixes(value: Any) -> Any:
    if isinstance(value, str):
        return strip_hex_prefix(value)
    if isinstance(value, list):
        return [_strip_prefixes(item) for item in value]
    if isinstance(value, tuple):
        return tuple(_strip_prefixes(item) for item in value)
    if isinstance(value, Mapping):
        return {key: _strip_prefixes(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class DecodedLog:
    event: str
    address: Optional[str]
    args: Dict[str, Any]
    definition: EventDefinition
    raw: RawLog

    resolved = True

    def to_dict(self, remove_prefix: bool = False) -> Dict[str, Any]:
        """Envelope fields plus ``address``, ``event`` and ``args``.

        With ``remove_prefix`` the envelope hex fields and the address lose
        their ``0x``; arguments are stripped by type, so ``string`` values
        are returned as decoded.
        """
        result = _envelope(self.raw)
        args = dict(self.args)
        address = self.address
        if remove_prefix:
            result = _strip_prefixes(result)
            for key, param in zip(args, self.definition.inputs):
                if param.indexed and not param.abi_type.is_value_type:
                    # topic hash, not the value itself
                    args[key] = strip_hex_prefix(args[key])
                else:
                    args[key] = strip_hex_values(param.abi_type, args[key])
            if isinstance(address, str):
                address = strip_hex_prefix(address)
        result.update({"address": address, "event": self.event, "args": args})
        return result


@dataclass(frozen=True)
class Unresolved:
    """A log whose signature topic is absent from the event table."""

    raw: RawLog

    resolved = False

    def to_dict(self, remove_prefix: bool = False) -> Dict[str, Any]:
        return dict(self.raw.source)


@dataclass(frozen=True)
class FailedLog:
    """A batch entry that could not be decoded; ``source`` is the entry as received."""

    source: Any
    error: AbiError

    resolved = False

    def to_dict(self, remove_prefix: bool = False) -> Dict[str, Any]:
        if isinstance(self.source, Mapping):
            result = dict(self.source)
        else:
            result = {"entry": self.source}
        result["error"] = self.error.to_dict()
        return result


def _lookup(table: Mapping, topic: str, address: Optional[str]) -> List[EventDefinition]:
    if isinstance(table, EventTable):
        return table.candidates(topic, address)
    key = normalize_hex_key(topic)
    for candidate in (key, f"0x{key}", topic):
        if candidate in table:
            return [table[candidate]]
    return []


def _decode_topic(param: Parameter, topic: str) -> Any:
    word = hex_to_bytes(topic, "topic")
    if len(word) != WORD_SIZE:
        raise DecodeError(f"Topic must be 32 bytes, got {len(word)}.")
    if param.abi_type.is_value_type:
        return decode_primitive(param.abi_type, word)
    # reference types are emitted as the keccak hash of their encoding
    return "0x" + word.hex()


def _decode_with(definition: EventDefinition, raw: RawLog) -> DecodedLog:
    keys = [param.name or f"param{idx}" for idx, param in enumerate(definition.inputs)]
    data_params = [
        Parameter(name=key, type=param.type)
        for key, param in zip(keys, definition.inputs)
        if not param.indexed
    ]
    data_values = iter(decode_parameters(data_params, raw.data))
    topics = iter(raw.topics[1:])

    args: Dict[str, Any] = {}
    for key, param in zip(keys, definition.inputs):
        if param.indexed:
            try:
                args[key] = _decode_topic(param, next(topics))
            except AbiError as exc:
                raise exc.with_param(key)
        else:
            args[key] = next(data_values)
    return DecodedLog(event=definition.name, address=raw.address, args=args, definition=definition, raw=raw)


def decode_log(raw_log: Union[RawLog, Mapping], table: Mapping) -> Union[DecodedLog, Unresolved]:
    """Resolve a log's signature topic in ``table`` and decode its arguments.

    Indexed ``string``, ``bytes``, array and tuple arguments only carry their
    hash in the topic, so they decode to that hash rather than the original
    value.
    """
    raw = raw_log if isinstance(raw_log, RawLog) else RawLog.from_rpc(raw_log)
    if not raw.topics:
        return Unresolved(raw)

    candidates = _lookup(table, raw.topics[0], raw.address)
    if not candidates:
        logger.debug("No event definition for topic %s from %s", raw.topics[0], raw.address)
        return Unresolved(raw)

    indexed_count = len(raw.topics) - 1
    for definition in candidates:
        if len(definition.indexed_inputs) == indexed_count:
            return _decode_with(definition, raw)

    definition = candidates[0]
    raise DecodeError(
        f"Event {definition.signature} expects {len(definition.indexed_inputs)} indexed topics, "
        f"log carries {indexed_count}."
    )


def _decode_entry(entry: Any, table: EventTable, remove_prefix: bool) -> Dict[str, Any]:
    try:
        return decode_log(RawLog.from_rpc(entry), table).to_dict(remove_prefix)
    except AbiError as exc:
        logger.warning("Failed to decode log entry: %s", exc)
        return FailedLog(entry, exc).to_dict(remove_prefix)


def decode_search_log(
    results: Sequence[Any],
    contract_metadata: Any,
    remove_hex_prefix: bool = False,
) -> List[Dict[str, Any]]:
    """Decode the result of a ``searchlogs`` call, preserving input order.

    Entries may be logs themselves or receipts carrying a ``log`` list; the
    receipt envelope is kept and each nested log is decoded in place.
    Unknown events pass through unchanged, and a log that fails to decode is
    returned with an ``error`` object instead of aborting the batch.
    """
    if isinstance(results, (str, bytes)) or not isinstance(results, Sequence):
        raise FormatError("searchlogs result must be a list.")
    table = contract_metadata if isinstance(contract_metadata, EventTable) else EventTable.from_metadata(contract_metadata)

    decoded: List[Dict[str, Any]] = []
    for entry in results:
        if isinstance(entry, Mapping) and isinstance(entry.get("log"), list):
            receipt = dict(entry)
            receipt["log"] = [_decode_entry(log, table, remove_hex_prefix) for log in entry["log"]]
            decoded.append(receipt)
        else:
            decoded.append(_decode_entry(entry, table, remove_hex_prefix))
    return decoded
