import copy
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from .abi.layout import decode_parameters, encode_parameters, strip_hex_values
from .abi.signature import function_selector, parse_signature
from .abi.types import Parameter
from .errors import FormatError
from .events import EventTable, decode_search_log
from .rpc_client import init_provider
from .utils import hex_to_bytes, strip_hex_prefix

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 250000
DEFAULT_GAS_PRICE = 0.0000004


def _functions(abi: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        entry
        for entry in abi
        if isinstance(entry, dict) and entry.get("type", "function") == "function" and entry.get("name")
    ]


def find_function(abi: Sequence[Dict[str, Any]], method: str, arg_count: Optional[int] = None) -> Dict[str, Any]:
    """Pick a function entry by name (or full signature) and, for overloads, argument count."""
    if "(" in method:
        name, types = parse_signature(method)
        for entry in _functions(abi):
            inputs = [Parameter.from_abi(inp) for inp in entry.get("inputs", [])]
            if entry["name"] == name and tuple(inp.type for inp in inputs) == types:
                return entry
        raise FormatError(f"Function {method} not found in ABI.")

    matches = [entry for entry in _functions(abi) if entry["name"] == method]
    if arg_count is not None:
        matches = [entry for entry in matches if len(entry.get("inputs", [])) == arg_count]
    if not matches:
        raise FormatError(f"Function {method} with {arg_count} arguments not found in ABI.")
    if len(matches) > 1:
        raise FormatError(f"Function {method} is overloaded; pass its full signature.")
    return matches[0]


def encode_function_call(
    function: str,
    args: Sequence[Any] = (),
    abi: Optional[Sequence[Dict[str, Any]]] = None,
) -> str:
    """Selector + encoded arguments as hex without ``0x``.

    Without ``abi``, ``function`` must be a full signature such as
    ``transfer(address,uint256)``; with it, a name or signature looked up in
    the ABI.
    """
    args = list(args)
    if abi is None:
        name, types = parse_signature(function)
        inputs = [Parameter(name="", type=typ) for typ in types]
    else:
        entry = find_function(abi, function, len(args))
        name = entry["name"]
        inputs = [Parameter.from_abi(inp) for inp in entry.get("inputs", [])]
    return function_selector(name, inputs).hex() + encode_parameters(inputs, args)


def decode_function_output(
    entry: Dict[str, Any],
    output: Union[str, bytes],
    remove_hex_prefix: bool = False,
) -> Dict[str, Any]:
    outputs = [Parameter.from_abi(out) for out in entry.get("outputs", [])]
    if not outputs:
        return {}
    values = decode_parameters(outputs, output)
    formatted: Dict[str, Any] = {}
    for idx, (param, value) in enumerate(zip(outputs, values)):
        if remove_hex_prefix:
            value = strip_hex_values(param.abi_type, value)
        formatted[param.name or str(idx)] = value
    return formatted


class Contract:
    """A deployed contract bound to a provider."""

    def __init__(self, provider: Any, address: str, abi: Sequence[Dict[str, Any]]) -> None:
        if not isinstance(address, str) or len(hex_to_bytes(address, "address")) != 20:
            raise FormatError("Contract address must be 40 hex characters.")
        if isinstance(abi, str) or not isinstance(abi, Sequence):
            raise FormatError("Contract ABI must be a list of entries.")
        self.provider = init_provider(provider)
        self.address = strip_hex_prefix(address).lower()
        self.abi = list(abi)

    def call(
        self,
        method: str,
        params: Sequence[Any] = (),
        sender_address: Optional[str] = None,
        remove_hex_prefix: bool = False,
    ) -> Dict[str, Any]:
        """Execute a constant call via ``callcontract`` and decode its output."""
        params = list(params)
        entry = find_function(self.abi, method, len(params))
        data = encode_function_call(method, params, self.abi)
        rpc_params: List[Any] = [self.address, data]
        if sender_address:
            rpc_params.append(sender_address)

        result = self.provider.raw_call("callcontract", rpc_params)
        if not isinstance(result, dict):
            return result
        result = copy.deepcopy(result)
        execution = result.get("executionResult")
        if isinstance(execution, dict) and execution.get("output"):
            execution["formattedOutput"] = decode_function_output(entry, execution["output"], remove_hex_prefix)
        else:
            logger.debug("callcontract %s on %s returned no output", method, self.address)
        return result

    def send(
        self,
        method: str,
        params: Sequence[Any] = (),
        amount: float = 0,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        gas_price: float = DEFAULT_GAS_PRICE,
        sender_address: Optional[str] = None,
    ) -> Any:
        """Broadcast a state-changing call via ``sendtocontract``."""
        data = encode_function_call(method, list(params), self.abi)
        rpc_params: List[Any] = [self.address, data, amount, gas_limit, gas_price]
        if sender_address:
            rpc_params.append(sender_address)
        return self.provider.raw_call("sendtocontract", rpc_params)

    def search_logs(
        self,
        from_block: int,
        to_block: int,
        topics: Union[str, Sequence[str]] = (),
        remove_hex_prefix: bool = False,
    ) -> List[Dict[str, Any]]:
        """Search this contract's logs and decode them against its own ABI."""
        topic_list = [topics] if isinstance(topics, str) else list(topics)
        results = self.provider.raw_call(
            "searchlogs",
            [from_block, to_block, {"addresses": [self.address]}, {"topics": topic_list}],
        )
        table = EventTable.from_abi(self.abi, self.address)
        return decode_search_log(results, table, remove_hex_prefix)
