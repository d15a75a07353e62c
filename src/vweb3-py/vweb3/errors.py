from typing import Any, List, Optional, Union


class AbiError(ValueError):
    """Base class for ABI encode/decode failures.

    ``param`` names the top-level schema field (name or positional index) that
    failed, when known; ``path`` holds the full location, outermost first.
    """

    kind = "AbiError"

    def __init__(self, message: str, param: Optional[Union[str, int]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.param = param
        self.path: List[Union[str, int]] = [] if param is None else [param]

    def with_param(self, param: Union[str, int]) -> "AbiError":
        self.path.insert(0, param)
        self.param = param
        return self

    def rename_param(self, name: str) -> None:
        if self.path:
            self.path[0] = name
        self.param = name

    @property
    def location(self) -> str:
        if not self.path:
            return ""
        head, *rest = self.path
        return str(head) + "".join(f"[{item}]" for item in rest)

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f"{self.message} (parameter {self.location})"

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "param": self.param, "location": self.location}


class RangeError(AbiError):
    """Numeric value outside the declared bit width."""

    kind = "RangeError"


class FormatError(AbiError):
    """Malformed hex, wrong-length address/bytes, or value of the wrong category."""

    kind = "FormatError"


class DecodeError(AbiError):
    """Buffer underrun, offset out of range, or topic-count mismatch."""

    kind = "DecodeError"


class RpcError(ValueError):
    """JSON-RPC error object or malformed response from the node."""

    def __init__(self, message: str, code: Optional[Any] = None, method: Optional[str] = None) -> None:
        super().__init__(message)
        self.code = code
        self.method = method
