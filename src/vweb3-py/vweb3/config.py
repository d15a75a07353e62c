import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class Config:
    rpc_url: str
    sender_address: Optional[str] = None
    request_timeout: int = 10
    max_retries: int = 3
    backoff_seconds: float = 0.5
    log_level: str = DEFAULT_LOG_LEVEL


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default).strip()
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got '{raw}'.") from exc


def _resolve_log_level(raw: str) -> str:
    level = (raw or DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown LOG_LEVEL '{raw}'.")
    return level


def load_config() -> Config:
    """Load configuration from environment variables."""
    rpc_url = (os.getenv("VIPS_RPC_ADDRESS") or "").strip()
    if not rpc_url:
        raise ValueError("VIPS_RPC_ADDRESS is required but not set.")

    sender = (os.getenv("SENDER_ADDRESS") or "").strip() or None

    return Config(
        rpc_url=rpc_url,
        sender_address=sender,
        request_timeout=_env_number("REQUEST_TIMEOUT", "10", int),
        max_retries=_env_number("REQUEST_RETRIES", "3", int),
        backoff_seconds=_env_number("REQUEST_BACKOFF_SECONDS", "0.5", float),
        log_level=_resolve_log_level(os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL)),
    )
