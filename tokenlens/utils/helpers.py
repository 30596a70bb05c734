"""
TokenLens - Common Utility Functions
"""
from datetime import datetime, timezone
from typing import Any, Optional
import math
import re

EVM_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
SOLANA_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
SYMBOL_RE = re.compile(r"^[A-Z]{2,10}$")


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Return current UTC timestamp as ISO string."""
    return utc_now().isoformat()


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division avoiding ZeroDivisionError."""
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, min_val: float = 0.0, max_val: float = 100.0) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def to_float(value: Any) -> Optional[float]:
    """
    Coerce a provider value (number or numeric string) to a finite float.
    Returns None for missing, non-numeric, NaN or infinite values.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def float_or_zero(value: Any) -> float:
    """Like to_float, but unknown values become 0.0."""
    result = to_float(value)
    return result if result is not None else 0.0


def is_evm_address(value: str) -> bool:
    return bool(EVM_ADDRESS_RE.match(value or ""))


def is_solana_address(value: str) -> bool:
    return bool(SOLANA_ADDRESS_RE.match(value or ""))


def is_contract_address(value: str) -> bool:
    """Identifiers longer than a ticker are treated as contract addresses."""
    return len(value or "") > 10


def is_valid_token_identifier(value: str) -> bool:
    """Accept EVM addresses, Solana addresses, and 2-10 letter upper-case symbols."""
    return is_evm_address(value) or is_solana_address(value) or bool(SYMBOL_RE.match(value or ""))
