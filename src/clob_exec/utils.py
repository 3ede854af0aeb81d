"""
Utility functions for the CLOB execution client.

Parsing helpers that turn user input into exact values before any
network activity takes place.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from .constants import MAX_TOKEN_ID


def parse_token_id(value: Union[str, int]) -> int:
    """Parse a decimal asset id into an unsigned 256-bit integer."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid token id: {value!r}")
    if isinstance(value, int):
        token_id = value
    elif isinstance(value, str):
        text = value.strip()
        if not text or not text.isdigit() or not text.isascii():
            raise ValueError(f"Invalid token id: {value!r}")
        token_id = int(text)
    else:
        raise ValueError(f"Invalid token id: {value!r}")

    if token_id < 0 or token_id > MAX_TOKEN_ID:
        raise ValueError(f"Token id out of uint256 range: {value!r}")
    return token_id


def to_decimal(value: Union[Decimal, str, int]) -> Decimal:
    """Convert to an exact, finite Decimal. Floats are refused."""
    if isinstance(value, float):
        raise ValueError(f"Refusing binary float {value!r}; pass a string or Decimal")
    try:
        decimal_value = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e
    if not decimal_value.is_finite():
        raise ValueError(f"Invalid decimal value: {value!r}")
    return decimal_value


def validate_url(url: str) -> bool:
    """Validate URL format."""
    if not url or not isinstance(url, str):
        return False
    return url.startswith(("http://", "https://")) and "." in url


def validate_path(path: str) -> bool:
    """A request path as the exchange sees it: absolute, no scheme or query."""
    if not path or not isinstance(path, str):
        return False
    return path.startswith("/") and "?" not in path and "://" not in path

