"""
Amount Codec Module

Token amounts cross the external boundary as base-10 strings of unbounded
non-negative integers and are carried internally as native Python ints.
Never performs arithmetic on the string form and never uses float.
"""

import re
from typing import Union

from .errors import InvalidAmount

_AMOUNT_PATTERN = re.compile(r"[0-9]+")

AmountLike = Union[str, int]


def parse_amount(value: AmountLike, field_name: str = "amount") -> int:
    """
    Parse a boundary amount into an int

    Args:
        value: Decimal string such as "1000", or a non-negative int
        field_name: Name used in error messages

    Returns:
        The amount as an arbitrary-precision int

    Raises:
        InvalidAmount: If the value is negative, fractional, signed or malformed
    """
    # bool is an int subclass
    if isinstance(value, bool):
        raise InvalidAmount(f"{field_name} must be a decimal string, got bool")

    if isinstance(value, int):
        if value < 0:
            raise InvalidAmount(f"{field_name} must be non-negative, got {value}")
        return value

    if not isinstance(value, str):
        raise InvalidAmount(
            f"{field_name} must be a decimal string, got {type(value).__name__}"
        )

    if not _AMOUNT_PATTERN.fullmatch(value):
        raise InvalidAmount(f"{field_name} is not a non-negative integer string: {value!r}")

    try:
        return int(value)
    except ValueError as e:
        # int() caps string conversion length (sys.set_int_max_str_digits)
        raise InvalidAmount(f"{field_name} is too long to convert: {e}") from e


def format_amount(value: int) -> str:
    """Format an internal amount for the external boundary"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Amount must be int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Amount must be non-negative, got {value}")
    return str(value)
