"""Hexadecimal keypad mapping."""

from typing import Optional

KEY_SYMBOLS = "0123456789ABCDEF"

KEY_MAP = {symbol: index for index, symbol in enumerate(KEY_SYMBOLS)}


def char_to_index(symbol: str) -> Optional[int]:
    """Map a keypad symbol to its index, or None when it has no mapping.

    Letters are accepted in either case.
    """
    if not isinstance(symbol, str) or len(symbol) != 1:
        return None
    return KEY_MAP.get(symbol.upper())


def index_to_char(index: int) -> str:
    """Map a keypad index (0-15) back to its symbol."""
    return KEY_SYMBOLS[index]
