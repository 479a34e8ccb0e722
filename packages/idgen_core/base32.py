"""Crockford Base32 codec used by the ULID text form.

Each symbol carries 5 bits. Encoding always emits upper-case symbols. Decoding
is case-insensitive and folds the commonly misread letters ``O`` to ``0`` and
``I``/``L`` to ``1``.
"""

from __future__ import annotations

from typing import Iterable

from packages.idgen_core.errors import InvalidEncodingError

ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
BITS_PER_SYMBOL = 5
SYMBOL_MASK = 0b11111


def _build_decode_table() -> dict[str, int]:
    table: dict[str, int] = {}
    for index, symbol in enumerate(ALPHABET):
        table[symbol] = index
        table[symbol.lower()] = index
    for alias, value in (("O", 0), ("I", 1), ("L", 1)):
        table[alias] = value
        table[alias.lower()] = value
    return table


_DECODE_TABLE = _build_decode_table()


def encode_symbol(value: int) -> str:
    """Return the alphabet symbol for the low 5 bits of ``value``."""
    return ALPHABET[value & SYMBOL_MASK]


def decode_symbol(char: str, *, position: int = -1) -> int:
    """Return the 5-bit value for one symbol.

    Raises:
        InvalidEncodingError: ``char`` is not in the (case-folded) alphabet.
    """
    value = _DECODE_TABLE.get(char)
    if value is None:
        raise InvalidEncodingError(
            message=f"invalid character {char!r}"
            + (f" at position {position}" if position >= 0 else ""),
            character=char,
            position=position,
        )
    return value


def decode_symbols(text: str) -> list[int]:
    """Decode every character of ``text`` into its 5-bit value."""
    return [decode_symbol(char, position=index) for index, char in enumerate(text)]


def encode_int(value: int, length: int) -> str:
    """Encode the low ``5 * length`` bits of ``value``, most significant first."""
    chars = [
        ALPHABET[(value >> (BITS_PER_SYMBOL * shift)) & SYMBOL_MASK]
        for shift in range(length - 1, -1, -1)
    ]
    return "".join(chars)


def pack_symbols(values: Iterable[int]) -> int:
    """Concatenate 5-bit groups into one integer, first group most significant."""
    number = 0
    for value in values:
        number = (number << BITS_PER_SYMBOL) | (value & SYMBOL_MASK)
    return number


def decode_int(text: str) -> int:
    """Decode a Base32 string into the integer its symbols spell."""
    return pack_symbols(decode_symbols(text))
