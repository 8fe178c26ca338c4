"""Crypt-base64 codec — unpadded base64 over a per-family alphabet.

Bit packing is the usual big-endian base64 one:

    3 bytes -> 4 symbols
    2 bytes -> 3 symbols   (tail)
    1 byte  -> 2 symbols   (tail)

so a valid symbol count is never 1 more than a multiple of 4.  The only
difference between hash families is which 64 symbols stand for the values
0..63, which is why the work is delegated to the stdlib base64 codec and
translated to/from the family's alphabet.
"""

from __future__ import annotations

import base64
import binascii
from typing import Dict, Union

from ._constants import BCRYPT_SYMBOLS, CRYPT_SYMBOLS, DELIMITER, STANDARD_SYMBOLS
from ._errors import ERR_INVALID_ALPHABET, ERR_TRUNCATED_INPUT, McfError


class Alphabet:
    """An immutable 64-symbol table for one hash family."""

    __slots__ = ("name", "symbols", "_symbol_set", "_to_std", "_from_std")

    def __init__(self, name: str, symbols: str) -> None:
        if len(symbols) != 64:
            raise ValueError("alphabet {!r} has {} symbols, need 64".format(name, len(symbols)))
        if len(set(symbols)) != 64:
            raise ValueError("alphabet {!r} repeats a symbol".format(name))
        if not symbols.isascii():
            raise ValueError("alphabet {!r} is not ASCII".format(name))
        if DELIMITER in symbols or "=" in symbols:
            raise ValueError("alphabet {!r} contains '$' or '='".format(name))
        self.name = name
        self.symbols = symbols
        self._symbol_set = frozenset(symbols)
        own = symbols.encode("ascii")
        std = STANDARD_SYMBOLS.encode("ascii")
        self._to_std = bytes.maketrans(own, std)
        self._from_std = bytes.maketrans(std, own)

    def __repr__(self) -> str:
        return "Alphabet({!r})".format(self.name)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._symbol_set


STANDARD = Alphabet("standard", STANDARD_SYMBOLS)
CRYPT = Alphabet("crypt", CRYPT_SYMBOLS)
BCRYPT = Alphabet("bcrypt", BCRYPT_SYMBOLS)

ALPHABETS: Dict[str, Alphabet] = {a.name: a for a in (STANDARD, CRYPT, BCRYPT)}


def get_alphabet(name: Union[str, Alphabet]) -> Alphabet:
    """Look up an alphabet by name; Alphabet instances pass through."""
    if isinstance(name, Alphabet):
        return name
    try:
        return ALPHABETS[name]
    except KeyError:
        raise ValueError("unknown alphabet {!r}; known: {}".format(
            name, ", ".join(sorted(ALPHABETS)))) from None


def encoded_length(n_bytes: int) -> int:
    """Number of symbols b64encode() emits for n_bytes of input."""
    full, tail = divmod(n_bytes, 3)
    return full * 4 + (tail + 1 if tail else 0)


def decoded_length(n_symbols: int) -> int:
    """Number of bytes b64decode() yields for n_symbols of valid input."""
    full, tail = divmod(n_symbols, 4)
    if tail == 1:
        raise McfError(ERR_TRUNCATED_INPUT,
                       "{} symbols is not a valid encoded length".format(n_symbols))
    return full * 3 + (tail - 1 if tail else 0)


def b64encode(data: bytes, alphabet: Union[str, Alphabet] = CRYPT) -> str:
    """Encode bytes without padding.  Never fails for bytes-like input."""
    table = get_alphabet(alphabet)
    std = base64.b64encode(bytes(data)).rstrip(b"=")
    return std.translate(table._from_std).decode("ascii")


def b64decode(text: str, alphabet: Union[str, Alphabet] = CRYPT) -> bytes:
    """Decode unpadded crypt-base64 text.

    Unused low bits in the final symbol are dropped, not checked.
    """
    table = get_alphabet(alphabet)
    for pos, ch in enumerate(text):
        if ch not in table:
            raise McfError(ERR_INVALID_ALPHABET,
                           "{!r} at offset {} is not in the {} alphabet".format(
                               ch, pos, table.name))
    # Raises ERR_TRUNCATED_INPUT on a dangling single symbol.
    decoded_length(len(text))

    std = text.encode("ascii").translate(table._to_std)
    std += b"=" * (-len(std) % 4)
    try:
        return base64.b64decode(std, validate=True)
    except binascii.Error as e:
        raise McfError(ERR_TRUNCATED_INPUT, str(e)) from e
