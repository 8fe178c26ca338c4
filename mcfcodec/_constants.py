"""MCF constants — delimiters, alphabet symbol tables, and input limits.

Nothing in here is computed; every value is fixed by the format or by the
hash family that owns it.
"""

from __future__ import annotations

__format_name__ = "Modular Crypt Format"

# The one and only field separator.  Never escaped, because no field's
# textual form can contain it.
DELIMITER: str = "$"

# ── Parameter list syntax ────────────────────────────────────
# Argon2-style parameter fields look like "m=262144,p=1,t=2".  Plain lists
# reuse the same item separator: "1,2,3".
PARAM_SEPARATOR: str = ","
PARAM_ASSIGN: str = "="

BOOL_TRUE: str = "true"
BOOL_FALSE: str = "false"

# ── Base64 symbol tables (one per hash family) ───────────────
# All three map 6-bit values to symbols in the same big-endian bit order as
# RFC 4648 base64; only the symbol ordering differs.  None of them contains
# the delimiter, and none of them ever emits "=".
STANDARD_SYMBOLS: str = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
)
CRYPT_SYMBOLS: str = (
    "./0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
)
BCRYPT_SYMBOLS: str = (
    "./ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
)

# bcrypt packs a 16-byte salt and a 23-byte checksum into one field.
BCRYPT_SALT_SYMBOLS: int = 22
BCRYPT_CHECKSUM_SYMBOLS: int = 31

# ── Safety limit ─────────────────────────────────────────────
# Real hash strings are well under 1 KiB.  Anything longer is rejected
# before splitting.
MAX_MCF_LENGTH: int = 4096
