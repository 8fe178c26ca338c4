"""mcfcodec — Modular Crypt Format codec for typed records.

Bind dataclass records to MCF password-hash strings of the shape
`$id$param1$param2...$salt$hash`, and back.  Hashes are never computed
here; only the textual envelope around them is read and written.

Quick start:
    >>> import dataclasses
    >>> from typing import Annotated, ClassVar
    >>> from mcfcodec import CRYPT, Binary, bind_decode, bind_encode
    >>> @dataclasses.dataclass
    ... class Sha512Record:
    ...     mcf_identifier: ClassVar[str] = "6"
    ...     rounds: int
    ...     salt: Annotated[bytes, Binary(CRYPT)]
    ...     hash: Annotated[bytes, Binary(CRYPT)]
    >>> rec = bind_decode("$6$10000$saltstring$hashedvalue", Sha512Record)
    >>> rec.rounds
    10000

Lower layers are usable on their own:
    >>> from mcfcodec import b64encode, split_fields
    >>> split_fields("$$abcd$efgh")
    ['', 'abcd', 'efgh']
    >>> b64encode(b"\\x00\\x00\\x00", CRYPT)
    '....'
"""

from __future__ import annotations

from ._binder import (
    Binary,
    FieldCodec,
    FieldSpec,
    Identifier,
    Joined,
    RecordLayout,
    Width,
    bind_decode,
    bind_encode,
    decode_first,
    describe,
)
from ._constants import DELIMITER, MAX_MCF_LENGTH
from ._crypt64 import (
    ALPHABETS,
    BCRYPT,
    CRYPT,
    STANDARD,
    Alphabet,
    b64decode,
    b64encode,
    decoded_length,
    encoded_length,
    get_alphabet,
)
from ._errors import (
    ERR_FIELD_COUNT,
    ERR_FIELD_DECODE,
    ERR_FIELD_ENCODE,
    ERR_INVALID_ALPHABET,
    ERR_MALFORMED_ENVELOPE,
    ERR_RECORD_TYPE,
    ERR_TRAILING_FIELDS,
    ERR_TRUNCATED_INPUT,
    ERR_UNEXPECTED_IDENTIFIER,
    FieldDecodeError,
    FieldEncodeError,
    McfError,
)
from ._hashes import BcryptHash, Hashes, McfHash
from ._tokenizer import join_fields, split_fields

__version__ = "0.3.0"

__all__ = [
    # Record binder
    "bind_decode",
    "bind_encode",
    "decode_first",
    "describe",
    "Binary",
    "Identifier",
    "Joined",
    "Width",
    "FieldCodec",
    "FieldSpec",
    "RecordLayout",
    # Tokenizer
    "split_fields",
    "join_fields",
    "DELIMITER",
    "MAX_MCF_LENGTH",
    # Crypt-base64
    "b64encode",
    "b64decode",
    "encoded_length",
    "decoded_length",
    "get_alphabet",
    "Alphabet",
    "ALPHABETS",
    "STANDARD",
    "CRYPT",
    "BCRYPT",
    # Ready-made records
    "Hashes",
    "McfHash",
    "BcryptHash",
    # Exceptions
    "McfError",
    "FieldDecodeError",
    "FieldEncodeError",
    # Error codes
    "ERR_MALFORMED_ENVELOPE",
    "ERR_UNEXPECTED_IDENTIFIER",
    "ERR_FIELD_COUNT",
    "ERR_TRAILING_FIELDS",
    "ERR_FIELD_DECODE",
    "ERR_INVALID_ALPHABET",
    "ERR_TRUNCATED_INPUT",
    "ERR_FIELD_ENCODE",
    "ERR_RECORD_TYPE",
]
