"""MCF error codes and exception classes.

Every failure surfaces as an `McfError` whose `.code` is one of the ERR_*
strings below.  Malformed input is a permanent condition: nothing here is
retried, defaulted, or recovered from locally.
"""

from __future__ import annotations

from typing import Optional

# ── Error codes ──────────────────────────────────────────────
# Grep-friendly; the CLI prints them verbatim.

ERR_MALFORMED_ENVELOPE: str = "ERR_MALFORMED_ENVELOPE"        # no leading "$", empty, too long
ERR_UNEXPECTED_IDENTIFIER: str = "ERR_UNEXPECTED_IDENTIFIER"  # field 0 mismatch
ERR_FIELD_COUNT: str = "ERR_FIELD_COUNT"                      # fewer fields than declared
ERR_TRAILING_FIELDS: str = "ERR_TRAILING_FIELDS"              # more fields than declared
ERR_FIELD_DECODE: str = "ERR_FIELD_DECODE"                    # one field's text is bad
ERR_INVALID_ALPHABET: str = "ERR_INVALID_ALPHABET"            # symbol outside the table
ERR_TRUNCATED_INPUT: str = "ERR_TRUNCATED_INPUT"              # impossible base64 tail length
ERR_FIELD_ENCODE: str = "ERR_FIELD_ENCODE"                    # caller-supplied value unencodable
ERR_RECORD_TYPE: str = "ERR_RECORD_TYPE"                      # record declaration unusable

ALL_CODES = (
    ERR_MALFORMED_ENVELOPE,
    ERR_UNEXPECTED_IDENTIFIER,
    ERR_FIELD_COUNT,
    ERR_TRAILING_FIELDS,
    ERR_FIELD_DECODE,
    ERR_INVALID_ALPHABET,
    ERR_TRUNCATED_INPUT,
    ERR_FIELD_ENCODE,
    ERR_RECORD_TYPE,
)


class McfError(Exception):
    """Exception for MCF processing errors.

    The `.code` attribute is one of the ERR_* strings above and is what
    callers (and the conformance suite) compare against.
    """

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or code)
        self.code = code


class _FieldError(McfError):
    def __init__(self, code: str, field_index: int, field_name: Optional[str],
                 cause: BaseException) -> None:
        label = field_name if field_name is not None else "identifier"
        super().__init__(code, "field {} ({}): {}".format(field_index, label, cause))
        self.field_index = field_index
        self.field_name = field_name
        self.cause = cause


class FieldDecodeError(_FieldError):
    """A single field's text could not be read as its declared type.

    `field_index` counts raw MCF fields, so the identifier is field 0 and the
    first declared record field is field 1.
    """

    def __init__(self, field_index: int, field_name: Optional[str],
                 cause: BaseException) -> None:
        super().__init__(ERR_FIELD_DECODE, field_index, field_name, cause)


class FieldEncodeError(_FieldError):
    """A record field held a value that has no MCF text form."""

    def __init__(self, field_index: int, field_name: Optional[str],
                 cause: BaseException) -> None:
        super().__init__(ERR_FIELD_ENCODE, field_index, field_name, cause)
