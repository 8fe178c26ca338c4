"""MCF field tokenizer — split on "$" and join back.

The envelope has exactly one piece of syntax: a mandatory leading "$",
then fields separated by "$".  Field contents are never interpreted here.

    "$6$10000$salt$hash"  <->  ["6", "10000", "salt", "hash"]
    "$$salt$hash"         <->  ["", "salt", "hash"]
"""

from __future__ import annotations

from typing import List, Sequence

from ._constants import DELIMITER, MAX_MCF_LENGTH
from ._errors import ERR_MALFORMED_ENVELOPE, McfError


def split_fields(raw: str) -> List[str]:
    """Split an MCF string into its ordered fields.

    The leading delimiter is consumed, so the first returned field is the
    identifier slot (possibly empty).
    """
    if not isinstance(raw, str):
        raise McfError(ERR_MALFORMED_ENVELOPE,
                       "expected str, got {}".format(type(raw).__name__))
    if raw == "":
        raise McfError(ERR_MALFORMED_ENVELOPE, "empty input")
    if len(raw) > MAX_MCF_LENGTH:
        raise McfError(ERR_MALFORMED_ENVELOPE,
                       "input exceeds MAX_MCF_LENGTH ({})".format(MAX_MCF_LENGTH))
    if not raw.startswith(DELIMITER):
        raise McfError(ERR_MALFORMED_ENVELOPE, "missing leading '$'")
    return raw[1:].split(DELIMITER)


def join_fields(fields: Sequence[str]) -> str:
    """Join fields into an MCF string; the exact inverse of split_fields().

    The result obeys the same MAX_MCF_LENGTH bound split_fields() enforces.
    """
    if isinstance(fields, str):
        # A bare string would otherwise be joined character by character.
        raise McfError(ERR_MALFORMED_ENVELOPE, "expected a sequence of fields, got str")
    if len(fields) == 0:
        raise McfError(ERR_MALFORMED_ENVELOPE, "no fields to join")
    for i, field in enumerate(fields):
        if not isinstance(field, str):
            raise McfError(ERR_MALFORMED_ENVELOPE,
                           "field {} is {}, not str".format(i, type(field).__name__))
        if DELIMITER in field:
            raise McfError(ERR_MALFORMED_ENVELOPE,
                           "field {} contains '$'".format(i))
    joined = DELIMITER + DELIMITER.join(fields)
    if len(joined) > MAX_MCF_LENGTH:
        raise McfError(ERR_MALFORMED_ENVELOPE,
                       "output exceeds MAX_MCF_LENGTH ({})".format(MAX_MCF_LENGTH))
    return joined
