"""Record binder — map dataclass records onto MCF fields and back.

A record is any dataclass.  Its fields, in declaration order, are bound to
MCF fields 1..n; field 0 is the identifier slot.  Each field's declared type
picks a FieldCodec, which is the only thing that knows how that type looks
as text:

    @dataclasses.dataclass
    class Sha512Record:
        mcf_identifier: ClassVar[str] = "6"
        rounds: int
        salt: Annotated[bytes, Binary(CRYPT)]
        hash: Annotated[bytes, Binary(CRYPT)]

    bind_decode("$6$10000$saltstring$hashedvalue", Sha512Record)

Adding a hash family means declaring a record type like the one above; no
parsing code is written per algorithm.

Identifier rules (field 0):
  - an `Identifier()`-annotated first field receives field 0 as its value;
  - a `mcf_identifier` class attribute fixes what field 0 must be;
  - with neither, field 0 is consumed unchecked and encoded as "".
"""

from __future__ import annotations

import dataclasses
import enum
import functools
import logging
import re
import types
import typing
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar, Union

from ._constants import (
    BOOL_FALSE,
    BOOL_TRUE,
    DELIMITER,
    PARAM_ASSIGN,
    PARAM_SEPARATOR,
)
from ._crypt64 import STANDARD, Alphabet, b64decode, b64encode, get_alphabet
from ._errors import (
    ERR_FIELD_COUNT,
    ERR_RECORD_TYPE,
    ERR_TRAILING_FIELDS,
    ERR_UNEXPECTED_IDENTIFIER,
    FieldDecodeError,
    FieldEncodeError,
    McfError,
)
from ._tokenizer import join_fields, split_fields

logger = logging.getLogger(__name__)

R = TypeVar("R")

IDENTIFIER_ATTR = "mcf_identifier"


# ── Field markers (used inside typing.Annotated) ─────────────

class Identifier:
    """Marks the first record field as the holder of field 0."""

    def __repr__(self) -> str:
        return "Identifier()"


class Binary:
    """Marks a bytes field as crypt-base64 text in the given alphabet."""

    def __init__(self, alphabet: Union[str, Alphabet] = STANDARD) -> None:
        self.alphabet = get_alphabet(alphabet)

    def __repr__(self) -> str:
        return "Binary({!r})".format(self.alphabet.name)


class Joined:
    """Two binary values sharing one field, split after `split_at` symbols.

    bcrypt is the reason this exists: its last field is the 22-symbol salt
    immediately followed by the 31-symbol checksum.
    """

    def __init__(self, alphabet: Union[str, Alphabet], split_at: int) -> None:
        if split_at < 0:
            raise ValueError("split_at must be >= 0")
        self.alphabet = get_alphabet(alphabet)
        self.split_at = split_at

    def __repr__(self) -> str:
        return "Joined({!r}, {})".format(self.alphabet.name, self.split_at)


class Width:
    """Zero-pad an int field to at least `digits` digits (bcrypt's "05")."""

    def __init__(self, digits: int) -> None:
        if digits < 1:
            raise ValueError("digits must be >= 1")
        self.digits = digits

    def __repr__(self) -> str:
        return "Width({})".format(self.digits)


# ── Field codecs ──────────────────────────────────────────────
# One small class per supported type.  decode() takes the raw field text,
# encode() takes the attribute value.  Both raise ValueError / TypeError /
# McfError on bad input; the binder wraps those with the field position.

class FieldCodec:
    """Decode one field's text into a value, and encode it back."""

    #: Scalars can appear inside parameter maps and lists.
    scalar = True

    def decode(self, text: str) -> Any:
        raise NotImplementedError

    def encode(self, value: Any) -> str:
        raise NotImplementedError


_INT_RE = re.compile(r"-?[0-9]+")
_FLOAT_RE = re.compile(r"-?[0-9]+(\.[0-9]+)?([eE][-+]?[0-9]+)?")


class IntCodec(FieldCodec):
    def __init__(self, width: Optional[int] = None) -> None:
        self.width = width

    def decode(self, text: str) -> int:
        if not _INT_RE.fullmatch(text):
            raise ValueError("not a decimal integer: {!r}".format(text))
        value = int(text)
        # Reject "007", "-0", "5" under Width(2): every accepted text must be
        # exactly what encode() would produce.
        if self.encode(value) != text:
            raise ValueError("non-canonical integer text: {!r}".format(text))
        return value

    def encode(self, value: Any) -> str:
        # bool is an int subclass; True must not encode as "1".
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError("expected int, got {}".format(type(value).__name__))
        if self.width is None:
            return str(value)
        if value < 0:
            raise ValueError("negative value {} in fixed-width field".format(value))
        return str(value).zfill(self.width)


class StrCodec(FieldCodec):
    def decode(self, text: str) -> str:
        return text

    def encode(self, value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError("expected str, got {}".format(type(value).__name__))
        if DELIMITER in value:
            raise ValueError("text contains '$'")
        return value


class BoolCodec(FieldCodec):
    def decode(self, text: str) -> bool:
        if text == BOOL_TRUE:
            return True
        if text == BOOL_FALSE:
            return False
        raise ValueError("expected {!r} or {!r}, got {!r}".format(BOOL_TRUE, BOOL_FALSE, text))

    def encode(self, value: Any) -> str:
        if not isinstance(value, bool):
            raise TypeError("expected bool, got {}".format(type(value).__name__))
        return BOOL_TRUE if value else BOOL_FALSE


class FloatCodec(FieldCodec):
    def decode(self, text: str) -> float:
        if not _FLOAT_RE.fullmatch(text):
            raise ValueError("not a decimal number: {!r}".format(text))
        value = float(text)
        # Only text encode() reproduces, so "1.50", "1" and "1e400" (inf) fail.
        if self.encode(value) != text:
            raise ValueError("non-canonical number text: {!r}".format(text))
        return value

    def encode(self, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError("expected float, got {}".format(type(value).__name__))
        text = repr(float(value))
        if not _FLOAT_RE.fullmatch(text):
            raise ValueError("{} has no MCF text form".format(text))
        return text


class EnumCodec(FieldCodec):
    """Enum members travel as the text of their value."""

    def __init__(self, enum_type: Type[enum.Enum]) -> None:
        self.enum_type = enum_type
        self._by_text: Dict[str, enum.Enum] = {}
        for member in enum_type:
            self._by_text[_enum_value_text(member)] = member

    def decode(self, text: str) -> enum.Enum:
        try:
            return self._by_text[text]
        except KeyError:
            raise ValueError("{!r} is not a {} value".format(text, self.enum_type.__name__)) from None

    def encode(self, value: Any) -> str:
        if not isinstance(value, self.enum_type):
            raise TypeError("expected {}, got {}".format(
                self.enum_type.__name__, type(value).__name__))
        return _enum_value_text(value)


def _enum_value_text(member: enum.Enum) -> str:
    value = member.value
    if isinstance(value, str):
        text = value
    elif isinstance(value, int) and not isinstance(value, bool):
        text = str(value)
    else:
        raise McfError(ERR_RECORD_TYPE, "{}.{} has a {} value; only str and int values are supported".format(
            type(member).__name__, member.name, type(value).__name__))
    if DELIMITER in text:
        raise McfError(ERR_RECORD_TYPE, "{}.{} value contains '$'".format(
            type(member).__name__, member.name))
    return text


class BytesCodec(FieldCodec):
    def __init__(self, alphabet: Alphabet) -> None:
        self.alphabet = alphabet

    def decode(self, text: str) -> bytes:
        return b64decode(text, self.alphabet)

    def encode(self, value: Any) -> str:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError("expected bytes, got {}".format(type(value).__name__))
        return b64encode(value, self.alphabet)


class JoinedBytesCodec(FieldCodec):
    scalar = False

    def __init__(self, marker: Joined) -> None:
        self.alphabet = marker.alphabet
        self.split_at = marker.split_at

    def decode(self, text: str) -> Tuple[bytes, bytes]:
        if len(text) < self.split_at:
            raise ValueError("joined field has {} symbols, first part needs {}".format(
                len(text), self.split_at))
        head, tail = text[:self.split_at], text[self.split_at:]
        return b64decode(head, self.alphabet), b64decode(tail, self.alphabet)

    def encode(self, value: Any) -> str:
        if not isinstance(value, tuple) or len(value) != 2:
            raise TypeError("expected a (bytes, bytes) tuple")
        first, second = value
        for part in value:
            if not isinstance(part, (bytes, bytearray, memoryview)):
                raise TypeError("expected bytes, got {}".format(type(part).__name__))
        head = b64encode(first, self.alphabet)
        if len(head) != self.split_at:
            raise ValueError("first part encodes to {} symbols, expected {}".format(
                len(head), self.split_at))
        return head + b64encode(second, self.alphabet)


class OptionalCodec(FieldCodec):
    """An empty field is None; anything else goes to the inner codec."""

    scalar = False

    def __init__(self, inner: FieldCodec) -> None:
        self.inner = inner

    def decode(self, text: str) -> Any:
        if text == "":
            return None
        return self.inner.decode(text)

    def encode(self, value: Any) -> str:
        if value is None:
            return ""
        text = self.inner.encode(value)
        if text == "":
            raise ValueError("value encodes to empty text, which is reserved for None")
        return text


class ParamsCodec(FieldCodec):
    """Parameter list: "k1=v1,k2=v2", order preserved."""

    scalar = False

    def __init__(self, value_codec: FieldCodec) -> None:
        self.value_codec = value_codec

    def decode(self, text: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if text == "":
            return params
        for item in text.split(PARAM_SEPARATOR):
            key, sep, raw = item.partition(PARAM_ASSIGN)
            if not sep:
                raise ValueError("parameter {!r} has no '{}'".format(item, PARAM_ASSIGN))
            if key == "":
                raise ValueError("parameter with empty name")
            if key in params:
                raise ValueError("duplicate parameter {!r}".format(key))
            params[key] = self.value_codec.decode(raw)
        return params

    def encode(self, value: Any) -> str:
        if not isinstance(value, Mapping):
            raise TypeError("expected a mapping, got {}".format(type(value).__name__))
        items: List[str] = []
        for key, item in value.items():
            if not isinstance(key, str) or key == "":
                raise ValueError("parameter names must be non-empty str")
            if PARAM_SEPARATOR in key or PARAM_ASSIGN in key or DELIMITER in key:
                raise ValueError("parameter name {!r} contains a separator".format(key))
            text = self.value_codec.encode(item)
            if PARAM_SEPARATOR in text:
                raise ValueError("parameter {!r} value contains '{}'".format(key, PARAM_SEPARATOR))
            items.append(key + PARAM_ASSIGN + text)
        return PARAM_SEPARATOR.join(items)


class ListCodec(FieldCodec):
    """Comma-separated scalars.  An empty field is an empty list."""

    scalar = False

    def __init__(self, item_codec: FieldCodec, as_tuple: bool = False) -> None:
        self.item_codec = item_codec
        self.as_tuple = as_tuple

    def decode(self, text: str) -> Any:
        items: List[Any] = []
        if text != "":
            for raw in text.split(PARAM_SEPARATOR):
                if raw == "":
                    raise ValueError("empty list item")
                items.append(self.item_codec.decode(raw))
        return tuple(items) if self.as_tuple else items

    def encode(self, value: Any) -> str:
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
            raise TypeError("expected a list, got {}".format(type(value).__name__))
        parts: List[str] = []
        for item in value:
            text = self.item_codec.encode(item)
            if text == "" or PARAM_SEPARATOR in text:
                raise ValueError("list item {!r} has no unambiguous text form".format(item))
            parts.append(text)
        return PARAM_SEPARATOR.join(parts)


# ── Record layout ─────────────────────────────────────────────

@dataclasses.dataclass(frozen=True)
class FieldSpec:
    """One bound record field.  `index` is its raw MCF field position."""

    name: str
    index: int
    codec: FieldCodec


@dataclasses.dataclass(frozen=True)
class RecordLayout:
    record_type: type
    fields: Tuple[FieldSpec, ...]
    identifier_field: Optional[FieldSpec] = None
    fixed_identifier: Optional[str] = None

    @property
    def field_count(self) -> int:
        """Raw MCF fields a matching string has, identifier included."""
        return len(self.fields) + 1


def _unwrap_annotated(tp: Any) -> Tuple[Any, List[Any]]:
    markers: List[Any] = []
    while typing.get_origin(tp) is typing.Annotated:
        args = typing.get_args(tp)
        tp = args[0]
        markers.extend(args[1:])
    return tp, markers


def _marker(markers: List[Any], kind: type) -> Any:
    found = [m for m in markers if isinstance(m, kind)]
    if len(found) > 1:
        raise McfError(ERR_RECORD_TYPE, "more than one {} marker".format(kind.__name__))
    return found[0] if found else None


def _codec_for(tp: Any, markers: List[Any], where: str) -> FieldCodec:
    tp, inner_markers = _unwrap_annotated(tp)
    markers = markers + inner_markers
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)

    joined = _marker(markers, Joined)
    if joined is not None:
        if origin is not tuple or args != (bytes, bytes):
            raise McfError(ERR_RECORD_TYPE, "{}: Joined() needs Tuple[bytes, bytes]".format(where))
        return JoinedBytesCodec(joined)

    if origin in (Union, types.UnionType):
        members = [a for a in args if a is not type(None)]
        if len(members) != 1 or len(args) != 2:
            raise McfError(ERR_RECORD_TYPE, "{}: only Optional[X] unions are supported".format(where))
        inner = _codec_for(members[0], markers, where)
        if not inner.scalar:
            raise McfError(ERR_RECORD_TYPE, "{}: Optional[...] must wrap a scalar type".format(where))
        return OptionalCodec(inner)

    if origin is dict:
        if not args or args[0] is not str:
            raise McfError(ERR_RECORD_TYPE, "{}: parameter maps need str keys".format(where))
        value_codec = _codec_for(args[1], [], where)
        if not value_codec.scalar:
            raise McfError(ERR_RECORD_TYPE, "{}: parameter values must be scalar".format(where))
        return ParamsCodec(value_codec)

    if origin is list or (origin is tuple and len(args) == 2 and args[1] is Ellipsis):
        if not args:
            raise McfError(ERR_RECORD_TYPE, "{}: list item type is required".format(where))
        item_codec = _codec_for(args[0], [], where)
        if not item_codec.scalar:
            raise McfError(ERR_RECORD_TYPE, "{}: list items must be scalar".format(where))
        return ListCodec(item_codec, as_tuple=origin is tuple)

    if origin is not None:
        raise McfError(ERR_RECORD_TYPE, "{}: unsupported type {!r}".format(where, tp))

    # bool before int: bool is an int subclass.
    if tp is bool:
        return BoolCodec()
    if tp is int:
        width = _marker(markers, Width)
        return IntCodec(width.digits if width is not None else None)
    if tp is float:
        return FloatCodec()
    if tp is str:
        return StrCodec()
    if tp is bytes:
        binary = _marker(markers, Binary)
        return BytesCodec(binary.alphabet if binary is not None else STANDARD)
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return EnumCodec(tp)
    if dataclasses.is_dataclass(tp):
        raise McfError(ERR_RECORD_TYPE, "{}: nested records are not supported".format(where))

    raise McfError(ERR_RECORD_TYPE, "{}: unsupported type {!r}".format(where, tp))


@functools.lru_cache(maxsize=None)
def describe(record_type: type) -> RecordLayout:
    """Build (once per type) the ordered field layout of a record type.

    Only init=True dataclass fields are bound.  ClassVar attributes, such as
    `mcf_identifier`, are not fields.
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise McfError(ERR_RECORD_TYPE, "{!r} is not a dataclass type".format(record_type))

    fixed = getattr(record_type, IDENTIFIER_ATTR, None)
    if fixed is not None and (not isinstance(fixed, str) or DELIMITER in fixed):
        raise McfError(ERR_RECORD_TYPE, "{}.{} must be a str without '$'".format(
            record_type.__name__, IDENTIFIER_ATTR))

    try:
        hints = typing.get_type_hints(record_type, include_extras=True)
    except (NameError, TypeError) as e:
        raise McfError(ERR_RECORD_TYPE, "cannot resolve annotations of {}: {}".format(
            record_type.__name__, e)) from e

    identifier_field: Optional[FieldSpec] = None
    specs: List[FieldSpec] = []
    bound = [f for f in dataclasses.fields(record_type) if f.init]
    for position, f in enumerate(bound):
        where = "{}.{}".format(record_type.__name__, f.name)
        tp, markers = _unwrap_annotated(hints[f.name])
        if _marker(markers, Identifier) is not None:
            if position != 0:
                raise McfError(ERR_RECORD_TYPE, "{}: Identifier() must mark the first field".format(where))
            if tp is str:
                codec: FieldCodec = StrCodec()
            elif isinstance(tp, type) and issubclass(tp, enum.Enum):
                codec = EnumCodec(tp)
            else:
                raise McfError(ERR_RECORD_TYPE, "{}: identifier must be str or an Enum".format(where))
            identifier_field = FieldSpec(f.name, 0, codec)
            continue
        specs.append(FieldSpec(f.name, len(specs) + 1, _codec_for(tp, markers, where)))

    return RecordLayout(
        record_type=record_type,
        fields=tuple(specs),
        identifier_field=identifier_field,
        fixed_identifier=fixed,
    )


# ── Decode ────────────────────────────────────────────────────

def _decode_identifier(layout: RecordLayout, text: str, values: Dict[str, Any]) -> None:
    spec = layout.identifier_field
    fixed = layout.fixed_identifier
    if fixed is not None and text != fixed:
        raise McfError(ERR_UNEXPECTED_IDENTIFIER,
                       "expected identifier {!r}, got {!r}".format(fixed, text))
    if spec is None:
        return
    try:
        values[spec.name] = spec.codec.decode(text)
    except ValueError as e:
        raise McfError(ERR_UNEXPECTED_IDENTIFIER, str(e)) from e


def bind_decode(text: str, record_type: Type[R]) -> R:
    """Decode an MCF string into a new instance of `record_type`.

    The shape must match exactly: the field count is checked before any
    field is decoded, then fields decode in order and the first failure
    raises FieldDecodeError.
    """
    layout = describe(record_type)
    raw = split_fields(text)

    values: Dict[str, Any] = {}
    _decode_identifier(layout, raw[0], values)

    if len(raw) < layout.field_count:
        raise McfError(ERR_FIELD_COUNT, "{} declares {} fields after the identifier, got {}".format(
            record_type.__name__, len(layout.fields), len(raw) - 1))
    if len(raw) > layout.field_count:
        raise McfError(ERR_TRAILING_FIELDS, "{} declares {} fields after the identifier, got {}".format(
            record_type.__name__, len(layout.fields), len(raw) - 1))

    for spec in layout.fields:
        try:
            values[spec.name] = spec.codec.decode(raw[spec.index])
        except (ValueError, TypeError, McfError) as e:
            logger.debug("decode of %s stopped at field %d (%s): %s",
                         record_type.__name__, spec.index, spec.name, e)
            raise FieldDecodeError(spec.index, spec.name, e) from e

    logger.debug("decoded %s from %d fields", record_type.__name__, len(raw))
    return record_type(**values)


def decode_first(text: str, *record_types: type) -> Any:
    """Decode into the first record type that accepts `text`.

    Candidates are tried in the order given.  If none fits, the error from
    the last candidate is raised.
    """
    last_error: Optional[McfError] = None
    for record_type in record_types:
        try:
            return bind_decode(text, record_type)
        except McfError as e:
            if e.code == ERR_RECORD_TYPE:
                raise
            logger.debug("%s rejected input: [%s] %s", record_type.__name__, e.code, e)
            last_error = e
    if last_error is None:
        raise ValueError("decode_first() needs at least one record type")
    raise last_error


# ── Encode ────────────────────────────────────────────────────

def _encode_identifier(layout: RecordLayout, record: Any) -> str:
    spec = layout.identifier_field
    fixed = layout.fixed_identifier
    if spec is None:
        return fixed if fixed is not None else ""
    value = getattr(record, spec.name)
    try:
        text = spec.codec.encode(value)
        if fixed is not None and text != fixed:
            raise ValueError("identifier {!r} does not match {}.{} {!r}".format(
                text, type(record).__name__, IDENTIFIER_ATTR, fixed))
    except (ValueError, TypeError) as e:
        raise FieldEncodeError(0, spec.name, e) from e
    return text


def bind_encode(record: Any) -> str:
    """Encode a record instance as an MCF string."""
    if isinstance(record, type) or not dataclasses.is_dataclass(record):
        raise McfError(ERR_RECORD_TYPE, "{!r} is not a dataclass instance".format(record))
    layout = describe(type(record))

    out: List[str] = [_encode_identifier(layout, record)]
    for spec in layout.fields:
        try:
            out.append(spec.codec.encode(getattr(record, spec.name)))
        except (ValueError, TypeError, McfError) as e:
            raise FieldEncodeError(spec.index, spec.name, e) from e

    logger.debug("encoded %s into %d fields", type(record).__name__, len(out))
    return join_fields(out)
