"""Type catalog - maps type identifiers to their literal parsers.

Each type has a display name (used in error messages) and optionally a
literal parser: a callable turning the raw text of an argument into a typed
Python value, raising ``ValueError`` when the text is not valid input. The
built-in parsers follow the input rules of the matching PostgreSQL types.
"""

import json
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable, Iterable
from uuid import UUID

LiteralParser = Callable[[str], Any]

_INTEGER_RE = re.compile(r"\s*[+-]?\d+\s*", re.ASCII)
_FLOAT_RE = re.compile(r"\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*", re.ASCII)
_SPECIAL_FLOATS = {
    "nan": float("nan"),
    "infinity": float("inf"),
    "+infinity": float("inf"),
    "-infinity": float("-inf"),
    "inf": float("inf"),
    "+inf": float("inf"),
    "-inf": float("-inf"),
}
_TYPE_MODIFIER_RE = re.compile(r"\s*\(.*\)\s*$")

FLOAT4_MAX = 3.4028234663852886e38
NAME_MAX_LENGTH = 63


def normalize_type_name(type_name: str) -> str:
    """Lower-case a type name, collapse whitespace and drop ``(n)`` modifiers."""
    name = _TYPE_MODIFIER_RE.sub("", type_name)
    return " ".join(name.split()).lower()


def _integer_parser(bits: int) -> LiteralParser:
    low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1

    def parse(literal: str) -> int:
        if not _INTEGER_RE.fullmatch(literal):
            raise ValueError(f"not an integer: {literal!r}")
        value = int(literal)
        if not low <= value <= high:
            raise ValueError(f"value {literal.strip()} is out of range for {bits}-bit integer")
        return value

    return parse


def _float_parser(single_precision: bool = False) -> LiteralParser:
    def parse(literal: str) -> float:
        special = _SPECIAL_FLOATS.get(literal.strip().lower())
        if special is not None:
            return special
        if not _FLOAT_RE.fullmatch(literal):
            raise ValueError(f"not a floating point number: {literal!r}")
        value = float(literal)
        if value in (float("inf"), float("-inf")) or (single_precision and abs(value) > FLOAT4_MAX):
            raise ValueError(f"value {literal.strip()} is out of range")
        return value

    return parse


def parse_numeric(literal: str) -> Decimal:
    if literal.strip().lower() == "nan":
        return Decimal("NaN")
    if not _FLOAT_RE.fullmatch(literal):
        raise ValueError(f"not a numeric value: {literal!r}")
    return Decimal(literal.strip())


def parse_boolean(literal: str) -> bool:
    """Accept the boolean spellings PostgreSQL does, including unique prefixes."""
    value = literal.strip().lower()
    if value in ("1", "0"):
        return value == "1"
    if value:
        for word, result in (("true", True), ("false", False), ("yes", True), ("no", False)):
            if word.startswith(value):
                return result
        # "o" alone is ambiguous between on and off
        if len(value) >= 2:
            if "on".startswith(value):
                return True
            if "off".startswith(value):
                return False
    raise ValueError(f"not a boolean: {literal!r}")


def parse_text(literal: str) -> str:
    return literal


def parse_name(literal: str) -> str:
    return literal[:NAME_MAX_LENGTH]


def parse_date(literal: str) -> date:
    return date.fromisoformat(literal.strip())


def parse_timestamp(literal: str) -> datetime:
    # Like PostgreSQL, a timestamp without time zone silently drops any offset
    return datetime.fromisoformat(literal.strip()).replace(tzinfo=None)


def parse_timestamptz(literal: str) -> datetime:
    value = datetime.fromisoformat(literal.strip())
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def parse_uuid(literal: str) -> UUID:
    return UUID(literal.strip())


def parse_json(literal: str) -> Any:
    return json.loads(literal)


def parse_bytea(literal: str) -> bytes:
    if literal.startswith("\\x"):
        return bytes.fromhex(literal[2:])
    return literal.encode("utf-8")


@dataclass(frozen=True)
class TypeInfo:
    """A catalog type: display name plus literal parser, if it has one."""

    name: str
    parser: LiteralParser | None = None


class TypeCatalog:
    """Lookup of types by name or alias."""

    def __init__(self):
        self._types: dict[str, TypeInfo] = {}

    def register(
        self,
        name: str,
        parser: LiteralParser | None,
        aliases: Iterable[str] = (),
    ) -> TypeInfo:
        """Register a type under its display name and any aliases."""
        info = TypeInfo(name=normalize_type_name(name), parser=parser)
        for key in (name, *aliases):
            self._types[normalize_type_name(key)] = info
        return info

    def get(self, type_name: str) -> TypeInfo | None:
        """Get a type by name or alias, or None if unknown."""
        return self._types.get(normalize_type_name(type_name))

    def get_literal_parser(self, type_name: str) -> LiteralParser | None:
        """Get a type's literal parser, or None if the type is unknown or has none."""
        info = self.get(type_name)
        return info.parser if info else None

    def __contains__(self, type_name: str) -> bool:
        return self.get(type_name) is not None


def build_type_catalog() -> TypeCatalog:
    """Create a catalog holding the built-in types."""
    catalog = TypeCatalog()
    catalog.register("smallint", _integer_parser(16), aliases=["int2"])
    catalog.register("integer", _integer_parser(32), aliases=["int", "int4"])
    catalog.register("bigint", _integer_parser(64), aliases=["int8"])
    catalog.register("real", _float_parser(single_precision=True), aliases=["float4"])
    catalog.register("double precision", _float_parser(), aliases=["float8", "float"])
    catalog.register("numeric", parse_numeric, aliases=["decimal"])
    catalog.register("boolean", parse_boolean, aliases=["bool"])
    catalog.register("text", parse_text)
    catalog.register("character varying", parse_text, aliases=["varchar"])
    catalog.register("character", parse_text, aliases=["char", "bpchar"])
    catalog.register("name", parse_name)
    catalog.register("date", parse_date)
    catalog.register("timestamp without time zone", parse_timestamp, aliases=["timestamp"])
    catalog.register("timestamp with time zone", parse_timestamptz, aliases=["timestamptz"])
    catalog.register("uuid", parse_uuid)
    catalog.register("json", parse_json)
    catalog.register("jsonb", parse_json)
    catalog.register("bytea", parse_bytea)

    # Pseudo-types: known, but without an input form
    for pseudo in ("void", "record", "anyelement", "internal"):
        catalog.register(pseudo, None)
    return catalog


@lru_cache
def get_type_catalog() -> TypeCatalog:
    """Get the cached built-in type catalog."""
    return build_type_catalog()
