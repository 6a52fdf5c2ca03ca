"""Routine resolution by qualified name and arity."""

import logging
from typing import TYPE_CHECKING, Sequence

from app.services.tracing.errors import ArityError, ParseError, ResolutionError

if TYPE_CHECKING:
    from app.services.routines import RoutineCatalog, RoutineDescriptor

logger = logging.getLogger(__name__)

# schema.name is the deepest path the catalog understands
MAX_NAME_PARTS = 2


def split_qualified_name(name: str) -> tuple[str, ...]:
    """Split a possibly schema-qualified name into identifier parts.

    Follows SQL identifier rules: unquoted parts are folded to lower case,
    double-quoted parts keep their case and use ``""`` for a literal quote,
    whitespace around parts is ignored.

    Raises:
        ParseError: on empty parts, unterminated quotes or stray characters.
    """
    parts: list[str] = []
    pos = 0
    length = len(name)

    while True:
        while pos < length and name[pos].isspace():
            pos += 1

        if pos < length and name[pos] == '"':
            pos += 1
            chars: list[str] = []
            while True:
                end = name.find('"', pos)
                if end < 0:
                    raise ParseError(f"Invalid name syntax: unterminated quoted identifier in {name!r}")
                chars.append(name[pos:end])
                if end + 1 < length and name[end + 1] == '"':
                    chars.append('"')
                    pos = end + 2
                    continue
                pos = end + 1
                break
            part = "".join(chars)
            if not part:
                raise ParseError(f"Invalid name syntax: zero-length quoted identifier in {name!r}")
        else:
            start = pos
            while pos < length and name[pos] != "." and not name[pos].isspace():
                pos += 1
            part = name[start:pos].lower()
            if not part:
                raise ParseError(f"Invalid name syntax: {name!r}")

        parts.append(part)

        while pos < length and name[pos].isspace():
            pos += 1
        if pos >= length:
            break
        if name[pos] != ".":
            raise ParseError(f"Invalid name syntax: {name!r}")
        pos += 1

    return tuple(parts)


def resolve_routine(
    catalog: "RoutineCatalog",
    name: str,
    nargs: int,
    search_path: Sequence[str] = ("public",),
) -> "RoutineDescriptor":
    """Find the routine called ``name`` taking ``nargs`` arguments.

    Unqualified names are looked up schema by schema along ``search_path``
    and the first schema with a match wins. Only the argument count takes
    part in the lookup; parameter types are not known until coercion.

    Raises:
        ParseError: if the name itself is malformed.
        ArityError: if the name only exists with one, different, argument count.
        ResolutionError: if nothing matches, the name has too many parts,
            or several routines share the name and arity.
    """
    path = split_qualified_name(name)
    display = ".".join(path)

    if len(path) > MAX_NAME_PARTS:
        raise ResolutionError(f"Improper qualified name (too many dotted names): {display}")

    if len(path) == MAX_NAME_PARTS:
        candidates = [path]
    else:
        candidates = [(schema, path[0]) for schema in search_path]

    for schema, routine_name in candidates:
        matches = catalog.lookup(schema, routine_name, nargs)
        if not matches:
            continue
        if len(matches) > 1:
            raise ResolutionError(
                f"Routine {schema}.{routine_name} with {nargs} argument(s) is not unique"
            )
        descriptor = matches[0]
        logger.debug(f"Resolved {name!r}/{nargs} to routine {descriptor.id} ({descriptor.qualified_name})")
        return descriptor

    # A single routine by that name means the caller got the argument count wrong
    for schema, routine_name in candidates:
        arities = {d.nargs for d in catalog.lookup(schema, routine_name)}
        if len(arities) == 1:
            raise ArityError(got=nargs, expected=arities.pop())
        if arities:
            break

    raise ResolutionError(f"Routine {display} with {nargs} argument(s) does not exist")
