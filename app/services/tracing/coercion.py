"""Argument coercion - raw literal text to typed values."""

import logging
from typing import TYPE_CHECKING, Any, Sequence

from app.services.tracing.errors import ArgumentTypeError, ArityError, LiteralConversionError
from app.services.type_catalog import TypeCatalog

if TYPE_CHECKING:
    from app.services.routines import RoutineDescriptor

logger = logging.getLogger(__name__)


def coerce_argument(
    types: TypeCatalog,
    descriptor: "RoutineDescriptor",
    index: int,
    literal: str,
) -> Any:
    """Convert the literal at position ``index`` using its declared type.

    Raises:
        ArityError: if the routine declares no parameter at ``index``.
        ArgumentTypeError: if the declared type is unknown or has no literal parser.
        LiteralConversionError: if the parser rejects the literal.
    """
    if index >= descriptor.nargs:
        raise ArityError(got=index + 1, expected=descriptor.nargs)

    declared = descriptor.parameter_types[index]
    info = types.get(declared)
    if info is None:
        raise ArgumentTypeError(f"Type {declared} does not exist")
    if info.parser is None:
        raise ArgumentTypeError(f"No input function available for type {info.name}")

    try:
        return info.parser(literal)
    except Exception as e:
        logger.debug(f"Literal {literal!r} rejected by {info.name}: {e}")
        raise LiteralConversionError(type_name=info.name, literal=literal) from e


def coerce_arguments(
    types: TypeCatalog,
    descriptor: "RoutineDescriptor",
    literals: Sequence[str],
) -> list[Any]:
    """Coerce every literal in order, failing on the first bad one."""
    return [
        coerce_argument(types, descriptor, index, literal)
        for index, literal in enumerate(literals)
    ]
