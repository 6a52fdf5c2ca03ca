"""Call expression parsing.

A call expression has the form::

    call      := name "(" arguments ")" [trailing]
    name      := any text before the first "("
    arguments := [token ("," token)*]
    token     := any run of characters other than ","

The closing delimiter is the *last* ")" after the opening one, and anything
following it is ignored. Leading whitespace of every token is dropped; trailing
whitespace and quotes are kept as written. Empty runs between consecutive
commas produce no token, and a blank interior produces no tokens at all.

Commas inside quoted literals are not special, so ``f('a,b')`` yields the two
tokens ``'a`` and ``b'``.
"""

from dataclasses import dataclass

from app.services.tracing.errors import ParseError

OPEN_DELIMITER = "("
CLOSE_DELIMITER = ")"
ARGUMENT_SEPARATOR = ","


@dataclass(frozen=True)
class ParsedCall:
    """A routine name and its raw literal arguments."""

    name: str
    arguments: tuple[str, ...]


def tokenize_arguments(interior: str) -> list[str]:
    """Split the text between the call delimiters into raw literal tokens."""
    if not interior.strip():
        return []

    tokens: list[str] = []
    current: list[str] = []
    for char in interior:
        if char == ARGUMENT_SEPARATOR:
            if current:
                tokens.append("".join(current).lstrip())
            current = []
        else:
            current.append(char)
    if current:
        tokens.append("".join(current).lstrip())
    return tokens


def parse_call(call_string: str | None) -> ParsedCall:
    """Parse ``schema.name(arg1, arg2)`` into a name and raw tokens.

    Raises:
        ParseError: if the string is empty, lacks either delimiter, or has
            no routine name before the opening delimiter.
    """
    if call_string is None or not call_string.strip():
        raise ParseError("Call string cannot be empty")

    open_at = call_string.find(OPEN_DELIMITER)
    if open_at < 0:
        raise ParseError("Invalid call syntax: missing opening parenthesis")

    close_at = call_string.rfind(CLOSE_DELIMITER, open_at + 1)
    if close_at < 0:
        raise ParseError("Invalid call syntax: missing closing parenthesis")

    name = call_string[:open_at].strip()
    if not name:
        raise ParseError("Invalid call syntax: missing routine name")

    interior = call_string[open_at + 1:close_at]
    return ParsedCall(name=name, arguments=tuple(tokenize_arguments(interior)))
