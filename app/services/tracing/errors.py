"""Error taxonomy for routine tracing.

Every failure raised by the invocation engine is a TraceError subclass with a
stable ``kind`` and a human readable message. Errors are terminal for the call
that raised them; the engine always finishes its cleanup before they reach the
caller.
"""


class TraceError(Exception):
    """Base class for all routine tracing failures."""

    kind = "trace_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Structured form used by the API and CLI."""
        return {"kind": self.kind, "message": self.message}


class ParseError(TraceError):
    """Malformed call syntax (missing delimiters, bad routine name)."""

    kind = "parse_error"
    status_code = 400


class ResolutionError(TraceError):
    """No routine (or more than one) matches the name and arity."""

    kind = "resolution_error"
    status_code = 404


class ArgumentTypeError(TraceError):
    """A parameter type has no literal parser."""

    kind = "argument_type_error"
    status_code = 422


class LiteralConversionError(TraceError):
    """A literal is not valid input for its declared type."""

    kind = "literal_conversion_error"
    status_code = 422

    def __init__(self, type_name: str, literal: str):
        super().__init__(f"Invalid input syntax for type {type_name}: {literal}")
        self.type_name = type_name
        self.literal = literal


class ArityError(TraceError):
    """Argument count does not match the declared parameters."""

    kind = "arity_error"
    status_code = 422

    def __init__(self, got: int, expected: int):
        super().__init__(f"Wrong number of arguments: got {got}, expected {expected}")
        self.got = got
        self.expected = expected


class InvocationError(TraceError):
    """The routine itself failed while executing."""

    kind = "invocation_error"
    status_code = 500


class NullResultError(TraceError):
    """The routine returned no value."""

    kind = "null_result_error"
    status_code = 422
