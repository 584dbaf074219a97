"""
Date: 2026-10-18
Description:
Exception classes for binder errors.

Defines custom exceptions for query-string decoding, malformed dot-paths,
unsupported container kinds, leaf casting and instantiator dispatch.
"""


class BinderError(Exception):
    """Base class for all binder errors – makes catching easy."""
    pass


class DecodeError(BinderError, ValueError):
    """Input could not be decoded as UTF-8."""
    pass


class EmptyInputError(BinderError, ValueError):
    """Query string was empty / whitespace only."""
    pass


class MalformedPath(BinderError, ValueError):
    """Dot-path has an empty segment (leading, trailing or doubled delimiter) or is too deep."""
    pass


class CastError(BinderError, ValueError):
    """Value could not be cast to the type its name asks for."""
    pass


class UnsupportedContainerKind(BinderError, TypeError):
    """Declared container kind has no registered mapping implementation."""
    pass


class NoApplicableInstantiator(BinderError, LookupError):
    """None of the candidate instantiators can build the requested target."""
    pass
