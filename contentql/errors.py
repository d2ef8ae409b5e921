"""Exception types raised by contentql.

Build-time omissions (a missing backend action, an attribute without a scalar
mapping) are not errors and never raise. Request-time failures raised by
backend resolvers pass through untouched.
"""
from __future__ import annotations

__all__ = [
    'ContentQLError',
    'MalformedQueryError',
    'MalformedFiltersError',
    'ActionNotFoundError',
    'UnknownTypeError',
]


class ContentQLError(Exception):
    """Base class for errors raised by contentql itself."""


class MalformedQueryError(ContentQLError, ValueError):
    """Query arguments (filters, sort, ...) cannot be turned into a backend query."""


class MalformedFiltersError(MalformedQueryError):
    """Filter arguments cannot be translated into a backend query."""


class ActionNotFoundError(ContentQLError, LookupError):
    """A resolver was requested for a backend action that is not registered."""

    def __init__(self, reference: str):
        super().__init__(f"Backend action not found: {reference}")
        self.reference = reference


class UnknownTypeError(ContentQLError, LookupError):
    """An argument or return type name has no registered GraphQL type."""

    def __init__(self, type_name: str):
        super().__init__(f"Unknown GraphQL type name: {type_name}")
        self.type_name = type_name
