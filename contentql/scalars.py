"""Storage type -> GraphQL scalar lookup.

The mapping is an explicit, injectable service so schema builds (and tests)
can run against fixed tables instead of ambient globals.
"""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Dict, Iterable, Mapping, NewType, Optional

import strawberry
from strawberry.scalars import JSON as ST_JSON

__all__ = [
    'Long',
    'LONG_SCALAR',
    'DEFAULT_SCALAR_DEFINITIONS',
    'DEFAULT_SCALAR_MAP',
    'DEFAULT_PYTHON_TYPES',
    'ScalarMapper',
    'default_scalar_mapper',
]


def _serialize_long(value: Any) -> int:
    return int(value)


def _parse_long(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("Long cannot represent a boolean value")
    return int(value)


Long = NewType("Long", int)

LONG_SCALAR = strawberry.scalar(
    name="Long",
    description="64-bit signed integer.",
    serialize=_serialize_long,
    parse_value=_parse_long,
)

# Custom scalars handed to StrawberryConfig.scalar_map, keyed by annotation type
DEFAULT_SCALAR_DEFINITIONS: Dict[Any, Any] = {Long: LONG_SCALAR}

DEFAULT_SCALAR_MAP: Dict[str, str] = {
    'string': 'String',
    'text': 'String',
    'richtext': 'String',
    'enumeration': 'String',
    'email': 'String',
    'password': 'String',
    'uid': 'String',
    'boolean': 'Boolean',
    'biginteger': 'Long',
    'integer': 'Int',
    'float': 'Float',
    'decimal': 'Float',
    'json': 'JSON',
    'date': 'Date',
    'time': 'Time',
    'datetime': 'DateTime',
    'timestamp': 'DateTime',
}

DEFAULT_PYTHON_TYPES: Dict[str, Any] = {
    'ID': strawberry.ID,
    'String': str,
    'Boolean': bool,
    'Int': int,
    'Long': Long,
    'Float': float,
    'JSON': ST_JSON,
    'Date': date,
    'Time': time,
    'DateTime': datetime,
}


class ScalarMapper:
    """Classifies attribute storage types and maps them to GraphQL scalars.

    ``scalar_types`` decides which attributes count as scalar; ``scalar_map``
    decides which of those have a GraphQL representation. A type listed as
    scalar but absent from the map is treated as unmapped. Custom scalars
    (``Long``) are declared in ``scalar_definitions`` and end up in the
    schema's ``StrawberryConfig.scalar_map``.
    """

    def __init__(
        self,
        scalar_map: Optional[Mapping[str, str]] = None,
        python_types: Optional[Mapping[str, Any]] = None,
        scalar_types: Optional[Iterable[str]] = None,
        scalar_definitions: Optional[Mapping[Any, Any]] = None,
    ):
        self.scalar_map: Dict[str, str] = dict(DEFAULT_SCALAR_MAP if scalar_map is None else scalar_map)
        self.python_types: Dict[str, Any] = dict(DEFAULT_PYTHON_TYPES)
        if python_types:
            self.python_types.update(python_types)
        self.scalar_types = frozenset(self.scalar_map.keys() if scalar_types is None else scalar_types)
        self.scalar_definitions: Dict[Any, Any] = dict(DEFAULT_SCALAR_DEFINITIONS)
        if scalar_definitions:
            self.scalar_definitions.update(scalar_definitions)

    def is_scalar(self, attribute: Any) -> bool:
        return getattr(attribute, 'type', None) in self.scalar_types

    def to_graphql_scalar(self, storage_type: str) -> Optional[str]:
        """Return the GraphQL scalar name for a storage type, or None when unmapped."""
        return self.scalar_map.get(storage_type)

    def python_type(self, graphql_scalar: str) -> Any:
        """Return the Python/Strawberry annotation type for a GraphQL scalar name."""
        try:
            return self.python_types[graphql_scalar]
        except KeyError:
            raise LookupError(f"No Python type registered for GraphQL scalar {graphql_scalar!r}") from None

    def graphql_scalars(self) -> list:
        """GraphQL scalars reachable from the table, in first-seen order, ID first."""
        out = ['ID']
        for name in self.scalar_map.values():
            if name not in out:
                out.append(name)
        return out


default_scalar_mapper = ScalarMapper()
