from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import MalformedFiltersError

__all__ = [
    'LOGICAL_OPERATORS',
    'SCALAR_OPERATORS',
    'GRAPHQL_OPERATORS',
    'OPERATOR_PREFIX',
    'ID_ATTRIBUTE',
    'FilterTranslator',
    'graphql_filters_to_query',
]

OPERATOR_PREFIX = '$'

# Implicit identifier attribute, filterable on every content type
ID_ATTRIBUTE = 'id'

LOGICAL_OPERATORS = ('and', 'or', 'not')

# Scalar comparison operators in the order they appear on filter inputs
SCALAR_OPERATORS = (
    'eq', 'eqi', 'ne', 'nei',
    'startsWith', 'endsWith',
    'contains', 'notContains', 'containsi', 'notContainsi',
    'gt', 'gte', 'lt', 'lte',
    'null', 'notNull',
    'in', 'notIn', 'between',
)

# Operators whose operand is a list of the scalar
LIST_OPERATORS = frozenset({'in', 'notIn', 'between'})
# Operators whose operand is a boolean regardless of the scalar
BOOLEAN_OPERATORS = frozenset({'null', 'notNull'})

GRAPHQL_OPERATORS = frozenset(LOGICAL_OPERATORS + SCALAR_OPERATORS)


class FilterTranslator:
    """Translates GraphQL filter arguments into the backend query shape.

    Attribute keys are kept, operator keys gain a ``$`` prefix, relation
    attributes recurse into their target content type::

        {'title': {'eq': 'a'}, 'or': [{'id': {'in': [1, 2]}}]}
        -> {'title': {'$eq': 'a'}, '$or': [{'id': {'$in': [1, 2]}}]}

    The input is never modified; a new structure is returned.
    """

    def __init__(self, content_type_lookup: Optional[Callable[[str], Any]] = None, *, mapper: Any = None):
        self.content_type_lookup = content_type_lookup
        self.mapper = mapper

    def translate(self, filters: Any, content_type: Any) -> Any:
        if filters is None:
            return None
        if isinstance(filters, (list, tuple)):
            return [self.translate(f, content_type) for f in filters]
        if not isinstance(filters, Mapping):
            return filters
        out: Dict[str, Any] = {}
        attributes: Mapping[str, Any] = getattr(content_type, 'attributes', None) or {}
        for key, value in filters.items():
            # Operator names win over attributes of the same name, which are not filterable
            if key in GRAPHQL_OPERATORS:
                out[OPERATOR_PREFIX + key] = self.translate(value, content_type)
            elif key in attributes:
                out[key] = self._translate_attribute(key, attributes[key], value, content_type)
            elif key == ID_ATTRIBUTE:
                out[key] = self._translate_operators(value, content_type)
            else:
                raise MalformedFiltersError(
                    f"Unknown filter key {key!r} for content type {getattr(content_type, 'uid', content_type)!r}"
                )
        return out

    def __call__(self, filters: Any, content_type: Any) -> Any:
        return self.translate(filters, content_type)

    def _translate_attribute(self, name: str, attribute: Any, value: Any, content_type: Any) -> Any:
        if getattr(attribute, 'type', None) == 'relation':
            target_uid = getattr(attribute, 'target', None)
            target = self.content_type_lookup(target_uid) if (self.content_type_lookup and target_uid) else None
            if target is None:
                raise MalformedFiltersError(
                    f"Cannot filter on relation {name!r}: target content type {target_uid!r} is unknown"
                )
            return self.translate(value, target)
        if self.mapper is not None and not self.mapper.is_scalar(attribute):
            raise MalformedFiltersError(f"Attribute {name!r} is not filterable")
        return self._translate_operators(value, content_type)

    def _translate_operators(self, value: Any, content_type: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            # Bare value is shorthand for equality
            return value
        out: Dict[str, Any] = {}
        for op, operand in value.items():
            if op not in GRAPHQL_OPERATORS:
                raise MalformedFiltersError(f"Unknown filter operator {op!r}")
            if op in LOGICAL_OPERATORS:
                if isinstance(operand, (list, tuple)):
                    out[OPERATOR_PREFIX + op] = [self._translate_operators(o, content_type) for o in operand]
                else:
                    out[OPERATOR_PREFIX + op] = self._translate_operators(operand, content_type)
            else:
                out[OPERATOR_PREFIX + op] = _copy_operand(operand)
        return out


def _copy_operand(operand: Any) -> Any:
    if isinstance(operand, (list, tuple)):
        return list(operand)
    return operand


def graphql_filters_to_query(filters: Any, content_type: Any, *, content_type_lookup: Optional[Callable[[str], Any]] = None) -> Any:
    """Functional shortcut for a one-off translation."""
    return FilterTranslator(content_type_lookup).translate(filters, content_type)
