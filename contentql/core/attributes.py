from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..naming import EntityNaming, default_naming
from ..scalars import ScalarMapper, default_scalar_mapper

__all__ = ['classify_unique_filters', 'scalar_filter_fields']


def classify_unique_filters(
    attributes: Mapping[str, Any],
    mapper: Optional[ScalarMapper] = None,
    naming: Optional[EntityNaming] = None,
) -> Dict[str, str]:
    """Map each unique scalar attribute to its scalar filter input type name.

    Only attributes that are both scalar and unique are kept, in declaration
    order. Attributes whose storage type has no GraphQL scalar are dropped.
    """
    mapper = mapper or default_scalar_mapper
    naming = naming or default_naming
    out: Dict[str, str] = {}
    for name, attribute in attributes.items():
        if not (mapper.is_scalar(attribute) and getattr(attribute, 'unique', False)):
            continue
        gql_type = mapper.to_graphql_scalar(attribute.type)
        if gql_type is None:
            continue
        out[name] = naming.scalar_filter_input_type_name(gql_type)
    return out


def scalar_filter_fields(
    attributes: Mapping[str, Any],
    mapper: Optional[ScalarMapper] = None,
) -> Dict[str, str]:
    """Map every mapped scalar attribute to its GraphQL scalar name (uniqueness ignored)."""
    mapper = mapper or default_scalar_mapper
    out: Dict[str, str] = {}
    for name, attribute in attributes.items():
        if not mapper.is_scalar(attribute):
            continue
        gql_type = mapper.to_graphql_scalar(attribute.type)
        if gql_type is not None:
            out[name] = gql_type
    return out
