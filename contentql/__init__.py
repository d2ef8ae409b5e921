"""contentql public API and lightweight lazy exports.

Generates "find one" / "find many" GraphQL query fields for content types at
runtime and assembles them into a Strawberry schema.

Exposes:
- get_active_schema, set_active_schema
- Lazy attributes: ContentSchema, ContentType, AttributeDescriptor, ActionRegistry,
  CollectionTypeQueryBuilder, build_collection_type_queries, classify_unique_filters,
  FilterTranslator, ScalarMapper, EntityNaming, SQLAlchemyBackend, content_type_from_model
"""
from __future__ import annotations

from typing import Any

_ACTIVE_SCHEMA: Any = None


def set_active_schema(schema: Any) -> None:
    """Swap the schema served to new requests; in-flight requests keep the old one."""
    global _ACTIVE_SCHEMA
    _ACTIVE_SCHEMA = schema


def get_active_schema() -> Any:
    if _ACTIVE_SCHEMA is None:
        raise RuntimeError("Active contentql schema not set. Call set_active_schema() after building it.")
    return _ACTIVE_SCHEMA


_LAZY = {
    'ContentSchema': '.registry',
    'ContentType': '.content_types',
    'AttributeDescriptor': '.content_types',
    'ContentTypeRegistry': '.content_types',
    'ActionRegistry': '.actions',
    'CollectionTypeQueryBuilder': '.builders.queries',
    'build_collection_type_queries': '.builders.queries',
    'classify_unique_filters': '.core.attributes',
    'FilterTranslator': '.core.filters',
    'QueryFieldSpec': '.core.fields',
    'SchemaExtension': '.core.fields',
    'Skip': '.core.fields',
    'Register': '.core.fields',
    'ScalarMapper': '.scalars',
    'EntityNaming': '.naming',
    'SQLAlchemyBackend': '.sql.backend',
    'content_type_from_model': '.sql.models',
}


def __getattr__(name: str):  # PEP 562 lazy exports
    import importlib as _importlib
    module = _LAZY.get(name)
    if module is None:
        raise AttributeError(name)
    return getattr(_importlib.import_module(module, __name__), name)


__all__ = ['get_active_schema', 'set_active_schema', *_LAZY.keys()]
