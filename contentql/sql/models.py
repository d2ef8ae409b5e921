"""Derive content type descriptors from SQLAlchemy ORM models."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.sql.sqltypes import (
    JSON as SA_JSON,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Enum as SAEnumType,
    Float,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    Uuid,
)
from sqlalchemy.types import TypeDecorator

from ..content_types import AttributeDescriptor, ContentType
from ..naming import camel_to_snake

__all__ = ['storage_type', 'uid_for', 'content_type_from_model', 'PUBLISHED_AT_COLUMN', 'LOCALE_COLUMN']

PUBLISHED_AT_COLUMN = 'published_at'
LOCALE_COLUMN = 'locale'


def storage_type(sqlatype: Any) -> str:
    """Map a SQLAlchemy column type to a content type attribute type tag.

    Subclasses are checked before their bases (Enum before String, BigInteger
    before Integer, Float before Numeric). Unknown types yield their lowercased
    class name, which has no scalar mapping and is left out of the schema.
    """
    if isinstance(sqlatype, TypeDecorator):
        impl = getattr(sqlatype, 'impl', None)
        if impl is not None and impl is not sqlatype:
            return storage_type(impl)
    if isinstance(sqlatype, SAEnumType):
        return 'enumeration'
    if isinstance(sqlatype, Text):
        return 'text'
    if isinstance(sqlatype, String):
        return 'string'
    if isinstance(sqlatype, BigInteger):
        return 'biginteger'
    if isinstance(sqlatype, Integer):
        return 'integer'
    if isinstance(sqlatype, Boolean):
        return 'boolean'
    if isinstance(sqlatype, DateTime):
        return 'datetime'
    if isinstance(sqlatype, Date):
        return 'date'
    if isinstance(sqlatype, Time):
        return 'time'
    if isinstance(sqlatype, Float):
        return 'float'
    if isinstance(sqlatype, Numeric):
        return 'decimal'
    if isinstance(sqlatype, SA_JSON):
        return 'json'
    if isinstance(sqlatype, Uuid):
        return 'string'
    return type(sqlatype).__name__.lower()


def uid_for(model_cls: Any) -> str:
    """Default uid of a model: ``api::<name>.<name>`` with the snake_cased class name."""
    name = camel_to_snake(model_cls.__name__)
    return f"api::{name}.{name}"


def content_type_from_model(
    model_cls: Any,
    *,
    uid: Optional[str] = None,
    model_name: Optional[str] = None,
    singular_name: Optional[str] = None,
    plural_name: Optional[str] = None,
    unique: Iterable[str] = (),
    exclude: Iterable[str] = (),
    uids: Optional[Dict[Any, str]] = None,
) -> ContentType:
    """Build a :class:`ContentType` describing a declarative ORM model.

    The ``id`` primary key is implicit on every content type and is not listed
    as an attribute. Columns declared ``unique=True`` (or named in ``unique``)
    are unique attributes. Relationships become ``relation`` attributes whose
    target uid comes from ``uids`` or :func:`uid_for`.
    """
    mapper = sa_inspect(model_cls)
    uids = uids or {}
    extra_unique = set(unique)
    excluded = set(exclude)
    attributes: Dict[str, AttributeDescriptor] = {}
    for attr in mapper.column_attrs:
        key = attr.key
        if key in excluded:
            continue
        col = attr.columns[0]
        if key == 'id' and getattr(col, 'primary_key', False):
            continue
        attributes[key] = AttributeDescriptor(
            type=storage_type(col.type),
            unique=bool(getattr(col, 'unique', False)) or key in extra_unique,
            required=not bool(getattr(col, 'nullable', True)),
            description=getattr(col, 'comment', None),
        )
    for rel in mapper.relationships:
        if rel.key in excluded:
            continue
        target_cls = rel.mapper.class_
        attributes[rel.key] = AttributeDescriptor(type='relation', target=uids.get(target_cls) or uid_for(target_cls))
    name = model_name or camel_to_snake(model_cls.__name__)
    description = getattr(model_cls, '__doc__', None) or getattr(getattr(model_cls, '__table__', None), 'comment', None)
    return ContentType(
        uid=uid or uids.get(model_cls) or uid_for(model_cls),
        model_name=name,
        attributes=attributes,
        singular_name=singular_name,
        plural_name=plural_name,
        draft_and_publish=PUBLISHED_AT_COLUMN in mapper.columns,
        description=description,
    )
