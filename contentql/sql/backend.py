"""SQLAlchemy implementation of the ``find`` / ``findOne`` backend actions.

Actions receive the translated query (``$``-prefixed operators) and read an
``AsyncSession`` from the GraphQL context. Records are returned as plain
dicts keyed by mapped attribute name.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from sqlalchemy import and_, inspect as sa_inspect, not_, or_, select

from ..actions import ActionRegistry, resolver_reference
from ..content_types import ContentType
from ..core.utils import get_db_session
from ..errors import MalformedFiltersError, MalformedQueryError
from .models import LOCALE_COLUMN, PUBLISHED_AT_COLUMN, content_type_from_model
from .operators import FLAG_OPERATORS, OPERATOR_REGISTRY, coerce_where_value

__all__ = ['SQLAlchemyBackend', 'build_where', 'parse_sort', 'to_record']

_logger = logging.getLogger("contentql.sql")


def to_record(obj: Any) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    mapper = sa_inspect(type(obj))
    return {attr.key: getattr(obj, attr.key) for attr in mapper.column_attrs}


def _column_condition(attr: Any, column_type: Any, value: Any):
    if not isinstance(value, Mapping):
        return OPERATOR_REGISTRY['$eq'](attr, coerce_where_value(column_type, value))
    parts = []
    for op, operand in value.items():
        if op == '$and':
            sub = [c for c in (_column_condition(attr, column_type, v) for v in _as_filter_list(operand)) if c is not None]
            parts.append(and_(*sub) if sub else None)
        elif op == '$or':
            sub = [c for c in (_column_condition(attr, column_type, v) for v in _as_filter_list(operand)) if c is not None]
            parts.append(or_(*sub) if sub else None)
        elif op == '$not':
            inner = _column_condition(attr, column_type, operand) if operand is not None else None
            parts.append(not_(inner) if inner is not None else None)
        else:
            fn = OPERATOR_REGISTRY.get(op)
            if fn is None:
                raise MalformedFiltersError(f"Unsupported filter operator {op!r}")
            operand = operand if op in FLAG_OPERATORS else coerce_where_value(column_type, operand)
            parts.append(fn(attr, operand))
    parts = [p for p in parts if p is not None]
    if not parts:
        return None
    return parts[0] if len(parts) == 1 else and_(*parts)


def _as_filter_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v for v in value if v is not None]
    return [value]


def build_where(model_cls: Any, filters: Optional[Mapping[str, Any]]):
    """Compile translated filters into a SQLAlchemy boolean clause (None when empty).

    Relation keys compile to ``has()`` (to-one) or ``any()`` (to-many)
    subqueries against the related model.
    """
    if not filters:
        return None
    if not isinstance(filters, Mapping):
        raise MalformedFiltersError(f"Filters must be an object, got {type(filters).__name__}")
    mapper = sa_inspect(model_cls)
    clauses = []
    for key, value in filters.items():
        if value is None:
            continue
        if key == '$and':
            sub = [c for c in (build_where(model_cls, f) for f in _as_filter_list(value)) if c is not None]
            if sub:
                clauses.append(and_(*sub))
        elif key == '$or':
            sub = [c for c in (build_where(model_cls, f) for f in _as_filter_list(value)) if c is not None]
            if sub:
                clauses.append(or_(*sub))
        elif key == '$not':
            sub_clause = build_where(model_cls, value)
            if sub_clause is not None:
                clauses.append(not_(sub_clause))
        elif key in mapper.relationships:
            rel = mapper.relationships[key]
            rel_attr = getattr(model_cls, key)
            sub_clause = build_where(rel.mapper.class_, value)
            if rel.uselist:
                clauses.append(rel_attr.any(sub_clause) if sub_clause is not None else rel_attr.any())
            else:
                clauses.append(rel_attr.has(sub_clause) if sub_clause is not None else rel_attr.has())
        elif key in mapper.columns:
            clause = _column_condition(getattr(model_cls, key), mapper.columns[key].type, value)
            if clause is not None:
                clauses.append(clause)
        else:
            raise MalformedFiltersError(f"Unknown filter attribute {key!r} on {model_cls.__name__}")
    if not clauses:
        return None
    return clauses[0] if len(clauses) == 1 else and_(*clauses)


def parse_sort(sort: Any) -> List[Tuple[str, str]]:
    """Parse ``['title:desc', 'id']`` (or ``'title:desc,id'``) into (attribute, direction) pairs."""
    if not sort:
        return []
    items = [sort] if isinstance(sort, str) else list(sort)
    out: List[Tuple[str, str]] = []
    for item in items:
        for spec in str(item).split(','):
            spec = spec.strip()
            if not spec:
                continue  # Skip empty specs from trailing commas
            name, _, direction = spec.partition(':')
            direction = (direction or 'asc').strip().lower()
            if direction not in ('asc', 'desc'):
                raise MalformedQueryError(f"Invalid sort direction '{direction}'. Must be 'asc' or 'desc'")
            out.append((name.strip(), direction))
    return out


class SQLAlchemyBackend:
    """Serves ``<uid>.find`` and ``<uid>.findOne`` actions from SQLAlchemy ORM models."""

    def __init__(self, actions: ActionRegistry):
        self.actions = actions
        self.models: Dict[str, Any] = {}

    def register(self, content_type: ContentType, model_cls: Any, *, actions: Iterable[str] = ('find', 'findOne')) -> ContentType:
        self.models[content_type.uid] = model_cls
        for action in actions:
            if action == 'find':
                self.actions.register(resolver_reference(content_type.uid, 'find'), self._make_find(model_cls))
            elif action == 'findOne':
                self.actions.register(resolver_reference(content_type.uid, 'findOne'), self._make_find_one(model_cls))
            else:
                raise ValueError(f"Unsupported backend action: {action!r}")
        return content_type

    def register_model(self, model_cls: Any, *, actions: Iterable[str] = ('find', 'findOne'), **kwargs: Any) -> ContentType:
        """Describe ``model_cls`` as a content type and register its actions."""
        return self.register(content_type_from_model(model_cls, **kwargs), model_cls, actions=actions)

    # ---------- helpers ----------
    @staticmethod
    def _session(context: Any, info: Any):
        session = get_db_session(context)
        if session is None:
            session = get_db_session(info)
        if session is None:
            raise RuntimeError("No database session in GraphQL context (expected 'db_session').")
        return session

    @staticmethod
    def _order_by(model_cls: Any, sort: Any) -> List[Any]:
        mapper = sa_inspect(model_cls)
        order: List[Any] = []
        for name, direction in parse_sort(sort):
            if name not in mapper.columns:
                raise MalformedQueryError(f"Cannot sort {model_cls.__name__} by unknown attribute {name!r}")
            col = getattr(model_cls, name)
            order.append(col.desc() if direction == 'desc' else col.asc())
        # Primary key tie-breaker keeps results deterministic
        for pk in mapper.primary_key:
            order.append(pk.asc())
        return order

    def _make_find(self, model_cls: Any):
        mapper = sa_inspect(model_cls)

        async def find(parent: Any, query: Any, context: Any, info: Any) -> List[Dict[str, Any]]:
            query = query or {}
            session = self._session(context, info)
            stmt = select(model_cls)
            where = build_where(model_cls, query.get('filters'))
            if where is not None:
                stmt = stmt.where(where)
            state = query.get('publicationState')
            state = getattr(state, 'value', state)
            if (state or 'live') == 'live' and PUBLISHED_AT_COLUMN in mapper.columns:
                stmt = stmt.where(getattr(model_cls, PUBLISHED_AT_COLUMN).is_not(None))
            locale = query.get('locale')
            if locale and LOCALE_COLUMN in mapper.columns:
                stmt = stmt.where(getattr(model_cls, LOCALE_COLUMN) == locale)
            stmt = stmt.order_by(*self._order_by(model_cls, query.get('sort')))
            _logger.debug("find %s: %s", model_cls.__name__, stmt)
            result = await session.execute(stmt)
            return [to_record(obj) for obj in result.scalars().all()]

        return find

    def _make_find_one(self, model_cls: Any):
        async def find_one(parent: Any, query: Any, context: Any, info: Any) -> Optional[Dict[str, Any]]:
            session = self._session(context, info)
            stmt = select(model_cls)
            where = build_where(model_cls, query)
            if where is not None:
                stmt = stmt.where(where)
            stmt = stmt.order_by(*self._order_by(model_cls, None)).limit(1)
            _logger.debug("findOne %s: %s", model_cls.__name__, stmt)
            result = await session.execute(stmt)
            return to_record(result.scalars().first())

        return find_one
