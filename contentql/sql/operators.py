from __future__ import annotations

import uuid as _py_uuid
from datetime import date, datetime, time
from typing import Any, Callable, Dict

from sqlalchemy import func
from sqlalchemy.sql.sqltypes import Boolean, Date, DateTime, Float, Integer, Numeric, Time, Uuid

from ..errors import MalformedFiltersError

__all__ = ['OPERATOR_REGISTRY', 'register_operator', 'coerce_where_value']


def _as_list(v: Any) -> list:
    return list(v) if isinstance(v, (list, tuple, set)) else [v]


def _between(col, v):
    if not isinstance(v, (list, tuple)) or len(v) != 2:
        raise MalformedFiltersError(f"$between expects exactly two bounds, got {v!r}")
    return col.between(v[0], v[1])


def _eq(col, v):
    return col.is_(None) if v is None else col == v


def _ne(col, v):
    return col.is_not(None) if v is None else col != v


# Backend operator registry (extensible), keyed by translated operator name
OPERATOR_REGISTRY: Dict[str, Callable[[Any, Any], Any]] = {
    '$eq': _eq,
    '$eqi': lambda col, v: func.lower(col) == func.lower(v),
    '$ne': _ne,
    '$nei': lambda col, v: func.lower(col) != func.lower(v),
    '$startsWith': lambda col, v: col.startswith(v, autoescape=True),
    '$endsWith': lambda col, v: col.endswith(v, autoescape=True),
    '$contains': lambda col, v: col.contains(v, autoescape=True),
    '$notContains': lambda col, v: ~col.contains(v, autoescape=True),
    '$containsi': lambda col, v: col.icontains(v, autoescape=True),
    '$notContainsi': lambda col, v: ~col.icontains(v, autoescape=True),
    '$gt': lambda col, v: col > v,
    '$gte': lambda col, v: col >= v,
    '$lt': lambda col, v: col < v,
    '$lte': lambda col, v: col <= v,
    '$null': lambda col, v: col.is_(None) if v else col.is_not(None),
    '$notNull': lambda col, v: col.is_not(None) if v else col.is_(None),
    '$in': lambda col, v: col.in_(_as_list(v)),
    '$notIn': lambda col, v: ~col.in_(_as_list(v)),
    '$between': _between,
}

# Operands of these operators are flags, not column values
FLAG_OPERATORS = frozenset({'$null', '$notNull'})


def register_operator(name: str, fn: Callable[[Any, Any], Any]):  # pragma: no cover - simple
    OPERATOR_REGISTRY[name] = fn


def coerce_where_value(column_type: Any, val: Any) -> Any:
    """Coerce GraphQL input values (IDs arrive as strings) to the column's Python type.

    Values that do not parse are returned unchanged and left to the database.
    """
    if isinstance(val, (list, tuple)):
        return [coerce_where_value(column_type, v) for v in val]
    if val is None or column_type is None or not isinstance(val, str):
        return val
    try:
        if isinstance(column_type, Boolean):
            lv = val.strip().lower()
            if lv in ('true', 't', '1', 'yes', 'y'):
                return True
            if lv in ('false', 'f', '0', 'no', 'n'):
                return False
            return val
        if isinstance(column_type, Integer):
            return int(val)
        if isinstance(column_type, (Float, Numeric)):
            return float(val)
        if isinstance(column_type, DateTime):
            dv = datetime.fromisoformat(val.replace('Z', '+00:00'))
            if not getattr(column_type, 'timezone', False) and dv.tzinfo is not None:
                dv = dv.replace(tzinfo=None)
            return dv
        if isinstance(column_type, Date):
            return date.fromisoformat(val)
        if isinstance(column_type, Time):
            return time.fromisoformat(val)
        if isinstance(column_type, Uuid):
            return _py_uuid.UUID(val)
    except ValueError:
        return val
    return val
