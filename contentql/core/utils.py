from __future__ import annotations

from dataclasses import fields as _dc_fields, is_dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping

import strawberry

__all__ = [
    'UNSET',
    'input_to_dict',
    'read_key',
    'make_key_resolver',
    'get_db_session',
]

UNSET = getattr(strawberry, 'UNSET')


def _strawberry_field_names(obj: Any) -> Dict[str, str]:
    """python_name -> GraphQL name for the fields of a Strawberry input instance."""
    definition = getattr(type(obj), '__strawberry_definition__', None) or getattr(type(obj), '_type_definition', None)
    if definition is None:
        return {}
    out: Dict[str, str] = {}
    for f in getattr(definition, 'fields', []) or []:
        python_name = getattr(f, 'python_name', None)
        if python_name:
            out[python_name] = getattr(f, 'graphql_name', None) or python_name
    return out


def input_to_dict(obj: Any) -> Any:
    """Convert a Strawberry input instance (or nested list/dict) to plain Python dicts/lists.

    Keys use GraphQL field names (``in_`` becomes ``in``), enums collapse to
    their values and omitted (UNSET) fields are dropped. Explicit nulls are kept.
    """
    if obj is None or obj is UNSET:
        return None
    if isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [input_to_dict(x) for x in obj]
    if isinstance(obj, Mapping):
        return {k: input_to_dict(v) for k, v in obj.items() if v is not UNSET}
    if is_dataclass(obj) and not isinstance(obj, type):
        names = _strawberry_field_names(obj)
        out: Dict[str, Any] = {}
        for f in _dc_fields(obj):
            v = getattr(obj, f.name, UNSET)
            if v is UNSET:
                continue
            out[names.get(f.name, f.name)] = input_to_dict(v)
        return out
    return obj


def read_key(source: Any, key: str) -> Any:
    """Read ``key`` from a mapping or attribute of an object; None when missing."""
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def make_key_resolver(key: str) -> Callable[..., Any]:
    """Build a Strawberry resolver reading ``key`` from the parent value.

    Envelopes and backend records are plain dicts, which Strawberry's default
    attribute lookup cannot read.
    """
    def _resolver(self):  # noqa: D401
        return read_key(self, key)

    _resolver.__name__ = f"resolve_{key}"
    return _resolver


def get_db_session(info_or_ctx: Any) -> Any | None:
    """Best-effort extraction of an AsyncSession-like object from context.

    Accepts either a Strawberry ``Info`` or a plain context object/dict. Tries
    common keys/attributes in order: ``db_session``, ``db``, ``session``,
    ``async_session``.

    Returns:
        The session object if found; otherwise ``None``.
    """
    if info_or_ctx is None:
        return None
    ctx = getattr(info_or_ctx, 'context', info_or_ctx)
    if ctx is None:
        return None
    candidates = ('db_session', 'db', 'session', 'async_session')
    if isinstance(ctx, Mapping):
        for k in candidates:
            v = ctx.get(k)
            if v is not None:
                return v
        return None
    for k in candidates:
        v = getattr(ctx, k, None)
        if v is not None:
            return v
    return None
