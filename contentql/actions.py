"""Backend action registry.

Actions are addressed by resolver references of the form ``<uid>.<action>``
(for example ``api::article.article.findOne``). The registry answers the
availability check used while planning query fields and builds the async
resolvers the fields delegate to.
"""
from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Iterator, Mapping, Optional, Union

from .errors import ActionNotFoundError

__all__ = ['Action', 'Resolver', 'ActionRegistry', 'resolver_reference']

_logger = logging.getLogger("contentql.actions")

Action = Callable[..., Union[Any, Awaitable[Any]]]
Resolver = Callable[[Any, Any, Any, Any], Awaitable[Any]]


def resolver_reference(uid: str, action: str) -> str:
    return f"{uid}.{action}"


def _reference_of(options: Union[str, Mapping[str, Any]]) -> str:
    if isinstance(options, str):
        return options
    ref = options.get('resolver') if isinstance(options, Mapping) else None
    if not isinstance(ref, str) or not ref:
        raise TypeError(f"Resolver options must carry a 'resolver' reference: {options!r}")
    return ref


class ActionRegistry:
    """Maps resolver references to backend actions.

    An action is called as ``action(parent, query, context, info)`` and may be
    sync or async.
    """

    def __init__(self):
        self._actions: Dict[str, Action] = {}

    def register(self, reference: str, fn: Optional[Action] = None):
        """Register ``fn`` under ``reference``; usable as a decorator when fn is omitted."""
        if fn is None:
            def _deco(f: Action) -> Action:
                self.register(reference, f)
                return f
            return _deco
        if not callable(fn):
            raise TypeError(f"Action for {reference!r} must be callable")
        if reference in self._actions:
            _logger.debug("replacing backend action %s", reference)
        self._actions[reference] = fn
        return fn

    def unregister(self, reference: str) -> None:
        self._actions.pop(reference, None)

    def get(self, reference: str) -> Optional[Action]:
        return self._actions.get(reference)

    def action_exists(self, options: Union[str, Mapping[str, Any]]) -> bool:
        return _reference_of(options) in self._actions

    def build_resolver(self, model_name: str, options: Union[str, Mapping[str, Any]]) -> Resolver:
        """Return an async ``(parent, query, context, info)`` resolver for a registered action.

        The action is looked up at call time so re-registering an action takes
        effect without rebuilding the schema. Errors raised by the action are
        not caught.
        """
        reference = _reference_of(options)
        if reference not in self._actions:
            raise ActionNotFoundError(reference)
        registry = self

        async def resolver(parent: Any, query: Any, context: Any, info: Any) -> Any:
            fn = registry._actions.get(reference)
            if fn is None:
                raise ActionNotFoundError(reference)
            _logger.debug("resolving %s via %s", model_name, reference)
            result = fn(parent, query, context, info)
            if inspect.isawaitable(result):
                result = await result
            return result

        resolver.__name__ = f"resolve_{model_name}"
        resolver.__qualname__ = resolver.__name__
        return resolver

    def __contains__(self, reference: object) -> bool:
        return reference in self._actions

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._actions.keys()))
