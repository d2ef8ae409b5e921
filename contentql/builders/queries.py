"""Find-one / find-many query fields for collection types.

Building is split in two phases. ``plan_find_one`` and ``plan_find`` are pure
and return a :class:`Skip` or :class:`Register` decision per field;
registration against a GraphQL host happens afterwards
(see :meth:`contentql.registry.ContentSchema.to_strawberry`).
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from ..actions import ActionRegistry, resolver_reference
from ..core.attributes import classify_unique_filters
from ..core.fields import (
    LOCALE_ARG,
    PUBLICATION_STATE_ARG,
    SORT_ARG,
    ArgType,
    FieldDecision,
    QueryFieldSpec,
    Register,
    SchemaExtension,
    Skip,
    collection_response,
    single_response,
)
from ..core.filters import FilterTranslator
from ..naming import EntityNaming, default_naming, to_plural, to_singular
from ..scalars import ScalarMapper, default_scalar_mapper

__all__ = ['CollectionTypeQueryBuilder', 'build_collection_type_queries']

_logger = logging.getLogger("contentql.builders")

FilterTranslateFn = Callable[[Any, Any], Any]


class CollectionTypeQueryBuilder:
    """Plans the query fields of collection types against a set of backend actions."""

    def __init__(
        self,
        actions: ActionRegistry,
        *,
        naming: Optional[EntityNaming] = None,
        mapper: Optional[ScalarMapper] = None,
        translate_filters: Optional[FilterTranslateFn] = None,
    ):
        self.actions = actions
        self.naming = naming or default_naming
        self.mapper = mapper or default_scalar_mapper
        self.translate_filters: FilterTranslateFn = translate_filters or FilterTranslator(mapper=self.mapper)

    # ---------- find one ----------
    def find_one_args(self, content_type: Any) -> Dict[str, ArgType]:
        args: Dict[str, ArgType] = {'id': self.naming.scalar_filter_input_type_name('ID')}
        unique = classify_unique_filters(content_type.attributes, self.mapper, self.naming)
        for name, filter_type in unique.items():
            args.setdefault(name, filter_type)
        return args

    def plan_find_one(self, content_type: Any) -> FieldDecision:
        field_name = self.naming.singular_entity_name(content_type)
        reference = resolver_reference(content_type.uid, 'findOne')
        resolver_options = {'resolver': reference}
        if not self.actions.action_exists(resolver_options):
            return Skip(field_name, f"action {reference} does not exist")

        resolver = self.actions.build_resolver(to_singular(content_type.model_name), resolver_options)
        translate = self.translate_filters

        async def resolve(parent: Any, args: Dict[str, Any], context: Any, info: Any) -> Dict[str, Any]:
            query = translate(args, content_type)
            res = await resolver(parent, query, context, info)
            return single_response(res)

        return Register(QueryFieldSpec(
            name=field_name,
            return_type_name=self.naming.response_type_name(content_type),
            args=self.find_one_args(content_type),
            resolve=resolve,
            description=getattr(content_type, 'description', None),
        ))

    def try_build_find_one_field(self, content_type: Any) -> Optional[QueryFieldSpec]:
        decision = self.plan_find_one(content_type)
        return decision.spec if isinstance(decision, Register) else None

    # ---------- find many ----------
    def find_args(self, content_type: Any) -> Dict[str, ArgType]:
        return {
            'publicationState': PUBLICATION_STATE_ARG,
            'locale': LOCALE_ARG,
            'sort': SORT_ARG,
            'filters': self.naming.filters_input_type_name(content_type),
        }

    def plan_find(self, content_type: Any) -> FieldDecision:
        field_name = self.naming.plural_entity_name(content_type)
        reference = resolver_reference(content_type.uid, 'find')
        resolver_options = {'resolver': reference}
        if not self.actions.action_exists(resolver_options):
            return Skip(field_name, f"action {reference} does not exist")

        resolver = self.actions.build_resolver(to_plural(content_type.model_name), resolver_options)
        translate = self.translate_filters

        async def resolve(parent: Any, args: Dict[str, Any], context: Any, info: Any) -> Dict[str, Any]:
            query = dict(args)
            query['filters'] = translate(args.get('filters'), content_type)
            res = await resolver(parent, query, context, info)
            return collection_response(res)

        return Register(QueryFieldSpec(
            name=field_name,
            return_type_name=self.naming.response_collection_type_name(content_type),
            args=self.find_args(content_type),
            resolve=resolve,
            description=getattr(content_type, 'description', None),
        ))

    def try_build_find_field(self, content_type: Any) -> Optional[QueryFieldSpec]:
        decision = self.plan_find(content_type)
        return decision.spec if isinstance(decision, Register) else None

    # ---------- assembly ----------
    def build_collection_type_queries(self, content_type: Any) -> SchemaExtension:
        decisions = (self.plan_find_one(content_type), self.plan_find(content_type))
        for decision in decisions:
            if isinstance(decision, Skip):
                _logger.debug("skipping query field %s for %s: %s", decision.field_name, content_type.uid, decision.reason)
        return SchemaExtension(type_name='Query', decisions=decisions, content_type_uid=content_type.uid)


def build_collection_type_queries(content_type: Any, actions: ActionRegistry, **kwargs: Any) -> SchemaExtension:
    """Plan the collection type queries of one content type with a throwaway builder."""
    return CollectionTypeQueryBuilder(actions, **kwargs).build_collection_type_queries(content_type)
