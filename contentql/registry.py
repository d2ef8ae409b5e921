from __future__ import annotations

import dataclasses
import keyword
import logging
from typing import Any, Annotated, Callable, Dict, Iterable, List, Optional

import strawberry

from .actions import ActionRegistry
from .builders.queries import CollectionTypeQueryBuilder
from .content_types import ContentType, ContentTypeRegistry
from .core.attributes import scalar_filter_fields
from .core.fields import ArgumentDef, PublicationState, QueryFieldSpec, SchemaExtension, arg_type_name
from .core.filters import BOOLEAN_OPERATORS, GRAPHQL_OPERATORS, LIST_OPERATORS, SCALAR_OPERATORS, FilterTranslator
from .core.utils import UNSET, input_to_dict, make_key_resolver
from .errors import UnknownTypeError
from .naming import EntityNaming, default_naming
from .scalars import ScalarMapper, default_scalar_mapper

try:  # Provide StrawberryInfo for type annotations
    from strawberry.types import Info as StrawberryInfo  # type: ignore
except Exception:  # pragma: no cover
    from strawberry.types.info import Info as StrawberryInfo  # type: ignore
from strawberry.schema.config import StrawberryConfig

__all__ = ['ContentSchema']

_logger = logging.getLogger("contentql")

_PAGINATION_FIELDS = ('page', 'pageSize', 'pageCount', 'total')


def _python_name(graphql_name: str, taken: Iterable[str] = ()) -> Optional[str]:
    """Python attribute name for a GraphQL field name; None when the name is not valid GraphQL."""
    if not isinstance(graphql_name, str) or not graphql_name.isidentifier() or graphql_name.startswith('__'):
        return None
    name = graphql_name
    if keyword.iskeyword(name) or name in taken:
        name = name + '_'
        while name in taken:
            name = name + '_'
    return name


class _TypeBuild:
    """Strawberry types produced by a single ``to_strawberry`` call.

    Every build creates fresh classes so a rebuilt schema never shares
    mutable type objects with a schema still serving requests.
    """

    def __init__(self, schema: 'ContentSchema'):
        self.schema = schema
        self.naming = schema.naming
        self.mapper = schema.mapper
        self.types: Dict[str, Any] = {}
        # Generated types, passed to the schema so unreachable ones are kept
        self.generated: List[Any] = []
        for scalar in self.mapper.graphql_scalars():
            self.types[scalar] = self.mapper.python_type(scalar)
        self.types['PublicationState'] = PublicationState

    # ---------- type references ----------
    def lookup(self, type_name: str) -> Any:
        if type_name in self.types:
            return self.types[type_name]
        # Scalar filter inputs are built on first use
        for scalar in self.mapper.graphql_scalars():
            if self.naming.scalar_filter_input_type_name(scalar) == type_name:
                return self.scalar_filter_input(scalar)
        raise UnknownTypeError(type_name)

    def annotation_for(self, type_ref: str) -> Any:
        ref = type_ref.strip()
        non_null = ref.endswith('!')
        if non_null:
            ref = ref[:-1].strip()
        if ref.startswith('[') and ref.endswith(']'):
            inner: Any = List[self.annotation_for(ref[1:-1])]  # type: ignore[misc]
        else:
            inner = self.lookup(ref)
        return inner if non_null else Optional[inner]

    # ---------- filter inputs ----------
    def scalar_filter_input(self, scalar: str) -> Any:
        input_name = self.naming.scalar_filter_input_type_name(scalar)
        if input_name in self.types:
            return self.types[input_name]
        py_type = self.lookup(scalar)
        InPlain = type(input_name, (), {'__doc__': f'Comparison operators for {scalar} values.'})
        InPlain.__module__ = __name__
        self.types[input_name] = InPlain
        anns: Dict[str, Any] = {}
        taken: List[str] = []

        def _add(gql_name: str, annotation: Any) -> None:
            py_name = _python_name(gql_name, taken)
            taken.append(py_name)
            anns[py_name] = annotation
            if py_name != gql_name:
                setattr(InPlain, py_name, strawberry.field(name=gql_name, default=UNSET))
            else:
                setattr(InPlain, py_name, UNSET)

        _add('and', Optional[List[Optional[InPlain]]])  # type: ignore[valid-type]
        _add('or', Optional[List[Optional[InPlain]]])  # type: ignore[valid-type]
        _add('not', Optional[InPlain])  # type: ignore[valid-type]
        for op in SCALAR_OPERATORS:
            if op in BOOLEAN_OPERATORS:
                _add(op, Optional[bool])
            elif op in LIST_OPERATORS:
                _add(op, Optional[List[Optional[py_type]]])  # type: ignore[valid-type]
            else:
                _add(op, Optional[py_type])
        InPlain.__annotations__ = anns
        InType = strawberry.input(InPlain)  # type: ignore
        self.types[input_name] = InType
        self.generated.append(InType)
        return InType

    def filters_input(self, content_type: ContentType) -> Any:
        input_name = self.naming.filters_input_type_name(content_type)
        if input_name in self.types:
            return self.types[input_name]
        InPlain = type(input_name, (), {'__doc__': f'Filters for {content_type.uid} entries.'})
        InPlain.__module__ = __name__
        # Placeholder breaks cycles between related content types
        self.types[input_name] = InPlain
        anns: Dict[str, Any] = {}
        taken: List[str] = []

        def _add(gql_name: str, annotation: Any) -> None:
            py_name = _python_name(gql_name, taken)
            if py_name is None:
                _logger.warning("attribute %r of %s is not a valid GraphQL name; not filterable", gql_name, content_type.uid)
                return
            taken.append(py_name)
            anns[py_name] = annotation
            if py_name != gql_name:
                setattr(InPlain, py_name, strawberry.field(name=gql_name, default=UNSET))
            else:
                setattr(InPlain, py_name, UNSET)

        scalars = scalar_filter_fields(content_type.attributes, self.mapper)
        if 'id' not in content_type.attributes:
            _add('id', Optional[self.scalar_filter_input('ID')])
        for attr_name, attribute in content_type.attributes.items():
            if attr_name in GRAPHQL_OPERATORS:
                _logger.warning("attribute %r of %s shadows a filter operator; not filterable", attr_name, content_type.uid)
                continue
            if attr_name in scalars:
                _add(attr_name, Optional[self.scalar_filter_input(scalars[attr_name])])
            elif attribute.is_relation:
                target = self.schema.content_types.get(attribute.target)
                if target is None:
                    _logger.debug("relation %s.%s targets unregistered %r", content_type.uid, attr_name, attribute.target)
                    continue
                _add(attr_name, Optional[self.filters_input(target)])
        _add('and', Optional[List[Optional[InPlain]]])  # type: ignore[valid-type]
        _add('or', Optional[List[Optional[InPlain]]])  # type: ignore[valid-type]
        _add('not', Optional[InPlain])  # type: ignore[valid-type]
        InPlain.__annotations__ = anns
        InType = strawberry.input(InPlain)  # type: ignore
        self.types[input_name] = InType
        self.generated.append(InType)
        return InType

    # ---------- output types ----------
    def _object_type(self, type_name: str, fields: Dict[str, Any], description: Optional[str] = None) -> Any:
        """Build an output type whose fields read dict keys (or attributes) of the parent value."""
        Plain = type(type_name, (), {'__doc__': description or None})
        Plain.__module__ = __name__
        anns: Dict[str, Any] = {}
        taken: List[str] = []
        for gql_name, annotation in fields.items():
            py_name = _python_name(gql_name, taken)
            if py_name is None:
                continue
            taken.append(py_name)
            anns[py_name] = annotation
            setattr(Plain, py_name, strawberry.field(resolver=make_key_resolver(gql_name), name=gql_name))
        Plain.__annotations__ = anns
        if description:
            StType = strawberry.type(Plain, description=description)  # type: ignore
        else:
            StType = strawberry.type(Plain)  # type: ignore
        self.types[type_name] = StType
        self.generated.append(StType)
        return StType

    def pagination_types(self) -> Any:
        if 'ResponseCollectionMeta' in self.types:
            return self.types['ResponseCollectionMeta']
        pagination = self._object_type('Pagination', {f: Optional[int] for f in _PAGINATION_FIELDS})
        return self._object_type('ResponseCollectionMeta', {'pagination': Optional[pagination]})

    def entity_types(self, content_type: ContentType) -> None:
        type_name = self.naming.type_name(content_type)
        if type_name in self.types:
            return
        fields: Dict[str, Any] = {}
        for attr_name, scalar in scalar_filter_fields(content_type.attributes, self.mapper).items():
            fields[attr_name] = Optional[self.lookup(scalar)]
        if not fields:
            # GraphQL object types need at least one field
            fields['id'] = Optional[strawberry.ID]
        entity_attrs = self._object_type(type_name, fields, content_type.description)
        entity = self._object_type(
            self.naming.entity_type_name(content_type),
            {'id': Optional[strawberry.ID], 'attributes': Optional[entity_attrs]},
        )
        self._object_type(self.naming.response_type_name(content_type), {'data': Optional[entity]})
        meta = self.pagination_types()
        self._object_type(
            self.naming.response_collection_type_name(content_type),
            {'data': List[entity], 'meta': meta},
        )

    # ---------- root query ----------
    def query_resolver(self, spec: QueryFieldSpec, index: int) -> Callable[..., Any]:
        """Generate a resolver whose signature carries the field's arguments.

        Strawberry reads arguments from the resolver signature, so the function
        is generated with one parameter per argument. GraphQL names are bound
        through ``strawberry.argument(name=...)``.
        """
        params: List[str] = []
        body: List[str] = []
        defaults: Dict[str, Any] = {}
        ann: Dict[str, Any] = {'info': StrawberryInfo}
        for i, (arg_name, arg) in enumerate(spec.args.items()):
            pname = f"arg{i}"
            description = arg.description if isinstance(arg, ArgumentDef) else None
            default = arg.default if isinstance(arg, ArgumentDef) else None
            if default is None:
                default = UNSET
            elif isinstance(default, tuple):
                default = list(default)
            defaults[pname] = default
            annotation = self.annotation_for(arg_type_name(arg))
            ann[pname] = Annotated[annotation, strawberry.argument(name=arg_name, description=description)]
            params.append(f"{pname}=_defaults[{pname!r}]")
            body.append(f"    if {pname} is not _UNSET:\n        _args[{arg_name!r}] = _to_dict({pname})\n")
        func_name = f"_query_{index}"
        src = f"async def {func_name}(self, info{''.join(', ' + p for p in params)}):\n"
        src += "    _args = {}\n"
        src += ''.join(body)
        src += "    return await _resolve(self, _args, info.context, info)\n"
        ns: Dict[str, Any] = {
            '_defaults': defaults,
            '_UNSET': UNSET,
            '_to_dict': input_to_dict,
            '_resolve': spec.resolve,
        }
        exec(src, ns)
        generated_fn = ns[func_name]
        generated_fn.__module__ = __name__
        generated_fn.__annotations__ = ann
        return generated_fn

    def query_type(self, extensions: Iterable[SchemaExtension]) -> Any:
        QueryPlain = type('Query', (), {'__doc__': 'Auto-generated root query.'})
        QueryPlain.__module__ = __name__
        query_annotations: Dict[str, Any] = {}
        index = 0
        seen: Dict[str, Optional[str]] = {}
        for extension in extensions:
            if extension.type_name != 'Query':
                continue
            for spec in extension.fields:
                if spec.name in seen:
                    raise ValueError(
                        f"Query field {spec.name!r} of {extension.content_type_uid} collides with {seen[spec.name]}"
                    )
                seen[spec.name] = extension.content_type_uid
                py_name = f"q{index}"
                query_annotations[py_name] = Optional[self.lookup(spec.return_type_name)]
                resolver = self.query_resolver(spec, index)
                if spec.description:
                    setattr(QueryPlain, py_name, strawberry.field(resolver=resolver, name=spec.name, description=str(spec.description)))
                else:
                    setattr(QueryPlain, py_name, strawberry.field(resolver=resolver, name=spec.name))
                index += 1

        async def _ping() -> str:  # noqa: D401
            return 'pong'
        query_annotations['_ping'] = str
        setattr(QueryPlain, '_ping', strawberry.field(resolver=_ping, name='_ping'))
        QueryPlain.__annotations__ = query_annotations
        return strawberry.type(QueryPlain)  # type: ignore


class ContentSchema:
    """Registry of content types that assembles a Strawberry schema.

    Usage::

        actions = ActionRegistry()
        schema = ContentSchema(actions)
        schema.register(ContentType(uid='api::article.article', model_name='article', attributes={...}))
        strawberry_schema = schema.to_strawberry()
    """

    def __init__(
        self,
        actions: Optional[ActionRegistry] = None,
        *,
        naming: Optional[EntityNaming] = None,
        mapper: Optional[ScalarMapper] = None,
        content_types: Optional[Iterable[ContentType]] = None,
    ):
        self.actions = actions if actions is not None else ActionRegistry()
        self.naming = naming or default_naming
        self.mapper = mapper or default_scalar_mapper
        self.content_types = ContentTypeRegistry(content_types)
        self.translator = FilterTranslator(self.content_types.get, mapper=self.mapper)

    def register(self, content_type: ContentType) -> ContentType:
        return self.content_types.add(content_type)

    def replace(self, content_type: ContentType) -> ContentType:
        """Replace a content type; takes effect on the next ``to_strawberry`` call."""
        return self.content_types.replace(content_type)

    def content_type(self, uid: str) -> Optional[ContentType]:
        return self.content_types.get(uid)

    def builder(self) -> CollectionTypeQueryBuilder:
        return CollectionTypeQueryBuilder(
            self.actions,
            naming=self.naming,
            mapper=self.mapper,
            translate_filters=self.translator,
        )

    def plan(self) -> List[SchemaExtension]:
        """Decide, per content type, which query fields to register. Pure; no Strawberry types are built."""
        builder = self.builder()
        return [builder.build_collection_type_queries(ct) for ct in self.content_types]

    def to_strawberry(self, *, strawberry_config: Optional[StrawberryConfig] = None) -> strawberry.Schema:
        extensions = self.plan()
        build = _TypeBuild(self)
        for ct in self.content_types:
            build.entity_types(ct)
            build.filters_input(ct)
        Query = build.query_type(extensions)
        if strawberry_config is None:
            strawberry_config = StrawberryConfig(auto_camel_case=False)
        # Caller-provided scalar definitions override the mapper's
        scalar_map = {**self.mapper.scalar_definitions, **strawberry_config.scalar_map}
        strawberry_config = dataclasses.replace(strawberry_config, scalar_map=scalar_map)
        registered = sum(len(ext.fields) for ext in extensions)
        _logger.info("built schema: %d content types, %d query fields", len(self.content_types), registered)
        return strawberry.Schema(query=Query, types=build.generated, config=strawberry_config)
