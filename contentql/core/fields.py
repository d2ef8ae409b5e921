from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

import strawberry

__all__ = [
    'PublicationState',
    'ArgumentDef',
    'ArgType',
    'arg_type_name',
    'PUBLICATION_STATE_ARG',
    'SORT_ARG',
    'LOCALE_ARG',
    'QueryFieldSpec',
    'Skip',
    'Register',
    'FieldDecision',
    'SchemaExtension',
    'record_id',
    'entity_envelope',
    'single_response',
    'collection_response',
]

ResolveFn = Callable[[Any, Dict[str, Any], Any, Any], Awaitable[Any]]


class _PublicationStateEnum(Enum):
    LIVE = 'live'
    PREVIEW = 'preview'


PublicationState = strawberry.enum(_PublicationStateEnum, name="PublicationState")  # type: ignore


@dataclass(frozen=True)
class ArgumentDef:
    """A field argument: GraphQL type name plus optional default and description.

    ``type_name`` accepts ``[Inner]`` for lists and a trailing ``!`` for non-null.
    """

    type_name: str
    default: Any = None
    description: Optional[str] = None


ArgType = Union[str, ArgumentDef]

PUBLICATION_STATE_ARG = ArgumentDef(
    'PublicationState',
    default=PublicationState.LIVE,
    description="LIVE returns published entries only; PREVIEW also returns drafts.",
)
# TODO: replace with a Locale scalar once localized content types are modelled
LOCALE_ARG = ArgumentDef('String', description="Locale code to read entries in, e.g. \"en\".")
SORT_ARG = ArgumentDef(
    '[String!]',
    default=(),
    description="Sort specs as 'attribute' or 'attribute:asc|desc', e.g. [\"title:desc\", \"id\"].",
)


def arg_type_name(arg: ArgType) -> str:
    return arg.type_name if isinstance(arg, ArgumentDef) else str(arg)


@dataclass(frozen=True)
class QueryFieldSpec:
    """One query field to register on the root Query type.

    Equality ignores ``resolve`` so two builds over the same content types
    compare equal.
    """

    name: str
    return_type_name: str
    args: Dict[str, ArgType]
    resolve: ResolveFn = field(compare=False, repr=False)
    description: Optional[str] = None

    def shape(self) -> Tuple[str, str, Tuple[Tuple[str, str], ...]]:
        return (self.name, self.return_type_name, tuple((k, arg_type_name(v)) for k, v in self.args.items()))


@dataclass(frozen=True)
class Skip:
    field_name: str
    reason: str


@dataclass(frozen=True)
class Register:
    spec: QueryFieldSpec

    @property
    def field_name(self) -> str:
        return self.spec.name


FieldDecision = Union[Skip, Register]


@dataclass(frozen=True)
class SchemaExtension:
    """Planned additions to a root type (``Query`` for collection type queries)."""

    type_name: str
    decisions: Tuple[FieldDecision, ...] = ()
    content_type_uid: Optional[str] = None

    @property
    def fields(self) -> List[QueryFieldSpec]:
        return [d.spec for d in self.decisions if isinstance(d, Register)]

    @property
    def skipped(self) -> List[Skip]:
        return [d for d in self.decisions if isinstance(d, Skip)]

    def get_field(self, name: str) -> Optional[QueryFieldSpec]:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    def field_names(self) -> List[str]:
        return [spec.name for spec in self.fields]


def record_id(record: Any) -> Any:
    """Identifier of a backend record: mapping key ``id`` or attribute ``id``; None for empty results."""
    if not record:
        return None
    if isinstance(record, Mapping):
        return record.get('id')
    return getattr(record, 'id', None)


def entity_envelope(record: Any) -> Dict[str, Any]:
    return {'id': record_id(record), 'attributes': record}


def single_response(record: Any) -> Dict[str, Any]:
    return {'data': entity_envelope(record)}


def collection_response(records: Any) -> Dict[str, Any]:
    return {'data': [entity_envelope(r) for r in records], 'meta': {'pagination': {}}}
