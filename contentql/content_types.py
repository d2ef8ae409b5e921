"""Content type descriptors consumed by the query builders.

A content type is a schema-level description of an entity kind. Instances are
frozen: builders read them concurrently and never mutate them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

__all__ = ['AttributeDescriptor', 'ContentType', 'ContentTypeRegistry']


@dataclass(frozen=True)
class AttributeDescriptor:
    type: str
    unique: bool = False
    # uid of the related content type for relation attributes
    target: Optional[str] = None
    required: bool = False
    description: Optional[str] = None

    @classmethod
    def from_value(cls, raw: Any) -> 'AttributeDescriptor':
        """Accept an AttributeDescriptor, a bare type tag or a dict of options."""
        if isinstance(raw, AttributeDescriptor):
            return raw
        if isinstance(raw, str):
            return cls(type=raw)
        if isinstance(raw, Mapping):
            if 'type' not in raw:
                raise TypeError(f"Attribute definition requires a 'type': {dict(raw)!r}")
            return cls(
                type=str(raw['type']),
                unique=bool(raw.get('unique', False)),
                target=raw.get('target'),
                required=bool(raw.get('required', False)),
                description=raw.get('description'),
            )
        raise TypeError(f"Unsupported attribute definition: {raw!r}")

    @property
    def is_relation(self) -> bool:
        return self.type == 'relation'


@dataclass(frozen=True)
class ContentType:
    """Descriptor of a collection type.

    ``attributes`` keeps declaration order; it is exposed read-only so the
    descriptor can be shared across schema builds.
    """

    uid: str
    model_name: str
    attributes: Mapping[str, AttributeDescriptor] = field(default_factory=dict)
    singular_name: Optional[str] = None
    plural_name: Optional[str] = None
    draft_and_publish: bool = False
    description: Optional[str] = None

    def __post_init__(self):
        attrs = {str(k): AttributeDescriptor.from_value(v) for k, v in dict(self.attributes or {}).items()}
        object.__setattr__(self, 'attributes', MappingProxyType(attrs))

    def attribute(self, name: str) -> Optional[AttributeDescriptor]:
        return self.attributes.get(name)

    def has_attribute(self, name: str) -> bool:
        return name in self.attributes


class ContentTypeRegistry:
    """Ordered uid -> ContentType lookup used by schema assembly and filter translation."""

    def __init__(self, content_types: Optional[Iterable[ContentType]] = None):
        self._by_uid: Dict[str, ContentType] = {}
        for ct in content_types or ():
            self.add(ct)

    def add(self, content_type: ContentType) -> ContentType:
        if content_type.uid in self._by_uid:
            raise ValueError(f"Content type already registered: {content_type.uid}")
        self._by_uid[content_type.uid] = content_type
        return content_type

    def replace(self, content_type: ContentType) -> ContentType:
        self._by_uid[content_type.uid] = content_type
        return content_type

    def get(self, uid: Optional[str]) -> Optional[ContentType]:
        if uid is None:
            return None
        return self._by_uid.get(uid)

    def __contains__(self, uid: object) -> bool:
        return uid in self._by_uid

    def __iter__(self) -> Iterator[ContentType]:
        return iter(list(self._by_uid.values()))

    def __len__(self) -> int:
        return len(self._by_uid)
