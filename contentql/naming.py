"""Naming utilities for contentql.

Provides the case conversions and English inflection used to derive query
field names and GraphQL type names from a content type.
"""
from __future__ import annotations

import re
from typing import Any

import inflection

__all__ = [
    "camel_to_snake",
    "snake_to_camel",
    "to_singular",
    "to_plural",
    "EntityNaming",
    "default_naming",
]

_WORD_SPLIT = re.compile(r"[\s_\-.]+")


def camel_to_snake(name: str) -> str:
    """Convert camelCase or PascalCase identifier to snake_case.

    Idempotent for already snake_case input. Handles sequences of capitals.
    """
    if not isinstance(name, str) or not name:
        return name  # type: ignore
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return s2.lower()


def snake_to_camel(name: str, upper_first: bool = False) -> str:
    """Convert snake_case (or kebab-case) identifier to camelCase or PascalCase.

    upper_first=False returns lowerCamelCase (default), True returns UpperCamelCase.
    Idempotent for already camelCase strings without separators.
    """
    if not isinstance(name, str) or not name:
        return name  # type: ignore
    parts = [p for p in _WORD_SPLIT.split(name) if p]
    if not parts:
        return ''
    if len(parts) == 1:
        word = parts[0]
        return (word[0].upper() if upper_first else word[0].lower()) + word[1:]
    first = parts[0].capitalize() if upper_first else parts[0].lower()
    rest = ''.join(p[0].upper() + p[1:] for p in parts[1:])
    return first + rest


def to_plural(word: str) -> str:
    if not word:
        return word
    return inflection.pluralize(word)


def to_singular(word: str) -> str:
    """Singular form of ``word``; singular and uncountable words (``status``, ``news``) are returned unchanged."""
    if not word:
        return word
    return inflection.singularize(word)


class EntityNaming:
    """Derives query field names and response type names from a content type.

    Subclass and pass an instance to the query builder or ``ContentSchema`` to
    change the naming scheme.
    """

    def base_singular(self, content_type: Any) -> str:
        explicit = getattr(content_type, 'singular_name', None)
        if explicit:
            return str(explicit)
        return to_singular(str(getattr(content_type, 'model_name')))

    def base_plural(self, content_type: Any) -> str:
        explicit = getattr(content_type, 'plural_name', None)
        if explicit:
            return str(explicit)
        return to_plural(self.base_singular(content_type))

    def type_name(self, content_type: Any) -> str:
        return snake_to_camel(self.base_singular(content_type), upper_first=True)

    def singular_entity_name(self, content_type: Any) -> str:
        return snake_to_camel(self.base_singular(content_type))

    def plural_entity_name(self, content_type: Any) -> str:
        singular = self.singular_entity_name(content_type)
        plural = snake_to_camel(self.base_plural(content_type))
        # A plural equal to the singular would shadow the find-one field
        if plural == singular:
            plural = to_plural(singular)
        if plural == singular:
            plural = f"{singular}Collection"
        return plural

    def entity_type_name(self, content_type: Any) -> str:
        return f"{self.type_name(content_type)}Entity"

    def response_type_name(self, content_type: Any) -> str:
        return f"{self.entity_type_name(content_type)}Response"

    def response_collection_type_name(self, content_type: Any) -> str:
        return f"{self.entity_type_name(content_type)}ResponseCollection"

    def filters_input_type_name(self, content_type: Any) -> str:
        return f"{self.type_name(content_type)}FiltersInput"

    def scalar_filter_input_type_name(self, scalar_name: str) -> str:
        return f"{scalar_name}FilterInput"


default_naming = EntityNaming()
