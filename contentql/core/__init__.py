# Core building blocks shared by the query builders and the schema registry.
from .attributes import classify_unique_filters, scalar_filter_fields
from .fields import (
    ArgumentDef, PublicationState, QueryFieldSpec, Register, SchemaExtension, Skip,
    collection_response, entity_envelope, single_response,
)
from .filters import FilterTranslator, graphql_filters_to_query
from .utils import get_db_session, input_to_dict

__all__ = [
    'classify_unique_filters', 'scalar_filter_fields',
    'ArgumentDef', 'PublicationState', 'QueryFieldSpec', 'Register', 'SchemaExtension', 'Skip',
    'collection_response', 'entity_envelope', 'single_response',
    'FilterTranslator', 'graphql_filters_to_query',
    'get_db_session', 'input_to_dict',
]
