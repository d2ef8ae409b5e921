from .backend import SQLAlchemyBackend, build_where, parse_sort, to_record
from .models import content_type_from_model, storage_type, uid_for
from .operators import OPERATOR_REGISTRY, coerce_where_value, register_operator

__all__ = [
    'SQLAlchemyBackend', 'build_where', 'parse_sort', 'to_record',
    'content_type_from_model', 'storage_type', 'uid_for',
    'OPERATOR_REGISTRY', 'coerce_where_value', 'register_operator',
]
