from .queries import CollectionTypeQueryBuilder, build_collection_type_queries

__all__ = ['CollectionTypeQueryBuilder', 'build_collection_type_queries']
