from datetime import date, datetime, time

import pytest
from sqlalchemy import BigInteger, Boolean, Date, DateTime, Enum, Float, Integer, JSON, Numeric, String, Text, Time
from sqlalchemy.dialects import sqlite

from contentql.errors import MalformedFiltersError, MalformedQueryError
from contentql.sql.backend import build_where, parse_sort
from contentql.sql.models import content_type_from_model, storage_type, uid_for
from contentql.sql.operators import coerce_where_value
from tests.models import Article, Author


def _sql(clause):
    return str(clause.compile(dialect=sqlite.dialect(), compile_kwargs={'literal_binds': True}))


def test_uid_for_model():
    assert uid_for(Article) == 'api::article.article'


def test_content_type_from_model():
    ct = content_type_from_model(Article)
    assert ct.uid == 'api::article.article'
    assert ct.model_name == 'article'
    assert 'id' not in ct.attributes
    assert ct.attributes['slug'].unique
    assert not ct.attributes['title'].unique
    assert ct.attributes['body'].type == 'text'
    assert ct.attributes['views'].type == 'integer'
    assert ct.attributes['rating'].type == 'float'
    assert ct.attributes['published_at'].type == 'datetime'
    assert ct.attributes['author'].is_relation
    assert ct.attributes['author'].target == 'api::author.author'
    assert ct.draft_and_publish


def test_content_type_from_model_options():
    ct = content_type_from_model(Author, uid='api::writer.writer', unique=['name'], exclude=['created_at'])
    assert ct.uid == 'api::writer.writer'
    assert ct.attributes['email'].unique
    assert ct.attributes['name'].unique
    assert 'created_at' not in ct.attributes
    assert ct.attributes['articles'].target == 'api::article.article'
    assert not ct.draft_and_publish


@pytest.mark.parametrize("sqlatype,expected", [
    (String(20), 'string'),
    (Text(), 'text'),
    (Enum('a', 'b', name='ab'), 'enumeration'),
    (Integer(), 'integer'),
    (BigInteger(), 'biginteger'),
    (Boolean(), 'boolean'),
    (Float(), 'float'),
    (Numeric(10, 2), 'decimal'),
    (DateTime(), 'datetime'),
    (Date(), 'date'),
    (Time(), 'time'),
    (JSON(), 'json'),
])
def test_storage_type(sqlatype, expected):
    assert storage_type(sqlatype) == expected


def test_parse_sort():
    assert parse_sort(None) == []
    assert parse_sort(['title:desc', 'id']) == [('title', 'desc'), ('id', 'asc')]
    assert parse_sort('views:DESC, slug,') == [('views', 'desc'), ('slug', 'asc')]
    with pytest.raises(MalformedQueryError):
        parse_sort(['title:up'])


def test_build_where_columns_and_logic():
    assert build_where(Article, None) is None
    assert build_where(Article, {}) is None
    sql = _sql(build_where(Article, {'$or': [{'slug': {'$eq': 'a'}}, {'views': {'$gt': '3'}}]}))
    assert "articles.slug = 'a'" in sql
    assert 'articles.views > 3' in sql
    sql = _sql(build_where(Article, {'$not': {'published_at': {'$null': True}}}))
    assert sql == 'articles.published_at IS NOT NULL'


def test_build_where_bare_value_is_equality():
    sql = _sql(build_where(Article, {'id': '4'}))
    assert sql == 'articles.id = 4'


def test_build_where_relation_uses_exists():
    sql = _sql(build_where(Article, {'author': {'email': {'$eq': 'x@y.z'}}}))
    assert 'EXISTS' in sql.upper()
    assert "authors.email = 'x@y.z'" in sql


def test_build_where_rejects_unknown_keys():
    with pytest.raises(MalformedFiltersError):
        build_where(Article, {'nope': {'$eq': 1}})
    with pytest.raises(MalformedFiltersError):
        build_where(Article, {'views': {'$near': 1}})
    with pytest.raises(MalformedFiltersError):
        build_where(Article, {'views': {'$between': [1]}})


def test_coerce_where_value():
    assert coerce_where_value(Integer(), '5') == 5
    assert coerce_where_value(Integer(), ['1', '2']) == [1, 2]
    assert coerce_where_value(Float(), '2.5') == 2.5
    assert coerce_where_value(Boolean(), 'yes') is True
    assert coerce_where_value(Boolean(), 'maybe') == 'maybe'
    assert coerce_where_value(DateTime(), '2024-01-01T12:00:00Z') == datetime(2024, 1, 1, 12, 0, 0)
    assert coerce_where_value(Date(), '2024-01-02') == date(2024, 1, 2)
    assert coerce_where_value(Time(), '08:30') == time(8, 30)
    assert coerce_where_value(Integer(), 'abc') == 'abc'
    assert coerce_where_value(String(), 7) == 7
