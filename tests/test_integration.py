"""End-to-end queries against the SQLAlchemy backend over an in-memory database."""
import pytest

from tests.schema import schema


async def _execute(db_session, query, variables=None):
    res = await schema.execute(query, variable_values=variables, context_value={'db_session': db_session})
    return res


def _slugs(data, field='articles'):
    return [item['attributes']['slug'] for item in data[field]['data']]


@pytest.mark.asyncio
async def test_find_one_by_unique_attribute(db_session, populated_db):
    query = '''
    query {
      article(slug: {eq: "hello-world"}) {
        data { id attributes { title slug views } }
      }
    }
    '''
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    data = res.data['article']['data']
    assert data['id'] == '1'
    assert data['attributes'] == {'title': 'Hello World', 'slug': 'hello-world', 'views': 10}


@pytest.mark.asyncio
async def test_find_one_by_id(db_session, populated_db):
    query = 'query { author(id: {eq: "2"}) { data { id attributes { name email } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert res.data['author']['data'] == {
        'id': '2',
        'attributes': {'name': 'Bob Smith', 'email': 'bob@example.com'},
    }


@pytest.mark.asyncio
async def test_find_one_missing_record_still_wrapped(db_session, populated_db):
    query = 'query { article(slug: {eq: "nope"}) { data { id attributes { title } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert res.data['article'] == {'data': {'id': None, 'attributes': None}}


@pytest.mark.asyncio
async def test_find_one_with_variables(db_session, populated_db):
    query = '''
    query($email: StringFilterInput) {
      author(email: $email) { data { attributes { name } } }
    }
    '''
    res = await _execute(db_session, query, {'email': {'eqi': 'ALICE@example.com'}})
    assert res.errors is None, res.errors
    assert res.data['author']['data']['attributes']['name'] == 'Alice Johnson'


@pytest.mark.asyncio
async def test_find_defaults_to_live_entries(db_session, populated_db):
    query = 'query { articles { data { id attributes { slug } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert _slugs(res.data) == ['hello-world', 'graphql-filters', 'bonjour']
    assert [item['id'] for item in res.data['articles']['data']] == ['1', '2', '3']


@pytest.mark.asyncio
async def test_find_preview_includes_drafts(db_session, populated_db):
    query = 'query { articles(publicationState: PREVIEW) { data { attributes { slug } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert len(res.data['articles']['data']) == 4
    assert 'draft-notes' in _slugs(res.data)


@pytest.mark.asyncio
async def test_find_by_locale(db_session, populated_db):
    query = 'query { articles(locale: "fr") { data { attributes { slug locale } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert res.data['articles']['data'] == [{'attributes': {'slug': 'bonjour', 'locale': 'fr'}}]


@pytest.mark.asyncio
async def test_find_sorted(db_session, populated_db):
    query = 'query { articles(sort: ["views:desc"]) { data { attributes { slug views } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert [a['attributes']['views'] for a in res.data['articles']['data']] == [25, 10, 5]


@pytest.mark.asyncio
async def test_find_filters_case_insensitive_contains(db_session, populated_db):
    query = 'query { articles(filters: {title: {containsi: "graphql"}}) { data { attributes { slug } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert _slugs(res.data) == ['graphql-filters']


@pytest.mark.asyncio
async def test_find_filters_logical_or(db_session, populated_db):
    query = '''
    query {
      articles(filters: {or: [{slug: {eq: "bonjour"}}, {views: {gte: 20}}]}, sort: ["slug"]) {
        data { attributes { slug } }
      }
    }
    '''
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert _slugs(res.data) == ['bonjour', 'graphql-filters']


@pytest.mark.asyncio
async def test_find_filters_not_and_in(db_session, populated_db):
    query = '''
    query {
      articles(filters: {not: {slug: {in: ["hello-world", "bonjour"]}}}) {
        data { attributes { slug } }
      }
    }
    '''
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert _slugs(res.data) == ['graphql-filters']


@pytest.mark.asyncio
async def test_find_filters_through_relation(db_session, populated_db):
    query = '''
    query {
      articles(publicationState: PREVIEW, filters: {author: {email: {eq: "bob@example.com"}}}) {
        data { attributes { slug } }
      }
    }
    '''
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert _slugs(res.data) == ['bonjour', 'draft-notes']


@pytest.mark.asyncio
async def test_find_filters_to_many_relation(db_session, populated_db):
    query = '''
    query {
      authors(filters: {articles: {views: {gt: 20}}}) { data { attributes { name } } }
    }
    '''
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert [a['attributes']['name'] for a in res.data['authors']['data']] == ['Alice Johnson']


@pytest.mark.asyncio
async def test_find_filters_by_id(db_session, populated_db):
    query = 'query { articles(filters: {id: {in: ["1", "3"]}}) { data { id } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert [a['id'] for a in res.data['articles']['data']] == ['1', '3']


@pytest.mark.asyncio
async def test_find_meta_pagination_is_empty(db_session, populated_db):
    query = 'query { articles { meta { pagination { page pageSize pageCount total } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert res.data['articles']['meta'] == {
        'pagination': {'page': None, 'pageSize': None, 'pageCount': None, 'total': None},
    }


@pytest.mark.asyncio
async def test_find_no_matches(db_session, populated_db):
    query = 'query { articles(filters: {views: {gt: 1000}}) { data { id } meta { pagination { total } } } }'
    res = await _execute(db_session, query)
    assert res.errors is None, res.errors
    assert res.data['articles']['data'] == []


@pytest.mark.asyncio
async def test_unknown_sort_attribute_is_an_error(db_session, populated_db):
    query = 'query { articles(sort: ["nope:asc"]) { data { id } } }'
    res = await _execute(db_session, query)
    assert res.errors
    assert 'nope' in res.errors[0].message
    assert res.data is None or res.data['articles'] is None


@pytest.mark.asyncio
async def test_invalid_sort_direction_is_an_error(db_session, populated_db):
    query = 'query { articles(sort: ["views:sideways"]) { data { id } } }'
    res = await _execute(db_session, query)
    assert res.errors
    assert 'sideways' in res.errors[0].message


@pytest.mark.asyncio
async def test_missing_session_is_an_error(populated_db):
    res = await schema.execute('query { articles { data { id } } }', context_value={})
    assert res.errors
    assert 'db_session' in res.errors[0].message


@pytest.mark.asyncio
async def test_ping():
    res = await schema.execute('query { _ping }')
    assert res.errors is None
    assert res.data == {'_ping': 'pong'}
