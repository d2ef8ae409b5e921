from contentql.content_types import AttributeDescriptor, ContentType
from contentql.core.attributes import classify_unique_filters, scalar_filter_fields
from contentql.scalars import ScalarMapper


def _attrs(**kw):
    return ContentType(uid="api::x.x", model_name="x", attributes=kw).attributes


def test_only_unique_scalars_are_kept():
    attrs = _attrs(
        title={'type': 'string'},
        slug={'type': 'uid', 'unique': True},
        code={'type': 'integer', 'unique': True},
        author={'type': 'relation', 'target': 'api::author.author', 'unique': True},
        cover={'type': 'media', 'unique': True},
    )
    assert classify_unique_filters(attrs) == {
        'slug': 'StringFilterInput',
        'code': 'IntFilterInput',
    }


def test_declaration_order_is_preserved():
    attrs = _attrs(
        zeta={'type': 'string', 'unique': True},
        alpha={'type': 'biginteger', 'unique': True},
        mid={'type': 'datetime', 'unique': True},
    )
    assert list(classify_unique_filters(attrs).items()) == [
        ('zeta', 'StringFilterInput'),
        ('alpha', 'LongFilterInput'),
        ('mid', 'DateTimeFilterInput'),
    ]


def test_scalar_without_mapping_is_silently_excluded():
    mapper = ScalarMapper(scalar_map={'string': 'String'}, scalar_types={'string', 'point'})
    attrs = _attrs(
        name={'type': 'string', 'unique': True},
        location={'type': 'point', 'unique': True},
    )
    assert mapper.is_scalar(attrs['location'])
    assert classify_unique_filters(attrs, mapper) == {'name': 'StringFilterInput'}


def test_injected_mapping_is_used():
    mapper = ScalarMapper(scalar_map={'string': 'Text'}, python_types={'Text': str})
    attrs = _attrs(name={'type': 'string', 'unique': True})
    assert classify_unique_filters(attrs, mapper) == {'name': 'TextFilterInput'}


def test_classification_is_pure():
    attrs = _attrs(slug={'type': 'string', 'unique': True}, n={'type': 'integer'})
    first = classify_unique_filters(attrs)
    second = classify_unique_filters(attrs)
    assert first == second
    assert first is not second


def test_scalar_filter_fields_ignore_uniqueness():
    attrs = _attrs(
        title={'type': 'string'},
        views={'type': 'integer', 'unique': True},
        author={'type': 'relation', 'target': 'api::author.author'},
    )
    assert scalar_filter_fields(attrs) == {'title': 'String', 'views': 'Int'}


def test_attribute_descriptor_forms():
    assert AttributeDescriptor.from_value('string') == AttributeDescriptor(type='string')
    d = AttributeDescriptor.from_value({'type': 'email', 'unique': True, 'private': True})
    assert d.type == 'email' and d.unique is True
