"""
Tests for catalog operations against a moto DynamoDB table.
"""
import uuid

import pytest

from models import PRODUCT_ID_PATTERN
from services.dynamodb_service import DynamoDBService
from services.product_service import ProductService
from utils.exceptions import NotFoundError, StorageError, ValidationError


@pytest.fixture
def product_service(dynamodb_service, clock):
    return ProductService(dynamodb_service, clock=clock)


@pytest.mark.catalog
def test_create_assigns_server_fields(product_service, valid_product):
    product = product_service.create(valid_product)

    assert PRODUCT_ID_PATTERN.match(product['id'])
    assert product['createdAt'] == product['updatedAt'] == '2026-10-19T08:00:00.000Z'
    for field, value in valid_product.items():
        assert product[field] == value


@pytest.mark.catalog
def test_create_ids_are_unique(product_service, valid_product):
    first = product_service.create(valid_product)
    second = product_service.create(valid_product)

    assert first['id'] != second['id']


@pytest.mark.catalog
def test_create_rejects_unknown_field(product_service, dynamodb_service, valid_product):
    with pytest.raises(ValidationError) as exc_info:
        product_service.create({**valid_product, 'color': 'red'})

    assert 'color: Unexpected field found' in exc_info.value.errors
    assert dynamodb_service.scan() == []


@pytest.mark.catalog
def test_create_then_get_round_trip(product_service, valid_product):
    created = product_service.create(valid_product)

    assert product_service.get_by_id(created['id']) == created


@pytest.mark.catalog
def test_create_then_get_minimal_record(product_service):
    created = product_service.create({
        'name': 'Filter papers',
        'category': 'coffee',
        'price': 4,
        'quantity': 100,
        'inStock': True,
    })

    fetched = product_service.get_by_id(created['id'])
    assert fetched == created
    assert 'tags' not in fetched
    assert type(created['price']) is int


@pytest.mark.catalog
def test_create_then_read_large_numbers(product_service, valid_product):
    created = product_service.create({**valid_product, 'quantity': 10 ** 30, 'price': 1e100})

    fetched = product_service.get_by_id(created['id'])
    assert fetched['quantity'] == 10 ** 30
    assert float(fetched['price']) == 1e100

    listed = product_service.list()
    assert [p['quantity'] for p in listed] == [10 ** 30]


@pytest.mark.catalog
@pytest.mark.parametrize('field,value', [('price', 1e200), ('quantity', 10 ** 38)])
def test_out_of_range_numbers_rejected(product_service, valid_product, field, value):
    created = product_service.create(valid_product)

    with pytest.raises(ValidationError):
        product_service.create({**valid_product, field: value})
    with pytest.raises(ValidationError):
        product_service.update(created['id'], {field: value})

    assert product_service.get_by_id(created['id']) == created
    assert len(product_service.list()) == 1


@pytest.mark.catalog
def test_get_unknown_id_returns_none(product_service):
    assert product_service.get_by_id(str(uuid.uuid4())) is None


@pytest.mark.catalog
def test_get_malformed_id(product_service):
    with pytest.raises(ValidationError):
        product_service.get_by_id('not-a-uuid')


@pytest.mark.catalog
def test_list_returns_everything(product_service, valid_product):
    assert product_service.list() == []

    ids = {product_service.create({**valid_product, 'name': f'P{i}'})['id'] for i in range(3)}

    assert {p['id'] for p in product_service.list()} == ids


@pytest.mark.catalog
def test_update_changes_only_supplied_fields(product_service, valid_product, clock):
    created = product_service.create(valid_product)
    clock.advance(seconds=5)

    updated = product_service.update(created['id'], {'price': 199.5, 'tags': ['sale']})

    assert updated['id'] == created['id']
    assert updated['createdAt'] == created['createdAt']
    assert updated['updatedAt'] == '2026-10-19T08:00:05.000Z'
    assert updated['updatedAt'] > created['updatedAt']
    assert updated['price'] == 199.5
    assert updated['tags'] == ['sale']
    for field in ('name', 'category', 'quantity', 'inStock', 'description', 'imageUrl'):
        assert updated[field] == created[field]
    assert product_service.get_by_id(created['id']) == updated


@pytest.mark.catalog
def test_update_reserved_word_field(product_service, valid_product):
    created = product_service.create(valid_product)

    updated = product_service.update(created['id'], {'name': 'Espresso Machine II'})

    assert updated['name'] == 'Espresso Machine II'


@pytest.mark.catalog
def test_update_is_idempotent(product_service, valid_product):
    created = product_service.create(valid_product)

    first = product_service.update(created['id'], {'quantity': 3})
    second = product_service.update(created['id'], {'quantity': 3})

    assert first == second


@pytest.mark.catalog
@pytest.mark.parametrize('exists', [True, False])
def test_update_empty_payload_rejected(product_service, valid_product, exists):
    product_id = product_service.create(valid_product)['id'] if exists else str(uuid.uuid4())

    with pytest.raises(ValidationError) as exc_info:
        product_service.update(product_id, {})

    assert exc_info.value.errors == ['No fields provided to update']


@pytest.mark.catalog
def test_update_rejects_immutable_fields(product_service, valid_product):
    created = product_service.create(valid_product)

    with pytest.raises(ValidationError):
        product_service.update(created['id'], {'createdAt': '1999-01-01T00:00:00.000Z'})

    assert product_service.get_by_id(created['id']) == created


@pytest.mark.catalog
def test_update_missing_product(product_service, dynamodb_service):
    product_id = str(uuid.uuid4())

    with pytest.raises(NotFoundError) as exc_info:
        product_service.update(product_id, {'price': 1})

    assert exc_info.value.product_id == product_id
    assert dynamodb_service.scan() == []


@pytest.mark.catalog
def test_delete_is_idempotent(product_service, valid_product):
    created = product_service.create(valid_product)

    product_service.delete(created['id'])
    product_service.delete(created['id'])

    assert product_service.get_by_id(created['id']) is None


@pytest.mark.catalog
def test_delete_unknown_id(product_service):
    product_service.delete(str(uuid.uuid4()))


@pytest.mark.catalog
def test_delete_malformed_id(product_service):
    with pytest.raises(ValidationError):
        product_service.delete('42')


@pytest.mark.catalog
def test_storage_failure(dynamodb_client, clock, valid_product):
    service = ProductService(DynamoDBService('no-such-table', client=dynamodb_client), clock=clock)

    with pytest.raises(StorageError) as exc_info:
        service.create(valid_product)

    assert exc_info.value.operation == 'put_item'
