"""
Shared fixtures: moto-backed DynamoDB table and S3 bucket, and a controllable clock.
"""
import datetime as dt
import os

import boto3
import pytest
from moto import mock_aws

from services.dynamodb_service import DynamoDBService
from services.s3_service import S3Service

REGION = 'us-east-1'
TABLE_NAME = 'test-products-table'
BUCKET_NAME = 'test-import-bucket'


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, start: dt.datetime):
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + dt.timedelta(**kwargs)


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so boto3 never reaches a real account."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', REGION)


@pytest.fixture
def clock():
    return FrozenClock(dt.datetime(2026, 10, 19, 8, 0, 0, tzinfo=dt.timezone.utc))


@pytest.fixture
def aws():
    with mock_aws():
        yield


@pytest.fixture
def dynamodb_client(aws):
    client = boto3.client('dynamodb', region_name=REGION)
    client.create_table(
        TableName=TABLE_NAME,
        AttributeDefinitions=[
            {'AttributeName': 'id', 'AttributeType': 'S'}
        ],
        KeySchema=[
            {'AttributeName': 'id', 'KeyType': 'HASH'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )
    return client


@pytest.fixture
def s3_client(aws):
    client = boto3.client('s3', region_name=REGION)
    client.create_bucket(Bucket=BUCKET_NAME)
    return client


@pytest.fixture
def dynamodb_service(dynamodb_client):
    return DynamoDBService(TABLE_NAME, client=dynamodb_client)


@pytest.fixture
def s3_service(s3_client):
    return S3Service(BUCKET_NAME, client=s3_client)


@pytest.fixture
def put_csv(s3_client):
    """Upload CSV text as the import file for a date."""
    def _put(date: str, text: str, encoding: str = 'utf-8') -> str:
        key = f'{date}/items.csv'
        s3_client.put_object(Bucket=BUCKET_NAME, Key=key, Body=text.encode(encoding))
        return key
    return _put


@pytest.fixture
def valid_product():
    return {
        'name': 'Espresso Machine',
        'category': 'kitchen',
        'price': 249.99,
        'quantity': 12,
        'inStock': True,
        'description': 'Stainless steel, 15 bar pump',
        'imageUrl': 'https://cdn.example.com/espresso.png',
        'tags': ['coffee', 'appliance'],
    }
