"""
DynamoDB service for table operations.
"""
import boto3
from decimal import Decimal, DecimalException
from typing import Dict, Any, List, Optional, TYPE_CHECKING
from boto3.dynamodb.types import TypeDeserializer, TypeSerializer
from botocore.exceptions import ClientError
from logger_config import get_logger
from utils.exceptions import NotFoundError, StorageError, ValidationError

if TYPE_CHECKING:
    from mypy_boto3_dynamodb import DynamoDBClient
else:
    DynamoDBClient = Any

logger = get_logger(__name__)

_serializer = TypeSerializer()
_deserializer = TypeDeserializer()


def to_dynamodb_value(value: Any) -> Any:
    """Replace floats with Decimals so boto3 can serialize numbers."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, list):
        return [to_dynamodb_value(v) for v in value]
    if isinstance(value, dict):
        return {k: to_dynamodb_value(v) for k, v in value.items()}
    return value


def from_dynamodb_value(value: Any) -> Any:
    """Replace Decimals with int when integral, float otherwise."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (list, set)):
        return [from_dynamodb_value(v) for v in value]
    if isinstance(value, dict):
        return {k: from_dynamodb_value(v) for k, v in value.items()}
    return value


def serialize_item(item: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """
    Convert a plain dict into DynamoDB attribute-value format.

    Raises:
        ValidationError: If a number cannot be stored as a DynamoDB number
    """
    serialized = {}
    errors = []
    for k, v in item.items():
        try:
            serialized[k] = _serializer.serialize(to_dynamodb_value(v))
        except DecimalException:
            errors.append(f'{k}: Number is outside the range DynamoDB can store')
    if errors:
        raise ValidationError('Invalid request', errors)
    return serialized


def deserialize_item(item: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Convert DynamoDB attribute-value format into a plain dict."""
    return {
        k: from_dynamodb_value(_deserializer.deserialize(v))
        for k, v in item.items()
    }


class DynamoDBService:
    """Service for operations on a single DynamoDB table keyed by one attribute."""

    def __init__(
        self,
        table_name: str,
        client: Optional[DynamoDBClient] = None,
        key_name: str = 'id'
    ) -> None:
        """
        Initialize DynamoDB service.

        Args:
            table_name: Name of the DynamoDB table
            client: boto3 DynamoDB client; created on first use if omitted
            key_name: Name of the table's hash key attribute
        """
        self.table_name = table_name
        self.key_name = key_name
        self._client: Optional[DynamoDBClient] = client

    @property
    def client(self) -> DynamoDBClient:
        """Lazy initialization of DynamoDB client."""
        if self._client is None:
            self._client = boto3.client('dynamodb')
        return self._client

    def _key(self, key_value: str) -> Dict[str, Dict[str, Any]]:
        return {self.key_name: {'S': key_value}}

    def _storage_error(self, operation: str, error: ClientError) -> StorageError:
        logger.error(
            f'DynamoDB {operation} failed for table {self.table_name}: {str(error)}'
        )
        return StorageError(
            f'DynamoDB {operation} failed: {str(error)}',
            operation=operation,
            table=self.table_name
        )

    def get_item(self, key_value: str) -> Optional[Dict[str, Any]]:
        """
        Get an item by key.

        Args:
            key_value: Hash key value

        Returns:
            Item as a plain dict if found, None otherwise

        Raises:
            StorageError: If DynamoDB operation fails
        """
        try:
            response = self.client.get_item(
                TableName=self.table_name,
                Key=self._key(key_value)
            )
        except ClientError as e:
            raise self._storage_error('get_item', e) from e
        item = response.get('Item')
        return deserialize_item(item) if item else None

    def put_item(self, item: Dict[str, Any]) -> None:
        """
        Put (fully overwrite) an item.

        Args:
            item: Item as a plain dict; must contain the hash key

        Raises:
            ValidationError: If a number is outside the DynamoDB number range
            StorageError: If DynamoDB operation fails
        """
        try:
            self.client.put_item(
                TableName=self.table_name,
                Item=serialize_item(item)
            )
        except ClientError as e:
            raise self._storage_error('put_item', e) from e
        logger.debug(f'Put item {item.get(self.key_name)} to DynamoDB table {self.table_name}')

    def scan(self) -> List[Dict[str, Any]]:
        """
        Read every item in the table, following scan pagination.

        Returns:
            All items as plain dicts, in no particular order

        Raises:
            StorageError: If DynamoDB operation fails
        """
        items: List[Dict[str, Any]] = []
        try:
            paginator = self.client.get_paginator('scan')
            for page in paginator.paginate(TableName=self.table_name):
                items.extend(deserialize_item(item) for item in page.get('Items', []))
        except ClientError as e:
            raise self._storage_error('scan', e) from e
        return items

    def update_item(
        self,
        key_value: str,
        update_expression: str,
        attribute_names: Dict[str, str],
        attribute_values: Dict[str, Any],
        require_existing: bool = True
    ) -> Dict[str, Any]:
        """
        Apply an update expression and return the item after the update.

        Args:
            key_value: Hash key value
            update_expression: DynamoDB update expression, e.g. "SET #a = :a"
            attribute_names: Expression attribute name placeholders
            attribute_values: Expression attribute values as plain Python values
            require_existing: Fail instead of creating the item when absent

        Returns:
            All attributes of the updated item

        Raises:
            NotFoundError: If require_existing and the item does not exist
            StorageError: If DynamoDB operation fails
        """
        kwargs: Dict[str, Any] = {
            'TableName': self.table_name,
            'Key': self._key(key_value),
            'UpdateExpression': update_expression,
            'ExpressionAttributeNames': dict(attribute_names),
            'ExpressionAttributeValues': serialize_item(attribute_values),
            'ReturnValues': 'ALL_NEW',
        }
        if require_existing:
            kwargs['ConditionExpression'] = 'attribute_exists(#pk)'
            kwargs['ExpressionAttributeNames']['#pk'] = self.key_name

        try:
            response = self.client.update_item(**kwargs)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', '')
            if error_code == 'ConditionalCheckFailedException':
                raise NotFoundError(
                    f'Item {key_value} not found in {self.table_name}',
                    product_id=key_value
                ) from e
            raise self._storage_error('update_item', e) from e
        return deserialize_item(response.get('Attributes', {}))

    def delete_item(self, key_value: str) -> None:
        """
        Delete an item by key. Deleting a missing item is not an error.

        Raises:
            StorageError: If DynamoDB operation fails
        """
        try:
            self.client.delete_item(
                TableName=self.table_name,
                Key=self._key(key_value)
            )
        except ClientError as e:
            raise self._storage_error('delete_item', e) from e
