"""
Catalog service: create, read, list, update and delete product records.
"""
import datetime as dt
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple
from logger_config import get_logger
from models import (
    Product,
    SERVER_FIELDS,
    format_timestamp,
    utc_now,
    validate_create,
    validate_product_id,
    validate_update,
)
from .dynamodb_service import DynamoDBService

logger = get_logger(__name__)


def build_update_expression(
    updates: Dict[str, Any],
    updated_at: str
) -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """
    Build a SET expression that writes each supplied field plus updatedAt.

    Field names and values go through placeholders (#field1 / :value1, ...)
    so reserved words such as "name" are safe. Server-owned fields in
    ``updates`` are skipped.

    Args:
        updates: Field name to new value
        updated_at: Timestamp to store in updatedAt

    Returns:
        Tuple of (update expression, attribute names, attribute values)
    """
    names = {'#updatedAt': 'updatedAt'}
    values: Dict[str, Any] = {':updatedAt': updated_at}
    clauses = ['#updatedAt = :updatedAt']

    idx = 0
    for field, value in updates.items():
        if field in SERVER_FIELDS:
            continue
        idx += 1
        name_key = f'#field{idx}'
        value_key = f':value{idx}'
        names[name_key] = field
        values[value_key] = value
        clauses.append(f'{name_key} = {value_key}')

    return 'SET ' + ', '.join(clauses), names, values


class ProductService:
    """Service for product catalog operations."""

    def __init__(
        self,
        dynamodb_service: DynamoDBService,
        clock: Optional[Callable[[], dt.datetime]] = None
    ) -> None:
        """
        Initialize product service.

        Args:
            dynamodb_service: Storage for the products table
            clock: Returns the current time; defaults to UTC now
        """
        self.dynamodb_service = dynamodb_service
        self.clock = clock or utc_now

    def _now(self) -> str:
        return format_timestamp(self.clock())

    def create(self, data: Any) -> Product:
        """
        Create a product.

        Raises:
            ValidationError: If ``data`` does not satisfy the create schema
            StorageError: If the record cannot be persisted
        """
        fields = validate_create(data)
        now = self._now()
        product: Product = {
            'id': str(uuid.uuid4()),
            'createdAt': now,
            'updatedAt': now,
            **fields,
        }
        self.dynamodb_service.put_item(product)
        logger.info(f'Created product {product["id"]}')
        return product

    def get_by_id(self, product_id: str) -> Optional[Product]:
        """
        Fetch a product by id.

        Returns:
            The product, or None if no product has this id

        Raises:
            ValidationError: If the id is malformed
        """
        validate_product_id(product_id)
        return self.dynamodb_service.get_item(product_id)

    def list(self) -> List[Product]:
        """Return every product, unordered."""
        products = self.dynamodb_service.scan()
        logger.debug(f'Listed {len(products)} products')
        return products

    def update(self, product_id: str, updates: Any) -> Product:
        """
        Apply a partial update to an existing product.

        Only the supplied fields change; updatedAt is always refreshed, and
        id and createdAt are never written.

        Returns:
            The full product after the update

        Raises:
            ValidationError: If the id is malformed, the payload is empty,
                or any supplied field breaks its rule
            NotFoundError: If no product has this id
        """
        validate_product_id(product_id)
        fields = validate_update(updates)

        expression, names, values = build_update_expression(fields, self._now())
        product = self.dynamodb_service.update_item(
            product_id, expression, names, values, require_existing=True
        )
        logger.info(f'Updated product {product_id} fields: {sorted(fields)}')
        return product

    def delete(self, product_id: str) -> None:
        """
        Delete a product. Deleting an unknown id succeeds.

        Raises:
            ValidationError: If the id is malformed
        """
        validate_product_id(product_id)
        self.dynamodb_service.delete_item(product_id)
        logger.info(f'Deleted product {product_id}')
