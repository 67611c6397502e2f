"""
Custom exception classes for Lambda handlers and services.
"""
from typing import Optional, List


class ValidationError(Exception):
    """Exception raised when client input violates the product schema."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None
    ):
        """
        Initialize validation error.

        Args:
            message: Summary error message
            errors: Every violated constraint, in the order detected
        """
        super().__init__(message)
        self.message = message
        self.errors = list(errors) if errors else [message]


class NotFoundError(Exception):
    """Exception raised when a product id does not exist."""

    def __init__(
        self,
        message: str,
        product_id: Optional[str] = None
    ):
        """
        Initialize not found error.

        Args:
            message: Error message
            product_id: Product id that was looked up, if available
        """
        super().__init__(message)
        self.message = message
        self.product_id = product_id


class SourceNotFoundError(Exception):
    """Exception raised when an import object is missing from S3."""

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None
    ):
        """
        Initialize source not found error.

        Args:
            message: Error message
            bucket: S3 bucket name if available
            key: S3 object key if available
        """
        super().__init__(message)
        self.message = message
        self.bucket = bucket
        self.key = key


class StorageError(Exception):
    """Exception raised when a DynamoDB or S3 operation fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None
    ):
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: DynamoDB or S3 operation name if available
            table: Table name if available; None for S3 failures
        """
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.table = table
