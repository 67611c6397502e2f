"""
S3 service for object storage operations.
"""
import codecs
import boto3
from typing import Any, Iterator, Optional, TYPE_CHECKING
from botocore.exceptions import ClientError
from logger_config import get_logger
from utils.exceptions import SourceNotFoundError, StorageError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
else:
    S3Client = Any

logger = get_logger(__name__)

MISSING_OBJECT_CODES = {'NoSuchKey', '404', 'NotFound'}


class S3Service:
    """Service for S3 operations."""

    def __init__(self, bucket_name: str, client: Optional[S3Client] = None):
        """
        Initialize S3 service.

        Args:
            bucket_name: Name of the S3 bucket
            client: boto3 S3 client; created on first use if omitted
        """
        self.bucket_name = bucket_name
        self._s3_client = client

    @property
    def s3_client(self) -> S3Client:
        """Lazy initialization of S3 client."""
        if self._s3_client is None:
            self._s3_client = boto3.client('s3')
        return self._s3_client

    def open_object(self, key: str):
        """
        Open an object for streamed reading.

        Args:
            key: S3 object key

        Returns:
            The botocore StreamingBody of the object

        Raises:
            SourceNotFoundError: If the object does not exist
            StorageError: If S3 operation fails for any other reason
        """
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', '')
            if error_code in MISSING_OBJECT_CODES:
                raise SourceNotFoundError(
                    f'No object found at s3://{self.bucket_name}/{key}',
                    bucket=self.bucket_name,
                    key=key
                ) from e
            logger.error(f'S3 get_object failed for key {key}: {str(e)}')
            raise StorageError(
                f'S3 get_object failed for s3://{self.bucket_name}/{key}: {error_code}',
                operation='get_object'
            ) from e
        logger.info(f'Opened s3://{self.bucket_name}/{key}')
        return response['Body']

    def iter_text_lines(self, key: str, encoding: str = 'utf-8-sig') -> Iterator[str]:
        """
        Stream an object's content as decoded text lines.

        The object is opened before this returns, so a missing object fails
        here rather than on first iteration.

        Args:
            key: S3 object key
            encoding: Text encoding; the default strips a leading BOM

        Returns:
            Iterator over lines of text, line endings preserved

        Raises:
            SourceNotFoundError: If the object does not exist
        """
        return _read_lines(self.open_object(key), encoding)


def _read_lines(body, encoding: str) -> Iterator[str]:
    try:
        yield from codecs.getreader(encoding)(body)
    finally:
        body.close()
