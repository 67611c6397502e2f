"""
Process bootstrap: builds AWS clients once and wires them into the services.

Lambda keeps the module loaded between invocations of a warm container, so
the wired services are cached here and reused. Tests replace them with
``set_services``.
"""
from dataclasses import dataclass
from typing import Optional

import boto3

from config import Config, get_config
from logger_config import get_logger
from services.dynamodb_service import DynamoDBService
from services.import_service import ImportService
from services.product_service import ProductService
from services.s3_service import S3Service

logger = get_logger(__name__)


@dataclass
class Services:
    """The services one Lambda process needs."""

    products: ProductService
    importer: ImportService


def build_services(
    config: Config,
    session: Optional[boto3.Session] = None
) -> Services:
    """
    Create AWS clients and the services that use them.

    Args:
        config: Validated configuration
        session: boto3 session to create clients from (default session if omitted)
    """
    session = session or boto3.Session(region_name=config.aws_region)
    dynamodb_service = DynamoDBService(
        config.products_table,
        client=session.client('dynamodb', region_name=config.aws_region)
    )
    s3_service = S3Service(
        config.import_bucket,
        client=session.client('s3', region_name=config.aws_region)
    )
    logger.info(
        f'Services initialized (table={config.products_table}, '
        f'bucket={config.import_bucket}, region={config.aws_region})'
    )
    return Services(
        products=ProductService(dynamodb_service),
        importer=ImportService(
            s3_service,
            dynamodb_service,
            max_workers=config.import_max_workers
        ),
    )


_services: Optional[Services] = None


def get_services() -> Services:
    """Return the process-wide services, building them on first use."""
    global _services
    if _services is None:
        _services = build_services(get_config())
    return _services


def set_services(services: Optional[Services]) -> None:
    """Install ``services`` for this process; None forces a rebuild on next use."""
    global _services
    _services = services
