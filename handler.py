"""
Lambda handler functions for the product catalog.

HTTP handlers serve the API Gateway routes under /products; import_products
is invoked by an EventBridge schedule. All of them delegate to the services
wired up in bootstrap.
"""
import base64
import datetime as dt
import json
from typing import Any, Dict, Optional
from dateutil.parser import isoparse
from bootstrap import get_services
from logger_config import get_logger
from utils.decorators import api_handler, http_response, scheduled_handler
from utils.exceptions import ValidationError

logger = get_logger(__name__)


def parse_json_body(event: Dict[str, Any]) -> Any:
    """
    Decode the JSON body of an API Gateway proxy event.

    A missing body decodes as an empty object.

    Raises:
        ValidationError: If the body is not valid JSON
    """
    body = event.get('body') or '{}'
    try:
        if event.get('isBase64Encoded'):
            body = base64.b64decode(body).decode('utf-8')
        return json.loads(body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError(
            'Invalid request', ['Request body must be valid JSON']
        ) from None


def path_id(event: Dict[str, Any]) -> Optional[str]:
    """Product id from the {id} path parameter, if present."""
    return (event.get('pathParameters') or {}).get('id')


@api_handler
def create_product(event, context):
    """POST /products"""
    product = get_services().products.create(parse_json_body(event))
    return http_response(201, product)


@api_handler
def get_product(event, context):
    """GET /products/{id}"""
    product = get_services().products.get_by_id(path_id(event))
    if product is None:
        return http_response(404, {"message": "Product not found"})
    return http_response(200, product)


@api_handler
def list_products(event, context):
    """GET /products"""
    return http_response(200, get_services().products.list())


@api_handler
def update_product(event, context):
    """PUT /products/{id}"""
    updated = get_services().products.update(path_id(event), parse_json_body(event))
    return http_response(200, updated)


@api_handler
def delete_product(event, context):
    """DELETE /products/{id}"""
    get_services().products.delete(path_id(event))
    return http_response(204)


def import_date_from_event(event: Optional[Dict[str, Any]]) -> str:
    """
    Work out which day's file to import.

    Uses an explicit "date" (manual re-runs), then the date part of the
    EventBridge "time" field, then today's UTC date.
    """
    event = event or {}
    if event.get('date'):
        return str(event['date'])
    if event.get('time'):
        try:
            return isoparse(event['time']).date().isoformat()
        except ValueError:
            logger.warning(f'Ignoring unparseable event time: {event["time"]}')
    return dt.datetime.now(dt.timezone.utc).date().isoformat()


@scheduled_handler
def import_products(event, context):
    """Import today's items.csv from the import bucket into the products table."""
    date = import_date_from_event(event)
    logger.info(f'Starting product import for {date}')

    result = get_services().importer.import_for_date(date)

    if result.failed:
        logger.warning(
            f'Import for {date} finished with {result.failed} failed rows: '
            f'{[f.row_number for f in result.failures]}'
        )
    logger.info(f'Imported {result.written} items from {result.key}')
    return result.to_dict()
