"""
Product record shape and request validation models.

Create and update payloads are validated with pydantic against a strict
allow-list of fields. Every violation is collected and raised at once as a
``utils.exceptions.ValidationError``.
"""
import datetime as dt
import math
import re
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional, Type, TypedDict, Union

import pydantic
from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    PlainValidator,
    StrictStr,
    TypeAdapter,
)

from utils.exceptions import ValidationError

# Canonical hyphenated UUID, as produced by str(uuid.uuid4())
PRODUCT_ID_PATTERN = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
    re.IGNORECASE
)

# Fields the server owns; they never appear in a create or update payload
SERVER_FIELDS = ('id', 'createdAt', 'updatedAt')

_http_url = TypeAdapter(HttpUrl)

# DynamoDB numbers: at most 38 significant digits, magnitude 1e-130 to 9.99e125
MAX_SIGNIFICANT_DIGITS = 38
MAX_PRICE = Decimal('1E+126')
MIN_NONZERO_PRICE = Decimal('1E-128')
MAX_QUANTITY = 10 ** MAX_SIGNIFICANT_DIGITS - 1


class Product(TypedDict, total=False):
    """A product record as stored in the catalog table."""

    id: str
    name: str
    category: str
    price: Union[int, float]
    quantity: int
    inStock: bool
    description: str
    imageUrl: str
    tags: List[str]
    createdAt: str
    updatedAt: str


def _check_url(value: str) -> str:
    try:
        _http_url.validate_python(value)
    except pydantic.ValidationError:
        raise ValueError('imageUrl must be a valid URL') from None
    return value


def _check_price(value: Any) -> Union[int, float]:
    """Accept a JSON number as given, keeping ints as ints."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError('Input should be a valid number')
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError('Input should be a finite number')
    if value < 0:
        raise ValueError('Input should be greater than or equal to 0')
    stored = Decimal(str(value))
    if stored >= MAX_PRICE:
        raise ValueError(f'Input should be less than {MAX_PRICE}')
    if 0 < stored < MIN_NONZERO_PRICE:
        raise ValueError(f'Input should be 0 or at least {MIN_NONZERO_PRICE}')
    if isinstance(value, int) and len(str(value).rstrip('0')) > MAX_SIGNIFICANT_DIGITS:
        raise ValueError(
            f'Input should have at most {MAX_SIGNIFICANT_DIGITS} significant digits'
        )
    return value


NonEmptyText = Annotated[StrictStr, Field(min_length=1)]
Price = Annotated[Union[int, float], PlainValidator(_check_price)]
Quantity = Annotated[int, Field(strict=True, ge=0, le=MAX_QUANTITY)]
Flag = Annotated[bool, Field(strict=True)]
UrlText = Annotated[StrictStr, AfterValidator(_check_url)]


class ProductCreate(BaseModel):
    """Payload accepted by product creation."""

    model_config = ConfigDict(extra='forbid')

    name: NonEmptyText
    category: NonEmptyText
    price: Price
    quantity: Quantity
    inStock: Flag
    description: StrictStr = None
    imageUrl: UrlText = None
    tags: List[StrictStr] = None


class ProductUpdate(BaseModel):
    """
    Payload accepted by a partial update.

    Same rules as ProductCreate, but every field is optional. Defaults are
    not validated, so an explicit null is still rejected.
    """

    model_config = ConfigDict(extra='forbid')

    name: NonEmptyText = None
    category: NonEmptyText = None
    price: Price = None
    quantity: Quantity = None
    inStock: Flag = None
    description: StrictStr = None
    imageUrl: UrlText = None
    tags: List[StrictStr] = None


def _format_error(error: Dict[str, Any]) -> str:
    field = '.'.join(str(part) for part in error.get('loc', ()))
    if error['type'] == 'extra_forbidden':
        message = 'Unexpected field found'
    elif error['type'] == 'missing':
        message = 'Field is required'
    else:
        message = error['msg'].replace('Value error, ', '')
    return f'{field}: {message}' if field else message


def validate_payload(model: Type[BaseModel], data: Any) -> Dict[str, Any]:
    """
    Validate ``data`` against ``model``.

    Returns:
        Only the fields the caller supplied, as plain Python values

    Raises:
        ValidationError: With one entry per violated constraint
    """
    if not isinstance(data, dict):
        raise ValidationError(
            'Invalid request', ['Request body must be a JSON object']
        )
    try:
        validated = model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(
            'Invalid request',
            [_format_error(error) for error in e.errors()]
        ) from e
    return validated.model_dump(exclude_unset=True)


def validate_create(data: Any) -> Dict[str, Any]:
    """Validate a product creation payload."""
    return validate_payload(ProductCreate, data)


def validate_update(data: Any) -> Dict[str, Any]:
    """Validate a non-empty partial update payload."""
    if isinstance(data, dict) and not data:
        raise ValidationError(
            'Invalid request', ['No fields provided to update']
        )
    return validate_payload(ProductUpdate, data)


def validate_product_id(product_id: Optional[str]) -> str:
    """
    Check that a path-supplied product id has the creation-time format.

    Raises:
        ValidationError: If the id is missing or not a canonical UUID
    """
    if not product_id:
        raise ValidationError(
            'Invalid request parameter', ['id: Product ID is required']
        )
    if not isinstance(product_id, str) or not PRODUCT_ID_PATTERN.match(product_id):
        raise ValidationError(
            'Invalid request parameter', ['id: Invalid product ID format']
        )
    return product_id


def utc_now() -> dt.datetime:
    """Current time in UTC."""
    return dt.datetime.now(dt.timezone.utc)


def format_timestamp(moment: dt.datetime) -> str:
    """Format a datetime as sortable ISO-8601 UTC text, e.g. 2026-10-19T08:00:00.000Z."""
    moment = moment.astimezone(dt.timezone.utc)
    return moment.isoformat(timespec='milliseconds').replace('+00:00', 'Z')
