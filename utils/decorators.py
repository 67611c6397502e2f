"""
Handler decorators for error handling, logging, and response formatting.
"""
import functools
import json
import uuid
from typing import Callable, Any, Dict, Optional
from logger_config import get_logger
from utils.exceptions import (
    NotFoundError,
    SourceNotFoundError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)


def http_response(
    status_code: int,
    body: Any = None,
    correlation_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build an API Gateway proxy response.

    Args:
        status_code: HTTP status code
        body: JSON-serializable body; None gives an empty body
        correlation_id: Added as the X-Correlation-Id header if given
    """
    headers = {'Content-Type': 'application/json'}
    if correlation_id:
        headers['X-Correlation-Id'] = correlation_id
    return {
        'statusCode': status_code,
        'headers': headers,
        'body': '' if body is None else json.dumps(body),
    }


def api_handler(
    func: Callable[[Any, Any], Dict[str, Any]]
) -> Callable[[Any, Any], Dict[str, Any]]:
    """
    Decorator for API Gateway Lambda handlers.

    Provides:
    - Request correlation IDs for logging and the X-Correlation-Id header
    - Mapping of the error taxonomy onto HTTP status codes:
      ValidationError -> 400, NotFoundError -> 404, anything else -> 500

    The wrapped function returns an http_response() dict.

    Args:
        func: The handler function to decorate

    Returns:
        Decorated handler function
    """
    @functools.wraps(func)
    def wrapper(event: Any, context: Any) -> Dict[str, Any]:
        correlation_id = str(uuid.uuid4())
        log_extra = {"correlation_id": correlation_id}

        logger.info(
            f"Handler {func.__name__} invoked "
            f"(request_id={getattr(context, 'aws_request_id', None) if context else None})",
            extra=log_extra
        )

        try:
            response = func(event, context)
        except ValidationError as e:
            logger.warning(
                f"Handler {func.__name__} validation error: {e.errors}",
                extra=log_extra
            )
            return http_response(
                400,
                {"message": e.message, "errors": e.errors},
                correlation_id
            )
        except NotFoundError as e:
            logger.info(
                f"Handler {func.__name__} not found: {e.message}",
                extra=log_extra
            )
            return http_response(
                404, {"message": "Product not found"}, correlation_id
            )
        except StorageError as e:
            logger.error(
                f"Handler {func.__name__} storage failure: {e.message}",
                extra=log_extra,
                exc_info=True
            )
            return http_response(
                500, {"message": "Internal server error"}, correlation_id
            )
        except Exception as e:
            logger.error(
                f"Handler {func.__name__} failed: {str(e)}",
                extra=log_extra,
                exc_info=True
            )
            return http_response(
                500, {"message": "Internal server error"}, correlation_id
            )

        response.setdefault('headers', {})['X-Correlation-Id'] = correlation_id
        logger.info(
            f"Handler {func.__name__} completed with status {response.get('statusCode')}",
            extra=log_extra
        )
        return response

    return wrapper


def scheduled_handler(
    func: Callable[[Any, Any], Any]
) -> Callable[[Any, Any], Dict[str, Any]]:
    """
    Decorator for scheduled (EventBridge) Lambda handlers.

    Logs the invocation with a correlation ID and adds it to the result
    metadata. Failures are logged and re-raised so the platform's retry
    and alerting apply.
    """
    @functools.wraps(func)
    def wrapper(event: Any, context: Any) -> Dict[str, Any]:
        correlation_id = str(uuid.uuid4())
        log_extra = {"correlation_id": correlation_id}

        logger.info(f"Handler {func.__name__} invoked", extra=log_extra)

        try:
            result = func(event, context)
        except (ValidationError, SourceNotFoundError) as e:
            logger.error(
                f"Handler {func.__name__} failed: {e.message}",
                extra=log_extra
            )
            raise
        except Exception as e:
            logger.error(
                f"Handler {func.__name__} failed: {str(e)}",
                extra=log_extra,
                exc_info=True
            )
            raise

        if not isinstance(result, dict):
            result = {"result": result}
        result.setdefault("metadata", {})["correlation_id"] = correlation_id

        logger.info(
            f"Handler {func.__name__} completed successfully",
            extra=log_extra
        )
        return result

    return wrapper
