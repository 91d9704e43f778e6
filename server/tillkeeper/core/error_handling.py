"""
Standardized error handling utilities for API endpoints.
"""
from functools import wraps
from typing import Callable, Any
from fastapi import HTTPException, status
from sqlalchemy.exc import OperationalError, InterfaceError
import logging

from tillkeeper.core.config import settings

logger = logging.getLogger(__name__)


def is_production() -> bool:
    return settings.ENVIRONMENT.lower() in ["prod", "production"]


def handle_endpoint_errors(
    operation_name: str = None,
    log_error: bool = True,
):
    """
    Decorator to standardize error handling across all endpoints.

    Catches unexpected exceptions, logs them, and returns appropriate HTTP responses.

    Args:
        operation_name: Name of the operation (for logging)
        log_error: Whether to log errors (default: True)

    Usage:
        @handle_endpoint_errors(operation_name="open_cash_drawer")
        async def open_cash_drawer_endpoint(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            op_name = operation_name or func.__name__
            try:
                return await func(*args, **kwargs)
            except HTTPException as e:
                # Domain and auth errors are already properly formatted
                if log_error and e.status_code >= 400:
                    logger.info(f"{op_name} rejected with {e.status_code}: {e.detail}")
                raise
            except ValueError as e:
                # Handle value errors (e.g., invalid enum values, invalid dates)
                if log_error:
                    logger.warning(f"Value error in {op_name}: {str(e)}")
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Invalid input: {str(e)}",
                )
            except (OperationalError, InterfaceError) as e:
                # Database unreachable; nothing was applied, the client may retry
                if log_error:
                    logger.error(f"Database unavailable in {op_name}: {str(e)}", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                    detail="The service is temporarily unavailable. Please try again.",
                )
            except Exception as e:
                error_detail = str(e)
                error_type = type(e).__name__

                if log_error:
                    logger.error(
                        f"Unexpected error in {op_name}",
                        exc_info=True,
                        extra={
                            "operation": op_name,
                            "error": error_detail,
                            "error_type": error_type
                        }
                    )

                # In development, return more detailed error messages
                if is_production():
                    detail_msg = "An unexpected error occurred while processing your request. Please try again later."
                else:
                    detail_msg = f"Error in {op_name}: {error_type}: {error_detail}"

                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=detail_msg,
                )
        return wrapper
    return decorator
