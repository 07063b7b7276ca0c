"""
Reusable decorator for handling e.g.o API exceptions.

Translates transport exceptions raised by ``requests`` into the upload
tool's own error kinds, so callers never see a raw ``requests`` exception.
"""

import functools
import logging
from typing import Any, Callable

import requests

from egoupload.upload.exceptions import (
    APIConnectionError,
    APITimeoutError,
    EGOUploadError,
)


def handle_external_api_errors(
    endpoint: str,
    return_on_error: Any = None,
    suppress_errors: bool = False,
):
    """
    Decorator that maps transport failures of an API method.

    Usage:
        @handle_external_api_errors(endpoint="api/v1/accounts/login/")
        def login(self, auth):
            response = self.session.post(url, json=payload)
            ...

    Args:
        endpoint: API endpoint the wrapped method talks to
        return_on_error: Value to return when an error is suppressed
        suppress_errors: If True, log any upload error and return the
            fallback value; if False, raise the translated exception

    Returns:
        Decorated function raising only ``EGOUploadError`` subclasses
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            logger = getattr(self, "logger", logging.getLogger(func.__name__))

            try:
                try:
                    return func(self, *args, **kwargs)
                except requests.exceptions.Timeout as e:
                    timeout = getattr(getattr(self, "config", None), "request_timeout", None)
                    raise APITimeoutError(
                        f"Timeout while calling {endpoint}",
                        endpoint=endpoint,
                        timeout_duration=timeout,
                    ) from e
                except requests.exceptions.ConnectionError as e:
                    raise APIConnectionError(
                        f"Connection failed for {endpoint}: {e}",
                        endpoint=endpoint,
                    ) from e
                except requests.exceptions.RequestException as e:
                    raise APIConnectionError(
                        f"Request failed for {endpoint}: {e}",
                        endpoint=endpoint,
                    ) from e
            except EGOUploadError as error:
                return _handle_error(error, logger, suppress_errors, return_on_error)

        return wrapper

    return decorator


def _handle_error(
    error: EGOUploadError,
    logger: logging.Logger,
    suppress: bool,
    return_value: Any,
) -> Any:
    """Log the error, then either return the fallback value or re-raise."""
    if not suppress:
        logger.debug(f"{error.endpoint}: {error.message}")
        raise error

    logger.warning(f"Ignoring failure on {error.endpoint}: {error.message}")
    return return_value
