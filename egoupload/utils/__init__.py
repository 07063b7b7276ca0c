"""
Utility modules for ego-upload.

Shared helpers used throughout the package, including transport error
handling for e.g.o API calls.
"""

from egoupload.utils.api_error_handler import handle_external_api_errors

__all__ = [
    "handle_external_api_errors",
]
