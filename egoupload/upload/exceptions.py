"""
Exceptions for the e.g.o upload workflow.

Three families are kept apart so callers can tell them apart:
transport failures (no response), API-reported failures (an error status)
and malformed responses (OK status, unexpected body).
"""

from typing import List, Optional


class EGOUploadError(Exception):
    """Base error for everything the upload tool reports."""

    def __init__(self, message, **kwargs):
        super().__init__(message)
        self.message = message
        self.endpoint = kwargs.get('endpoint')
        self.status_code = kwargs.get('status_code')


class APIConnectionError(EGOUploadError):
    """No response was received from the API."""
    pass


class APITimeoutError(APIConnectionError):
    """The API did not answer within the configured timeout."""

    def __init__(self, message, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout_duration = kwargs.get('timeout_duration')


class MalformedResponseError(EGOUploadError):
    """The API answered with an OK status but an unexpected body."""
    pass


class SchemaError(MalformedResponseError):
    """The API schema document does not carry the confirmation prompts."""
    pass


class APIStatusError(EGOUploadError):
    """The API answered with an error status."""

    def __init__(self, message, detail: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.detail = detail


class AuthenticationError(APIStatusError):
    """Login was rejected."""
    pass


class UploadError(APIStatusError):
    """The extension upload was rejected."""

    def __init__(self, message, errors: Optional[List[str]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = list(errors or [])


class ExtensionLookupError(APIStatusError):
    """Extension metadata could not be fetched."""
    pass


class LogoutError(APIStatusError):
    """The session token could not be revoked."""
    pass


class ConsentDeclinedError(EGOUploadError):
    """The user declined a required confirmation prompt."""
    pass


class PermissionDeniedError(EGOUploadError):
    """Access to a local file was refused."""

    def __init__(self, message, **kwargs):
        super().__init__(message, **kwargs)
        self.path = kwargs.get('path')


class PackageReadError(EGOUploadError):
    """The extension package could not be read."""

    def __init__(self, message, **kwargs):
        super().__init__(message, **kwargs)
        self.path = kwargs.get('path')


class ConfirmationFileError(EGOUploadError):
    """A confirmation file is unreadable or not valid JSON."""

    def __init__(self, message, **kwargs):
        super().__init__(message, **kwargs)
        self.path = kwargs.get('path')


class EnvironmentValidationError(EGOUploadError):
    """Environment configuration is invalid."""

    def __init__(self, message, **kwargs):
        super().__init__(message, **kwargs)
        self.invalid_vars = kwargs.get('invalid_vars', [])
