"""
e.g.o Upload Module

Uploads GNOME Shell extension packages to extensions.gnome.org:

Step 1: Consent - Confirm the current upload prompts, live or pre-recorded
Step 2: Session - Log in and obtain a session token
Step 3: Upload - Send the package and look up the resulting extension
Step 4: Cleanup - Revoke the session token
"""

from .exceptions import (
    EGOUploadError,
    APIConnectionError,
    APITimeoutError,
    MalformedResponseError,
    SchemaError,
    APIStatusError,
    AuthenticationError,
    UploadError,
    ExtensionLookupError,
    LogoutError,
    ConsentDeclinedError,
    PermissionDeniedError,
    PackageReadError,
    ConfirmationFileError,
    EnvironmentValidationError,
)
from .models import (
    CONFIRMATION_FIELDS,
    ConfirmationPrompts,
    EGOConfig,
    ExtensionMetadata,
    UploadedExtension,
    UploadResult,
    UserAuthentication,
    WorkflowState,
)

__all__ = [
    'CONFIRMATION_FIELDS',
    'ConfirmationPrompts',
    'EGOConfig',
    'ExtensionMetadata',
    'UploadedExtension',
    'UploadResult',
    'UserAuthentication',
    'WorkflowState',
    'EGOUploadError',
    'APIConnectionError',
    'APITimeoutError',
    'MalformedResponseError',
    'SchemaError',
    'APIStatusError',
    'AuthenticationError',
    'UploadError',
    'ExtensionLookupError',
    'LogoutError',
    'ConsentDeclinedError',
    'PermissionDeniedError',
    'PackageReadError',
    'ConfirmationFileError',
    'EnvironmentValidationError',
]
