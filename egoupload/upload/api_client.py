"""
e.g.o API Client

Handles all API interactions with extensions.gnome.org: login, logout,
extension upload, extension lookup and the API schema holding the upload
confirmation prompts.
"""

import logging
from typing import Any, Dict, List, Optional, Type
from urllib.parse import urljoin

import backoff
import requests

from egoupload.utils.api_error_handler import handle_external_api_errors

from .models import (
    CONFIRMATION_FIELDS,
    ConfirmationPrompts,
    EGOConfig,
    ExtensionMetadata,
    UploadedExtension,
    UserAuthentication,
)
from .exceptions import (
    APIConnectionError,
    AuthenticationError,
    ExtensionLookupError,
    LogoutError,
    MalformedResponseError,
    SchemaError,
    UploadError,
)


LOGIN_ENDPOINT = "api/v1/accounts/login/"
LOGOUT_ENDPOINT = "api/v1/accounts/logout/"
UPLOAD_ENDPOINT = "api/v1/extensions"
EXTENSION_ENDPOINT = "api/v1/extensions/{uuid}/"
SCHEMA_ENDPOINT = "api/schema/"

# Only idempotent GET requests are retried, and only on transport failures.
MAX_TRIES = 3


class EGOAPIClient:
    """Handles all API interactions with the e.g.o server"""

    def __init__(self, config: EGOConfig):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.session = requests.Session()
        self.session.headers.update(config.get_headers())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.session.close()

    @handle_external_api_errors(endpoint=LOGIN_ENDPOINT)
    def login(self, auth: UserAuthentication) -> str:
        """POST /api/v1/accounts/login/ and return the session token"""
        payload = {
            "login": auth.username,
            "password": auth.password,
        }
        response = self.session.post(
            self._url(LOGIN_ENDPOINT),
            json=payload,
            timeout=self.config.request_timeout,
        )

        if response.status_code >= 400:
            detail = self._read_detail(response)
            raise AuthenticationError(
                f"Login failed: {detail}",
                detail=detail,
                endpoint=LOGIN_ENDPOINT,
                status_code=response.status_code,
            )

        data = self._read_json(response, LOGIN_ENDPOINT)
        token = data.get("token")
        token = token.get("token") if isinstance(token, dict) else None
        if not isinstance(token, str) or not token:
            raise MalformedResponseError(
                "Login response does not contain a session token",
                endpoint=LOGIN_ENDPOINT,
                status_code=response.status_code,
            )

        self.logger.debug(f"Logged in as {auth.username}")
        return token

    @handle_external_api_errors(endpoint=LOGOUT_ENDPOINT, return_on_error=False, suppress_errors=True)
    def logout(self, token: str) -> bool:
        """POST /api/v1/accounts/logout/, revoking the token.

        Never raises; a failure is logged and reported as ``False``.
        """
        response = self.session.post(
            self._url(LOGOUT_ENDPOINT),
            json={"revoke_token": True},
            headers=self._authorization(token),
            timeout=self.config.request_timeout,
        )

        if response.status_code >= 400:
            detail = self._read_detail(response)
            raise LogoutError(
                f"Logout failed: {detail}",
                detail=detail,
                endpoint=LOGOUT_ENDPOINT,
                status_code=response.status_code,
            )

        self.logger.debug("Session token revoked")
        return True

    @handle_external_api_errors(endpoint=UPLOAD_ENDPOINT)
    def upload(self, token: str, file_bytes: bytes, file_name: str) -> UploadedExtension:
        """POST /api/v1/extensions with the extension package"""
        data = {
            "shell_license_compliant": "true",
            "tos_compliant": "true",
        }
        files = {
            "source": (file_name, file_bytes, "application/zip"),
        }
        response = self.session.post(
            self._url(UPLOAD_ENDPOINT),
            data=data,
            files=files,
            headers=self._authorization(token),
            timeout=self.config.request_timeout,
        )

        if response.status_code >= 400:
            errors = self._read_messages(response)
            raise UploadError(
                f"Upload failed: {errors[0]}",
                errors=errors,
                detail=errors[0],
                endpoint=UPLOAD_ENDPOINT,
                status_code=response.status_code,
            )

        body = self._read_json(response, UPLOAD_ENDPOINT)
        return UploadedExtension(
            extension=self._require(body, "extension", str, UPLOAD_ENDPOINT),
            version=self._require(body, "version", int, UPLOAD_ENDPOINT),
        )

    @backoff.on_exception(
        backoff.expo,
        APIConnectionError,
        max_tries=MAX_TRIES,
        base=1,
        max_value=60
    )
    @handle_external_api_errors(endpoint=EXTENSION_ENDPOINT)
    def query_extension(self, token: str, uuid: str) -> ExtensionMetadata:
        """GET /api/v1/extensions/{uuid}/"""
        endpoint = EXTENSION_ENDPOINT.format(uuid=uuid)
        response = self.session.get(
            self._url(endpoint),
            headers=self._authorization(token),
            timeout=self.config.request_timeout,
        )

        if response.status_code >= 400:
            detail = self._read_detail(response)
            raise ExtensionLookupError(
                f"Failed to query extension metadata: {detail}",
                detail=detail,
                endpoint=endpoint,
                status_code=response.status_code,
            )

        body = self._read_json(response, endpoint)
        return ExtensionMetadata(
            id=self._require(body, "id", int, endpoint),
            uuid=self._require(body, "uuid", str, endpoint),
        )

    @backoff.on_exception(
        backoff.expo,
        APIConnectionError,
        max_tries=MAX_TRIES,
        base=1,
        max_value=60
    )
    @handle_external_api_errors(endpoint=SCHEMA_ENDPOINT)
    def fetch_confirmation_prompts(self) -> ConfirmationPrompts:
        """GET /api/schema/ and extract the upload confirmation prompts.

        The prompt texts are the titles of the confirmation fields of the
        ``ExtensionUpload`` component in the OpenAPI schema.
        """
        response = self.session.get(
            self._url(SCHEMA_ENDPOINT),
            timeout=self.config.request_timeout,
        )

        if response.status_code >= 400:
            raise SchemaError(
                f"Failed to fetch API schema: HTTP {response.status_code}",
                endpoint=SCHEMA_ENDPOINT,
                status_code=response.status_code,
            )

        data = self._read_json(response, SCHEMA_ENDPOINT, error_class=SchemaError)
        try:
            properties = data["components"]["schemas"]["ExtensionUpload"]["properties"]
        except (KeyError, TypeError):
            raise SchemaError(
                "API schema does not describe extension uploads",
                endpoint=SCHEMA_ENDPOINT,
            )

        prompts = {}
        for field in CONFIRMATION_FIELDS:
            field_schema = properties.get(field) if isinstance(properties, dict) else None
            title = field_schema.get("title") if isinstance(field_schema, dict) else None
            if not isinstance(title, str):
                raise SchemaError(
                    f"Failed to find confirmation prompt for field {field}",
                    endpoint=SCHEMA_ENDPOINT,
                )
            prompts[field] = title

        return ConfirmationPrompts(**prompts)

    def _url(self, endpoint: str) -> str:
        return urljoin(self.config.api_url.rstrip("/") + "/", endpoint)

    def _authorization(self, token: str) -> Dict[str, str]:
        return {"Authorization": f"Token {token}"}

    def _read_json(
        self,
        response: requests.Response,
        endpoint: str,
        error_class: Type[MalformedResponseError] = MalformedResponseError,
    ) -> Dict[str, Any]:
        """Decode a successful response body, which must be a JSON object"""
        try:
            data = response.json()
        except ValueError:
            raise error_class(
                f"Response from {endpoint} is not valid JSON",
                endpoint=endpoint,
                status_code=response.status_code,
            )
        if not isinstance(data, dict):
            raise error_class(
                f"Response from {endpoint} is not a JSON object",
                endpoint=endpoint,
                status_code=response.status_code,
            )
        return data

    def _require(self, body: Dict[str, Any], field: str, expected: type, endpoint: str):
        value = body.get(field)
        # bool is an int subclass but never a valid id or version
        if not isinstance(value, expected) or isinstance(value, bool):
            raise MalformedResponseError(
                f"Response from {endpoint} has no valid '{field}' field",
                endpoint=endpoint,
            )
        return value

    def _read_detail(self, response: requests.Response) -> str:
        """Server-provided detail message of an error response"""
        return self._read_messages(response)[0]

    def _read_messages(self, response: requests.Response) -> List[str]:
        """Server-provided messages of an error response, never empty"""
        try:
            data = response.json()
        except ValueError:
            data = None

        messages = _collect_messages(data)
        if not messages:
            text = (response.text or "").strip()[:200]
            messages = [text or f"HTTP {response.status_code}"]
        return messages


def _collect_messages(data: Any, field: Optional[str] = None) -> List[str]:
    """Flatten a ``{"detail": ...}`` body or a validation error mapping"""
    if isinstance(data, str):
        return [f"{field}: {data}" if field else data]
    if isinstance(data, list):
        messages = []
        for item in data:
            messages.extend(_collect_messages(item, field))
        return messages
    if isinstance(data, dict):
        if isinstance(data.get("detail"), str):
            return [data["detail"]]
        messages = []
        for key, value in data.items():
            label = None if key == "non_field_errors" else key
            messages.extend(_collect_messages(value, label))
        return messages
    return []
