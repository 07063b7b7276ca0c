"""
Upload Orchestrator for e.g.o

Coordinates the complete upload workflow: consent, login, upload,
metadata lookup and logout, with user feedback on a Rich console.
The session token is always revoked once login succeeded, whatever
happens afterwards.
"""

import logging
import os
import time
from typing import Any, Callable, Dict, Optional

from rich.console import Console

from .models import (
    EGOConfig,
    UploadResult,
    UserAuthentication,
    WorkflowState,
)
from .api_client import EGOAPIClient
from .consent import ConsentManager
from .file_validator import FileValidator
from .exceptions import AuthenticationError, EGOUploadError, UploadError


CONSENT_REQUIRED_MESSAGE = (
    "You must confirm the license terms and terms of service to upload an extension!"
)


class UploadOrchestrator:
    """Coordinates the complete upload workflow"""

    def __init__(
        self,
        config: EGOConfig,
        auth_provider: Callable[[], UserAuthentication],
        prompter: Callable[[str], bool],
        console: Console = None,
        error_console: Console = None,
    ):
        self.config = config
        self.auth_provider = auth_provider
        self.prompter = prompter
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.validator = FileValidator()
        self.logger = logging.getLogger(self.__class__.__name__)

    def execute_upload_workflow(
        self,
        package_path: str,
        saved_confirmations: Optional[Dict[str, Any]] = None,
    ) -> UploadResult:
        """Execute the complete upload workflow for one package.

        Failures are returned in the result, never printed; reporting them
        is up to the caller.
        """
        start_time = time.time()
        result = self._run_workflow(package_path, saved_confirmations)
        result.total_time_seconds = time.time() - start_time
        return result

    def _run_workflow(
        self,
        package_path: str,
        saved_confirmations: Optional[Dict[str, Any]],
    ) -> UploadResult:
        state = WorkflowState.IDLE

        try:
            # Step 0: Validation
            validation = self.validator.validate_package(package_path)
            if not validation.is_valid:
                return self._aborted(validation.error_message)
            file_bytes = self.validator.read_package(package_path)
            file_name = os.path.basename(package_path)

            with EGOAPIClient(self.config) as client:
                # Step 1: Consent
                consent = ConsentManager(client, self.prompter)
                if not consent.verify_confirmed_prompts(saved_confirmations):
                    return self._aborted(CONSENT_REQUIRED_MESSAGE)
                state = WorkflowState.CONSENT_CHECKED

                # Step 2: Session
                auth = self.auth_provider()
                self.console.print(f"🔐 Logging in as {auth.username}...", style="cyan", markup=False)
                token = client.login(auth)
                state = WorkflowState.AUTHENTICATED

                # Step 3: Upload, then Step 4: Cleanup on every exit path
                logged_out = False
                try:
                    result = self._upload_and_lookup(client, token, file_bytes, file_name)
                except EGOUploadError as e:
                    result = self._failed(e, state)
                finally:
                    logged_out = client.logout(token)

                if logged_out:
                    if result.success:
                        result.state = WorkflowState.LOGGED_OUT
                else:
                    result.logout_error = "Logout failed; the session token stays valid until it expires"
                    self._warn(result.logout_error)

            return result

        except AuthenticationError as e:
            self.logger.debug(f"Login rejected with status {e.status_code}")
            return self._failed(e, state)

        except EGOUploadError as e:
            return self._failed(e, state)

    def _upload_and_lookup(
        self,
        client: EGOAPIClient,
        token: str,
        file_bytes: bytes,
        file_name: str,
    ) -> UploadResult:
        """Upload the package, then look up the page of the new version"""
        size_kb = len(file_bytes) / 1024
        self.console.print(f"📤 Uploading {file_name} ({size_kb:.1f}KB)...", style="cyan", markup=False)
        uploaded = client.upload(token, file_bytes, file_name)
        self.logger.info(f"Uploaded {uploaded.extension} version {uploaded.version}")

        result = UploadResult(
            success=True,
            state=WorkflowState.UPLOADED,
            uploaded=uploaded,
        )

        # The upload already changed server state, so a failed lookup only
        # costs the extension URL.
        try:
            metadata = client.query_extension(token, uploaded.extension)
        except EGOUploadError as e:
            self.logger.warning(f"Metadata lookup failed after upload: {e.message}")
            result.metadata_error = e.message
            self._warn(f"Uploaded, but failed to look up the extension page: {e.message}")
            return result

        result.metadata = metadata
        result.extension_url = self.config.extension_url(metadata.id)
        result.state = WorkflowState.METADATA_FETCHED
        return result

    def _warn(self, message: str) -> None:
        # Server text may contain square brackets
        self.error_console.print(f"⚠️  {message}", style="yellow", soft_wrap=True, markup=False)

    def _aborted(self, error: str) -> UploadResult:
        return UploadResult(success=False, state=WorkflowState.ABORTED, error=error)

    def _failed(self, error: EGOUploadError, reached: WorkflowState) -> UploadResult:
        self.logger.debug(f"Workflow aborted after reaching {reached.value}: {error.message}")
        result = self._aborted(error.message)
        if isinstance(error, UploadError):
            result.errors = error.errors
        return result
