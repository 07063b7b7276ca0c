"""
Tests for the ego-upload command line interface
"""

import json
import logging
import os
import tempfile
import zipfile
from unittest.mock import Mock, patch

from typer.testing import CliRunner

from egoupload import __version__
from egoupload.cli import app
from egoupload.upload.exceptions import (
    APIConnectionError,
    AuthenticationError,
    ExtensionLookupError,
    MalformedResponseError,
    UploadError,
)
from egoupload.upload.models import ConfirmationPrompts, ExtensionMetadata, UploadedExtension


runner = CliRunner()

ENV = {"EGO_USERNAME": "alice", "EGO_PASSWORD": "secret", "EGO_API_URL": None, "EGO_REQUEST_TIMEOUT": None}


def create_mock_api_client(tos_prompt="I accept"):
    mock_client = Mock()
    mock_client.__enter__ = Mock(return_value=mock_client)
    mock_client.__exit__ = Mock(return_value=None)
    mock_client.fetch_confirmation_prompts.return_value = ConfirmationPrompts(
        shell_license_compliant="I agree", tos_compliant=tos_prompt
    )
    mock_client.login.return_value = "token-123"
    mock_client.upload.return_value = UploadedExtension(extension="demo@example.com", version=3)
    mock_client.query_extension.return_value = ExtensionMetadata(id=42, uuid="demo@example.com")
    mock_client.logout.return_value = True
    return mock_client


class TestCLI:
    """Test cases for the typer application"""

    def setup_method(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.package = os.path.join(self.tmp.name, "demo.zip")
        with zipfile.ZipFile(self.package, "w") as archive:
            archive.writestr("metadata.json", "{}")
        self.confirmations = os.path.join(self.tmp.name, "confirmations.json")
        with open(self.confirmations, "w") as f:
            json.dump({"shell_license_compliant": "I agree", "tos_compliant": "I accept"}, f)

    def teardown_method(self):
        self.tmp.cleanup()

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_upload_with_saved_confirmations(self, mock_api_client):
        mock_client = create_mock_api_client()
        mock_api_client.return_value = mock_client

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 0
        assert (
            "Successfully uploaded extension demo@example.com version 3, "
            "please find it at https://extensions.gnome.org/extension/42/"
        ) in result.output
        mock_client.logout.assert_called_once_with("token-123")

    @patch('egoupload.cli.confirm_prompt')
    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_upload_prompts_without_confirmations(self, mock_api_client, mock_confirm):
        mock_api_client.return_value = create_mock_api_client()
        mock_confirm.return_value = True

        result = runner.invoke(app, ["upload", self.package], env=ENV)

        assert result.exit_code == 0
        assert mock_confirm.call_count == 2

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_upload_with_stale_confirmations(self, mock_api_client):
        mock_client = create_mock_api_client(tos_prompt="I accept v2")
        mock_api_client.return_value = mock_client

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 1
        assert "You must confirm the license terms" in result.output
        mock_client.login.assert_not_called()

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_upload_login_failure(self, mock_api_client):
        mock_client = create_mock_api_client()
        mock_client.login.side_effect = AuthenticationError(
            "Login failed: Invalid credentials", detail="Invalid credentials", status_code=400
        )
        mock_api_client.return_value = mock_client

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 1
        assert "Login failed: Invalid credentials" in result.output
        assert "Traceback" not in result.output
        mock_client.upload.assert_not_called()

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_upload_rejected_lists_reasons(self, mock_api_client):
        mock_client = create_mock_api_client()
        mock_client.upload.side_effect = UploadError(
            "Upload failed: bad metadata", errors=["bad metadata", "[unsupported] shell-version"]
        )
        mock_api_client.return_value = mock_client

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 1
        assert "Upload failed; reasons:" in result.output
        assert "  - bad metadata" in result.output
        assert "  - [unsupported] shell-version" in result.output
        mock_client.logout.assert_called_once()

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_upload_username_flag(self, mock_api_client):
        mock_client = create_mock_api_client()
        mock_api_client.return_value = mock_client

        result = runner.invoke(
            app, ["upload", self.package, "-u", "bob", "-c", self.confirmations], env=ENV
        )

        assert result.exit_code == 0
        auth = mock_client.login.call_args.args[0]
        assert auth.username == "bob"
        assert auth.password == "secret"

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_upload_rejects_non_zip(self, mock_api_client):
        result = runner.invoke(app, ["upload", os.path.join(self.tmp.name, "demo.tar.gz")], env=ENV)

        assert result.exit_code == 1
        assert "does not appear to be a zip file" in result.output
        mock_api_client.assert_not_called()

    def test_upload_invalid_confirmations_file(self):
        with open(self.confirmations, "w") as f:
            f.write("{broken")

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_upload_invalid_api_url(self):
        env = dict(ENV, EGO_API_URL="not-a-url")

        result = runner.invoke(app, ["upload", self.package], env=env)

        assert result.exit_code == 1
        assert "Invalid API URL format" in result.output

    @patch('egoupload.cli.confirm_prompt')
    @patch('egoupload.cli.EGOAPIClient')
    def test_confirm_upload_writes_file(self, mock_api_client, mock_confirm):
        mock_api_client.return_value = create_mock_api_client()
        mock_confirm.return_value = True
        target = os.path.join(self.tmp.name, "new.json")

        result = runner.invoke(app, ["confirm-upload", target], env=ENV)

        assert result.exit_code == 0
        with open(target) as f:
            assert json.load(f) == {"shell_license_compliant": "I agree", "tos_compliant": "I accept"}

    @patch('egoupload.cli.confirm_prompt')
    @patch('egoupload.cli.EGOAPIClient')
    def test_confirm_upload_declined(self, mock_api_client, mock_confirm):
        mock_api_client.return_value = create_mock_api_client()
        mock_confirm.side_effect = [True, False]
        target = os.path.join(self.tmp.name, "new.json")

        result = runner.invoke(app, ["confirm-upload", target], env=ENV)

        assert result.exit_code == 1
        assert "You must accept the license terms and the terms of service" in result.output
        assert not os.path.exists(target)

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_connection_failure_reported_once_on_stderr(self, mock_api_client):
        mock_client = create_mock_api_client()
        mock_client.fetch_confirmation_prompts.side_effect = APIConnectionError(
            "Connection failed for api/schema/"
        )
        mock_api_client.return_value = mock_client

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 1
        assert result.stderr.count("Connection failed for api/schema/") == 1
        assert "Connection failed" not in result.stdout
        mock_client.login.assert_not_called()

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_malformed_response_reported_once_on_stderr(self, mock_api_client):
        mock_client = create_mock_api_client()
        mock_client.login.side_effect = MalformedResponseError(
            "Login response does not contain a session token"
        )
        mock_api_client.return_value = mock_client

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 1
        assert result.stderr.count("Login response does not contain a session token") == 1
        assert "session token" not in result.stdout

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_success_message_on_stdout(self, mock_api_client):
        mock_api_client.return_value = create_mock_api_client()

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 0
        assert "please find it at https://extensions.gnome.org/extension/42/" in result.stdout
        assert result.stderr == ""

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_metadata_lookup_warning_on_stderr(self, mock_api_client):
        mock_client = create_mock_api_client()
        mock_client.query_extension.side_effect = ExtensionLookupError(
            "Failed to query extension metadata: [unsupported] uuid", detail="[unsupported] uuid"
        )
        mock_api_client.return_value = mock_client

        result = runner.invoke(app, ["upload", self.package, "-c", self.confirmations], env=ENV)

        assert result.exit_code == 0
        assert "[unsupported] uuid" in result.stderr
        assert "failed to look up the extension page" not in result.stdout
        assert "Successfully uploaded extension demo@example.com version 3" in result.stdout

    @patch('egoupload.upload.upload_orchestrator.EGOAPIClient')
    def test_verbose_logs_environment_and_timing(self, mock_api_client, caplog):
        mock_api_client.return_value = create_mock_api_client()
        caplog.set_level(logging.DEBUG, logger="egoupload.cli")

        result = runner.invoke(
            app, ["-v", "upload", self.package, "-c", self.confirmations], env=ENV
        )

        assert result.exit_code == 0
        assert "Upload workflow finished in" in caplog.text
        assert "'EGO_USERNAME': 'alice'" in caplog.text
        assert "'EGO_PASSWORD': '***'" in caplog.text
        assert "secret" not in caplog.text
