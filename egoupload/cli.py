"""
CLI for ego-upload: upload GNOME extensions to extensions.gnome.org.
"""
import logging
import sys
from typing import Optional

import typer
from rich.console import Console

from egoupload import __version__
from egoupload.rich_utils.ui_helpers import ask_password, ask_username, confirm_prompt, get_console
from egoupload.upload.api_client import EGOAPIClient
from egoupload.upload.confirmations import load_confirmations, save_confirmations
from egoupload.upload.consent import ConsentManager
from egoupload.upload.environment_detector import EGOEnvironmentDetector
from egoupload.upload.exceptions import EGOUploadError, UploadError
from egoupload.upload.models import UploadResult
from egoupload.upload.upload_orchestrator import UploadOrchestrator


# Initialize Typer app
app = typer.Typer(help="Upload GNOME extensions to extensions.gnome.org")

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def upload_command(
    zip_file: str = typer.Argument(..., help="The extension package to upload"),
    username: Optional[str] = typer.Option(
        None, "-u", "--username", help="Your e.g.o username (or set EGO_USERNAME)"
    ),
    confirmations: Optional[str] = typer.Option(
        None,
        "-c",
        "--confirmations",
        help="A file with confirmations to the EGO upload prompts, as generated by 'confirm-upload'",
    ),
):
    """Upload an extension package to extensions.gnome.org."""

    console = get_console()
    err_console = get_console(stderr=True)

    try:
        detector = EGOEnvironmentDetector()
        config = detector.get_config()
        logger.debug(f"Environment: {detector.get_environment_summary()}")

        saved_confirmations = load_confirmations(confirmations) if confirmations else None

        orchestrator = UploadOrchestrator(
            config,
            auth_provider=lambda: detector.resolve_authentication(
                username,
                prompt_username=lambda: ask_username(console),
                prompt_password=lambda name: ask_password(name, console),
            ),
            prompter=lambda text: confirm_prompt(text, console),
            console=console,
            error_console=err_console,
        )
        result = orchestrator.execute_upload_workflow(zip_file, saved_confirmations)
        logger.debug(f"Upload workflow finished in {result.total_time_seconds:.2f}s")

    except KeyboardInterrupt:
        err_console.print("\n⚠️ Upload interrupted by user", style="yellow")
        sys.exit(130)
    except EGOUploadError as e:
        _print_failure(err_console, e.message, e.errors if isinstance(e, UploadError) else None)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        _print_failure(err_console, f"Upload failed: {str(e)}")
        sys.exit(1)

    if not result.success:
        _print_failure(err_console, result.error, result.errors)
        sys.exit(1)

    _print_success(console, result)


def confirm_upload_command(
    target_file: str = typer.Argument(..., help="Where to save the confirmations"),
):
    """Confirm upload prompts ahead of time."""

    console = get_console()
    err_console = get_console(stderr=True)

    try:
        config = EGOEnvironmentDetector().get_config()
        with EGOAPIClient(config) as client:
            consent = ConsentManager(client, prompter=lambda text: confirm_prompt(text, console))
            prompts = consent.record_confirmation()
        save_confirmations(target_file, prompts)

    except KeyboardInterrupt:
        err_console.print("\n⚠️ Confirmation interrupted by user", style="yellow")
        sys.exit(130)
    except EGOUploadError as e:
        _print_failure(err_console, e.message)
        sys.exit(1)

    console.print(f"✅ Saved confirmations to {target_file}", style="green", soft_wrap=True)


def _print_success(console: Console, result: UploadResult) -> None:
    uploaded = result.uploaded
    message = f"Successfully uploaded extension {uploaded.extension} version {uploaded.version}"
    if result.extension_url:
        message += f", please find it at {result.extension_url}"
    console.print(message, style="green", soft_wrap=True, markup=False)


def _print_failure(console: Console, error: str, reasons: Optional[list] = None) -> None:
    if reasons:
        console.print("❌ Upload failed; reasons:", style="red")
        for reason in reasons:
            console.print(f"  - {reason}", style="red", soft_wrap=True, markup=False)
    else:
        console.print(f"❌ {error}", style="red", soft_wrap=True, markup=False)


def version_callback(value: bool):
    if value:
        typer.echo(f"ego-upload {__version__}")
        raise typer.Exit()


# Register commands
app.command("upload", help="Upload an extension package to extensions.gnome.org.")(upload_command)
app.command("confirm-upload", help="Confirm upload prompts ahead of time.")(confirm_upload_command)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show the version and exit"
    ),
):
    """ego-upload - Upload GNOME extensions to extensions.gnome.org.

    Run 'ego-upload confirm-upload FILE' to record confirmations ahead of time.
    Run 'ego-upload upload ZIP_FILE' to upload an extension package.
    """
    configure_logging(verbose)
