"""
Confirmation records

A confirmation record is a small JSON object mapping the upload
confirmation fields to the prompt texts the user accepted ahead of time,
as written by ``ego-upload confirm-upload``.
"""

import json
import logging
from typing import Any, Dict

from .models import ConfirmationPrompts
from .exceptions import ConfirmationFileError, PermissionDeniedError

logger = logging.getLogger(__name__)


def load_confirmations(path: str) -> Dict[str, Any]:
    """Load confirmed prompts from a file.

    Unknown keys are kept and later ignored. A document that is not a JSON
    object is rejected with a warning and treated as empty.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            contents = json.load(f)
    except PermissionError as e:
        raise PermissionDeniedError(
            f"Permission to read confirmations from {path} denied", path=path
        ) from e
    except OSError as e:
        raise ConfirmationFileError(
            f"Failed to read confirmations from {path}: {e.strerror or e}", path=path
        ) from e
    except ValueError as e:
        raise ConfirmationFileError(
            f"Confirmations in {path} are not valid JSON: {e}", path=path
        ) from e

    if isinstance(contents, dict):
        return contents

    logger.warning(f"Ignoring unexpected confirmations in {path}: {contents!r}")
    return {}


def save_confirmations(path: str, prompts: ConfirmationPrompts) -> None:
    """Write confirmed prompts to a file"""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(prompts.to_dict(), f, indent=2)
            f.write("\n")
    except PermissionError as e:
        raise PermissionDeniedError(
            f"Permission to write confirmations to {path} denied", path=path
        ) from e
    except OSError as e:
        raise ConfirmationFileError(
            f"Failed to write confirmations to {path}: {e.strerror or e}", path=path
        ) from e

    logger.debug(f"Saved confirmations to {path}")
