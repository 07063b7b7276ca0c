"""
Consent Manager

Decides whether the user has agreed to the current upload confirmation
prompts, either live or through a previously recorded confirmation file.
Consent always refers to the exact wording currently served by e.g.o.
"""

import logging
from typing import Any, Callable, Dict, Optional

from .api_client import EGOAPIClient
from .models import CONFIRMATION_FIELDS, ConfirmationPrompts
from .exceptions import ConsentDeclinedError


class ConsentManager:
    """Verifies and records confirmations of the e.g.o upload prompts"""

    def __init__(self, client: EGOAPIClient, prompter: Callable[[str], bool]):
        self.client = client
        self.prompter = prompter
        self.logger = logging.getLogger(self.__class__.__name__)

    def verify_confirmed_prompts(self, saved_record: Optional[Dict[str, Any]]) -> bool:
        """Whether the user confirmed all upload prompts, live or ahead of time.

        The prompts are always fetched first so that changed wording is
        detected. Without a saved record the user is asked for each prompt;
        with one, every field must match the current text exactly.
        """
        prompts = self.client.fetch_confirmation_prompts()

        if saved_record is None:
            return self._prompt_for_confirmation(prompts)

        if prompts.matches(saved_record):
            self.logger.debug("Saved confirmations match the current prompts")
            return True

        stale = [field for field in CONFIRMATION_FIELDS
                 if saved_record.get(field) != getattr(prompts, field)]
        self.logger.info(f"Saved confirmations do not match current prompts: {', '.join(stale)}")
        return False

    def record_confirmation(self) -> ConfirmationPrompts:
        """Ask the user to confirm all prompts and return them for saving"""
        prompts = self.client.fetch_confirmation_prompts()
        if not self._prompt_for_confirmation(prompts):
            raise ConsentDeclinedError(
                "You must accept the license terms and the terms of service"
            )
        return prompts

    def _prompt_for_confirmation(self, prompts: ConfirmationPrompts) -> bool:
        # One prompt after another; stop at the first decline.
        for field in CONFIRMATION_FIELDS:
            if not self.prompter(getattr(prompts, field)):
                self.logger.debug(f"Confirmation declined: {field}")
                return False
        return True
