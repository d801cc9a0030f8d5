"""System clipboard access."""

import logging

import pyperclip

from ..errors import ClipboardError

logger = logging.getLogger(__name__)


class Clipboard:
    """Thin wrapper over pyperclip that raises ClipboardError on failure."""

    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Failed to copy text: {e}") from e
        logger.debug(f"Copied {len(text)} chars to clipboard")
