"""Response formatter that assembles and displays the assistant reply."""

import logging
from typing import TextIO

logger = logging.getLogger(__name__)

ERROR_FALLBACK_MESSAGE = "抱歉，发生了错误。请稍后再试。"


class ResponseFormatter:
    """Prints content fragments as they arrive and keeps the assembled text."""

    def __init__(self, output: TextIO):
        """Initialize the formatter.

        Parameters
        ----------
        output
            File-like object to write output to.
        """
        self.output = output
        self.content_buffer: list[str] = []
        self.content_started = False
        self.failed = False

    @property
    def content(self) -> str:
        """The assistant message assembled so far."""
        return "".join(self.content_buffer)

    def handle_event(self, event: dict) -> None:
        """Handle a single event and display it appropriately.

        Parameters
        ----------
        event
            Event dict produced by ``ChatAPIClient.chat``.
        """
        event_type = event.get("type")

        if event_type == "content":
            content = event.get("content", "")
            self.content_buffer.append(content)
            if not self.content_started:
                self._print("\nAssistant:\n")
                self.content_started = True
            self._print(content)

        elif event_type == "error":
            self.failed = True
            logger.debug(
                "Error [%s]: %s", event.get("code", "UNKNOWN"), event.get("message")
            )
            self._print(f"\n{ERROR_FALLBACK_MESSAGE}\n")

        elif event_type == "done":
            pass

        else:
            logger.debug("Unknown event type: %s, event: %s", event_type, event)

    def finish_response(self) -> None:
        """End the current reply and reset for the next one."""
        if self.content_started:
            self._print("\n")
        self.content_buffer.clear()
        self.content_started = False
        self.failed = False

    def _print(self, text: str) -> None:
        """Print text to output."""
        self.output.write(text)
        self.output.flush()
