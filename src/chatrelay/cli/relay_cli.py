"""Main CLI loop for interactive chat."""

import logging
import sys
from typing import TextIO

import httpx

from .client import ChatAPIClient
from .config import CLIConfig
from .formatter import ResponseFormatter

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit", "q")


class RelayCLI:
    """Interactive CLI for the chatrelay API.

    The conversation lives only in this process; every turn sends the
    whole history, as the server keeps no state.
    """

    def __init__(
        self,
        config: CLIConfig,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the CLI.

        Parameters
        ----------
        config
            CLI configuration.
        input_stream
            Input stream for user input (default: stdin).
        output_stream
            Output stream for responses (default: stdout).
        transport
            Optional httpx transport, used by tests.
        """
        self.config = config
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.client = ChatAPIClient(config, transport=transport)
        self.history: list[dict] = []

    async def run(self) -> None:
        """Run the interactive CLI loop."""
        try:
            self._print_welcome()
            while True:
                try:
                    query = self._get_user_input()
                    if not query.strip():
                        continue

                    if query.strip().lower() in EXIT_COMMANDS:
                        self._print("Goodbye!\n")
                        break

                    await self.send(query)

                except KeyboardInterrupt:
                    self._print("\n\nInterrupted. Use 'exit' or 'quit' to exit.\n")
                except EOFError:
                    self._print("\nGoodbye!\n")
                    break
        finally:
            await self.client.close()

    async def send(self, query: str) -> str | None:
        """Send one user turn; return the assembled reply, or ``None`` on error.

        Only successful replies are added to the history.
        """
        messages = [*self.history, {"role": "user", "content": query}]
        formatter = ResponseFormatter(self.output_stream)

        async for event in self.client.chat(messages):
            formatter.handle_event(event)

        reply = None if formatter.failed else formatter.content
        formatter.finish_response()
        self._print("\n")

        if reply is None:
            return None
        self.history = [*messages, {"role": "assistant", "content": reply}]
        return reply

    def _get_user_input(self) -> str:
        """Get user input from the input stream."""
        self._print("> ")
        line = self.input_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n\r")

    def _print_welcome(self) -> None:
        """Print welcome message."""
        self._print("chatrelay CLI - Interactive Chat Interface\n")
        self._print(f"Connected to: {self.config.chat_url} ({self.config.mode})\n")
        self._print(
            "Type your message and press Enter. Type 'exit' or 'quit' to exit.\n\n"
        )

    def _print(self, text: str) -> None:
        """Print text to output stream."""
        self.output_stream.write(text)
        self.output_stream.flush()


async def main(config: CLIConfig, *, debug: bool = False) -> None:
    """Run an interactive session; diagnostics go to stderr, replies to stdout."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    await RelayCLI(config).run()
