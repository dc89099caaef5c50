"""Optional system/user prompt text read from local files."""

import logging
from pathlib import Path

from pydantic import BaseModel

from chatrelay.configs.config import DEFAULT_ENCODING, resolve_path
from chatrelay.configs.system import PromptConfig

logger = logging.getLogger(__name__)


class Prompts(BaseModel):
    """Prompt text injected into a streaming request; either may be empty."""

    system_prompt: str = ""
    user_prompt: str = ""


def read_prompt_file(path: Path) -> str:
    """Return the stripped file contents, or ``""`` if absent or unreadable."""
    try:
        if not path.is_file():
            return ""
        return path.read_text(encoding=DEFAULT_ENCODING).strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read prompt file %s: %s", path, e)
        return ""


class PromptLoader:
    """Reads both prompt files on every call so edits apply without restart."""

    def __init__(self, config: PromptConfig) -> None:
        self._system_path = resolve_path(config.system_prompt_file)
        self._user_path = resolve_path(config.user_prompt_file)

    def load(self) -> Prompts:
        return Prompts(
            system_prompt=read_prompt_file(self._system_path),
            user_prompt=read_prompt_file(self._user_path),
        )
