"""Tests for prompt files and upstream message assembly."""

from chatrelay.configs.system import PromptConfig
from chatrelay.core.models import Message
from chatrelay.core.prompts import PromptLoader, Prompts, read_prompt_file
from chatrelay.core.service.completion import select_prompt
from chatrelay.core.service.streaming import build_messages

# ---------------------------------------------------------------------------
# Prompt files
# ---------------------------------------------------------------------------


class TestReadPromptFile:
    def test_absent_file_is_empty(self, tmp_path):
        assert read_prompt_file(tmp_path / "missing.txt") == ""

    def test_content_is_stripped(self, tmp_path):
        path = tmp_path / "p.txt"
        path.write_text("\n  你是一个助手。 \n\n", encoding="utf-8")
        assert read_prompt_file(path) == "你是一个助手。"

    def test_whitespace_only_file_is_empty(self, tmp_path):
        path = tmp_path / "p.txt"
        path.write_text(" \n\t\n", encoding="utf-8")
        assert read_prompt_file(path) == ""

    def test_directory_is_treated_as_absent(self, tmp_path):
        assert read_prompt_file(tmp_path) == ""

    def test_undecodable_file_is_empty(self, tmp_path):
        path = tmp_path / "p.txt"
        path.write_bytes(b"\xff\xfe\xfa")
        assert read_prompt_file(path) == ""


class TestPromptLoader:
    def test_prompts_are_independent(self, tmp_path):
        (tmp_path / "user.txt").write_text("Be nice.", encoding="utf-8")
        loader = PromptLoader(
            PromptConfig(
                system_prompt_file=tmp_path / "system.txt",
                user_prompt_file=tmp_path / "user.txt",
            )
        )

        assert loader.load() == Prompts(system_prompt="", user_prompt="Be nice.")

    def test_reads_current_contents_each_time(self, tmp_path):
        system = tmp_path / "system.txt"
        loader = PromptLoader(
            PromptConfig(system_prompt_file=system, user_prompt_file=tmp_path / "u.txt")
        )

        system.write_text("one", encoding="utf-8")
        first = loader.load()
        system.write_text("two", encoding="utf-8")
        second = loader.load()

        assert (first.system_prompt, second.system_prompt) == ("one", "two")


# ---------------------------------------------------------------------------
# Message assembly
# ---------------------------------------------------------------------------


def _user(text: str) -> Message:
    return Message(role="user", content=text)


def _assistant(text: str) -> Message:
    return Message(role="assistant", content=text)


class TestBuildMessages:
    def test_no_prompts_keeps_conversation(self):
        messages = [_user("a"), _assistant("b"), _user("c")]
        assert build_messages(messages, Prompts()) == messages

    def test_system_prompt_is_prepended(self):
        result = build_messages([_user("hi")], Prompts(system_prompt="sys"))
        assert result == [Message(role="system", content="sys"), _user("hi")]

    def test_user_prompt_is_appended_to_last_user_turn(self):
        messages = [_user("first"), _assistant("reply"), _user("second")]

        result = build_messages(messages, Prompts(user_prompt="extra"))

        assert result[-1] == _user("second\n\nextra")
        assert result[:-1] == messages[:-1]
        # The caller's list and messages are left untouched.
        assert messages[-1] == _user("second")

    def test_custom_separator(self):
        result = build_messages(
            [_user("q")], Prompts(user_prompt="p"), user_prompt_separator=" | "
        )
        assert result == [_user("q | p")]

    def test_user_prompt_skipped_when_last_turn_is_not_user(self):
        messages = [_user("q"), _assistant("a")]
        assert build_messages(messages, Prompts(user_prompt="p")) == messages

    def test_empty_conversation_gets_only_system_prompt(self):
        result = build_messages([], Prompts(system_prompt="s", user_prompt="p"))
        assert result == [Message(role="system", content="s")]


class TestSelectPrompt:
    def test_latest_user_turn_wins(self):
        messages = [_user("old"), _assistant("x"), _user("new"), _assistant("y")]
        assert select_prompt(messages, "default") == "new"

    def test_default_when_no_user_turn(self):
        assert select_prompt([], "你好") == "你好"
        assert select_prompt([_assistant("x")], "你好") == "你好"

    def test_default_when_latest_user_turn_is_empty(self):
        assert select_prompt([_user("earlier"), _user("")], "你好") == "你好"
