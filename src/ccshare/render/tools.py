"""Presentation helpers for tool calls: summaries, languages, edit pairs, result pairing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

from ccshare.models.messages import ParsedMessage, ToolResultBlock, ToolUseBlock
from ccshare.render.display import result_text

FILE_TOOLS = frozenset({"read", "edit", "write", "notebookedit"})
_COMMAND_SUMMARY_LENGTH = 60
# `"question"="answer"` pairs in an AskUserQuestion result
_ANSWER = re.compile(r'"([^"]*?)"="([^"]*?)"')

# File extension to highlighter language name
_EXT_LANG_MAP: dict[str, str] = {
    "ts": "typescript",
    "tsx": "tsx",
    "js": "javascript",
    "jsx": "jsx",
    "mjs": "javascript",
    "cjs": "javascript",
    "py": "python",
    "rs": "rust",
    "go": "go",
    "json": "json",
    "jsonl": "json",
    "md": "markdown",
    "mdx": "markdown",
    "css": "css",
    "scss": "scss",
    "html": "html",
    "htm": "html",
    "xml": "xml",
    "svg": "xml",
    "yml": "yaml",
    "yaml": "yaml",
    "toml": "toml",
    "sh": "bash",
    "bash": "bash",
    "zsh": "bash",
    "sql": "sql",
    "rb": "ruby",
    "java": "java",
    "kt": "kotlin",
    "swift": "swift",
    "c": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "h": "c",
    "hpp": "cpp",
    "cs": "csharp",
    "php": "php",
    "lua": "lua",
    "graphql": "graphql",
    "proto": "protobuf",
}

_BASENAME_LANG_MAP: dict[str, str] = {
    "makefile": "makefile",
    "dockerfile": "docker",
}


def language_from_path(file_path: str) -> str | None:
    """Language name for a file path, from its basename or extension."""
    basename = PurePosixPath(file_path.replace("\\", "/")).name.lower()
    if basename in _BASENAME_LANG_MAP:
        return _BASENAME_LANG_MAP[basename]
    dot = basename.rfind(".")
    if dot == -1 or dot == len(basename) - 1:
        return None
    return _EXT_LANG_MAP.get(basename[dot + 1 :])


def tool_file_path(tool_input: dict[str, object]) -> str:
    for key in ("file_path", "path", "notebook_path"):
        value = tool_input.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def detect_language(tool_name: str, tool_input: dict[str, object]) -> str | None:
    """Language of a file tool's target, used to highlight its result."""
    if tool_name.lower() not in FILE_TOOLS:
        return None
    file_path = tool_file_path(tool_input)
    return language_from_path(file_path) if file_path else None


def tool_summary(tool_name: str, tool_input: dict[str, object]) -> str | None:
    """One-line summary shown next to a collapsed tool call."""
    name = tool_name.lower()
    if name in FILE_TOOLS:
        file_path = tool_file_path(tool_input)
        if file_path:
            parts = file_path.split("/")
            return f".../{'/'.join(parts[-2:])}" if len(parts) > 2 else file_path
        return None
    if name == "bash":
        command = tool_input.get("command")
        if isinstance(command, str) and command:
            if len(command) > _COMMAND_SUMMARY_LENGTH:
                return command[: _COMMAND_SUMMARY_LENGTH - 3] + "..."
            return command
        return None
    if name in {"glob", "grep"}:
        pattern = tool_input.get("pattern")
        return pattern if isinstance(pattern, str) else ""
    return None


def edit_pair(block: ToolUseBlock) -> tuple[str, str, str] | None:
    """``(file_path, before, after)`` for an Edit call, or None."""
    if block.name.lower() != "edit":
        return None
    before = block.input.get("old_string")
    after = block.input.get("new_string")
    if not isinstance(before, str) or not isinstance(after, str):
        return None
    return tool_file_path(block.input), before, after


def index_tool_results(
    messages: list[ParsedMessage],
) -> tuple[dict[str, ToolResultBlock], set[str]]:
    """Map tool_use_id to its result, plus the set of tool call ids present."""
    results: dict[str, ToolResultBlock] = {}
    tool_use_ids: set[str] = set()
    for message in messages:
        for block in message.content:
            if isinstance(block, ToolResultBlock):
                results[block.tool_use_id] = block
            elif isinstance(block, ToolUseBlock):
                tool_use_ids.add(block.id)
    return results, tool_use_ids


@dataclass(frozen=True)
class QuestionOption:
    label: str
    description: str
    selected: bool


@dataclass(frozen=True)
class AnsweredQuestion:
    """One AskUserQuestion prompt with the user's choice marked."""

    header: str
    question: str
    multi_select: bool
    options: tuple[QuestionOption, ...]
    other_answer: str | None = None


def selected_answers(text: str) -> list[tuple[str, str]]:
    """``(question, answer)`` pairs quoted in an AskUserQuestion result."""
    return _ANSWER.findall(text)


def ask_user_question(
    block: ToolUseBlock, result: ToolResultBlock | None
) -> list[AnsweredQuestion] | None:
    """The questions of an AskUserQuestion call, or None for any other tool.

    Answers are matched to their question by text. When no answer names a
    known question, every answer is checked against every question.
    """
    if block.name != "AskUserQuestion":
        return None
    raw = block.input.get("questions")
    items = [item for item in raw if isinstance(item, dict)] if isinstance(raw, list) else []
    pairs = selected_answers(result_text(result)) if result is not None else []
    texts = {_text(item.get("question")) for item in items}
    keyed = any(question in texts for question, _ in pairs)

    questions: list[AnsweredQuestion] = []
    for item in items:
        question = _text(item.get("question"))
        multi_select = item.get("multiSelect") is True
        answers = [answer for asked, answer in pairs if not keyed or asked == question]
        chosen = set(answers)
        if multi_select:
            chosen |= {part.strip() for answer in answers for part in answer.split(",")}

        raw_options = item.get("options")
        options = tuple(
            QuestionOption(
                label=_text(option.get("label")),
                description=_text(option.get("description")),
                selected=_text(option.get("label")) in chosen,
            )
            for option in (raw_options if isinstance(raw_options, list) else [])
            if isinstance(option, dict)
        )
        labels = {option.label for option in options}
        other = next(
            (answer for answer in answers if not _is_known_answer(answer, labels, multi_select)),
            None,
        )
        questions.append(
            AnsweredQuestion(
                header=_text(item.get("header")),
                question=question,
                multi_select=multi_select,
                options=options,
                other_answer=other,
            )
        )
    return questions


def _is_known_answer(answer: str, labels: set[str], multi_select: bool) -> bool:
    if answer in labels:
        return True
    return multi_select and all(part.strip() in labels for part in answer.split(","))


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""
