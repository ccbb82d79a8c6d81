"""Display-time text cleaning.

Stored sessions keep the raw (sanitized) text; these helpers only shape what
is rendered and must be reapplied on every render.
"""

from __future__ import annotations

import re
from typing import assert_never

from ccshare.models.messages import (
    ContentBlock,
    ParsedMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
)

# Applied in order, each over the whole string.
STRIP_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"<system-reminder>.*?</system-reminder>", re.DOTALL),
    re.compile(r"<local-command-caveat>.*?</local-command-caveat>", re.DOTALL),
    re.compile(r"<user-prompt-submit-hook>.*?</user-prompt-submit-hook>", re.DOTALL),
    re.compile(r"<antml_thinking>.*?</antml_thinking>", re.DOTALL),
    re.compile(r"<user-memory-input>.*?</user-memory-input>", re.DOTALL),
    re.compile(r"<local-command-stdout>.*?</local-command-stdout>", re.DOTALL),
    re.compile(r"<local-command-stderr>.*?</local-command-stderr>", re.DOTALL),
    re.compile(r"<task-notification>.*?</task-notification>", re.DOTALL),
    re.compile(r"<command-args>.*?</command-args>", re.DOTALL),
    re.compile(r"<command-name>[^<]*</command-name>"),
    re.compile(r"<command-message>[^<]*</command-message>"),
    re.compile(r"\[Request interrupted by user(?:\s+for tool use)?\]"),
]

_COMMAND_NAME = re.compile(r"<command-name>([^<]+)</command-name>")
_COMMAND_MESSAGE = re.compile(r"<command-message>([^<]*)</command-message>")


def clean_user_text(text: str) -> str:
    """Strip internal instrumentation markup from user-authored text.

    A message made only of a slash-command invocation is reduced to
    ``/name`` (plus the command message when it says something else).
    """
    name_match = _COMMAND_NAME.search(text)
    message_match = _COMMAND_MESSAGE.search(text)

    result = text
    for pattern in STRIP_PATTERNS:
        result = pattern.sub("", result)
    result = result.strip()

    if name_match and not result:
        name = name_match.group(1).strip().lstrip("/")
        result = f"/{name}"
        command_message = message_match.group(1).strip() if message_match else ""
        if command_message and command_message.lstrip("/") != name:
            result += f" {command_message}"

    return result


def display_text(block: TextBlock, *, is_user: bool) -> str:
    """Text as it should be rendered for the message's author."""
    return clean_user_text(block.text) if is_user else block.text.strip()


def result_text(block: ToolResultBlock) -> str:
    """Flatten tool result content to a single string."""
    if isinstance(block.content, str):
        return block.content
    return "\n".join(item.text or "" for item in block.content)


def has_user_text(message: ParsedMessage) -> bool:
    """True if a user message has any text left after cleaning."""
    return any(
        isinstance(block, TextBlock) and clean_user_text(block.text) for block in message.content
    )


def has_visible_content(message: ParsedMessage, tool_use_ids: set[str]) -> bool:
    """True if rendering the message would produce anything.

    Tool results paired with a known tool call are rendered inside that call,
    so they do not count.
    """
    is_user = message.type == "user"
    return any(_is_visible(block, is_user, tool_use_ids) for block in message.content)


def _is_visible(block: ContentBlock, is_user: bool, tool_use_ids: set[str]) -> bool:
    match block:
        case TextBlock():
            return bool(display_text(block, is_user=is_user))
        case ThinkingBlock() | ToolUseBlock():
            return True
        case ToolResultBlock():
            return block.tool_use_id not in tool_use_ids
        case _:
            assert_never(block)
