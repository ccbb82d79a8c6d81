"""Content sanitizer: path anonymization, secret redaction, tool output truncation.

This is a best-effort, pattern-based filter. It does not guarantee that every
secret is removed from a session.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, assert_never

from ccshare.models.messages import (
    ContentBlock,
    ParsedMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolResultItem,
    ToolUseBlock,
)
from ccshare.models.sessions import ParsedSession

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"
MAX_TOOL_RESULT_SIZE = 10_000
TRUNCATE_KEEP = 500
FALLBACK_HOME = "/home/user"

# Ordered: vendor prefixes (case-sensitive) first, generic key=value rule last.
SECRET_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\bsk-[a-zA-Z0-9_-]{20,}\b"),  # OpenAI / generic
    re.compile(r"\bsk-ant-[a-zA-Z0-9_-]{20,}\b"),  # Anthropic
    re.compile(r"\bghp_[a-zA-Z0-9]{36,}\b"),  # GitHub personal access
    re.compile(r"\bgho_[a-zA-Z0-9]{36,}\b"),  # GitHub OAuth
    re.compile(r"\bghs_[a-zA-Z0-9]{36,}\b"),  # GitHub App
    re.compile(r"\bghu_[a-zA-Z0-9]{36,}\b"),  # GitHub user-to-server
    re.compile(r"\bxoxb-[a-zA-Z0-9-]+\b"),  # Slack bot
    re.compile(r"\bxoxp-[a-zA-Z0-9-]+\b"),  # Slack user
    re.compile(r"\bAIza[a-zA-Z0-9_-]{35}\b"),  # Google
    re.compile(
        r"\b[A-Z_]*(?:SECRET|TOKEN|PASSWORD|API_KEY|APIKEY|PRIVATE_KEY)[A-Z_]*"
        r"\s*[=:]\s*[\"']?(?!\[REDACTED\])[^\s\"']{8,}[\"']?",
        re.IGNORECASE,
    ),
]

# Argument names whose string values are redacted outright in tool inputs:
# the last word names a credential once camelCase is split on `_`.
_SECRET_KEY = re.compile(r"(?:^|[_-])(?:secret|token|password|passwd|api_?key|private_?key)$")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
# A path prefix only matches whole components.
_PATH_END = r"(?![\w-]|\.\w)"
_MIN_SECRET_LENGTH = 8

# Generic fallbacks for paths of users other than the one sanitizing.
_GENERIC_HOME_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"/Users/[a-zA-Z0-9._-]+/"), "~/"),
    (re.compile(r"/home/[a-zA-Z0-9._-]+/"), "~/"),
]


def resolve_home_dir() -> str:
    """Home directory from the environment, or a fixed placeholder."""
    return os.environ.get("HOME") or os.environ.get("USERPROFILE") or FALLBACK_HOME


def sanitize_paths(
    text: str, project_path: str | None = None, *, home_dir: str | None = None
) -> str:
    """Replace absolute paths with home-relative or project-relative ones.

    Specific substitutions run before the generic patterns, which would
    otherwise also match the home directory.
    """
    home = resolve_home_dir() if home_dir is None else home_dir
    home = home.rstrip("/\\") if len(home) > 1 else home
    result = text

    if home and home != "/":
        result = _replace_path(result, home, "~")

    if project_path and len(project_path) > 1:
        project_path = project_path.rstrip("/\\")
        result = _replace_path(result, project_path, ".")
        if _is_under(project_path, home):
            result = _replace_path(result, "~" + project_path[len(home) :], ".")

    for pattern, replacement in _GENERIC_HOME_PATTERNS:
        result = pattern.sub(replacement, result)

    return result


def redact_secrets(text: str) -> str:
    """Replace secret-shaped substrings with the redaction marker."""
    result = text
    for pattern in SECRET_PATTERNS:
        result = pattern.sub(REDACTED, result)
    return result


def truncate_text(text: str) -> str:
    """Keep the head and tail of oversized text around a removal marker."""
    if len(text) <= MAX_TOOL_RESULT_SIZE:
        return text
    removed = len(text) - TRUNCATE_KEEP * 2
    return (
        text[:TRUNCATE_KEEP]
        + f"\n\n[truncated: {removed:,} characters removed]\n\n"
        + text[-TRUNCATE_KEEP:]
    )


def sanitize_text(
    text: str, project_path: str | None = None, *, home_dir: str | None = None
) -> str:
    return redact_secrets(sanitize_paths(text, project_path, home_dir=home_dir))


def sanitize_block(
    block: ContentBlock, project_path: str | None = None, *, home_dir: str | None = None
) -> ContentBlock:
    """Sanitize a block's payload. Type tags and identifiers are never touched."""
    match block:
        case TextBlock():
            return block.model_copy(
                update={"text": sanitize_text(block.text, project_path, home_dir=home_dir)}
            )
        case ThinkingBlock():
            return block.model_copy(
                update={"thinking": sanitize_text(block.thinking, project_path, home_dir=home_dir)}
            )
        case ToolUseBlock():
            return block.model_copy(
                update={"input": _sanitize_tree(block.input, project_path, home_dir)}
            )
        case ToolResultBlock():
            return block.model_copy(
                update={"content": _sanitize_result_content(block, project_path, home_dir)}
            )
        case _:
            assert_never(block)


def sanitize_message(
    message: ParsedMessage, project_path: str | None = None, *, home_dir: str | None = None
) -> ParsedMessage:
    return message.model_copy(
        update={
            "content": [
                sanitize_block(block, project_path, home_dir=home_dir) for block in message.content
            ]
        }
    )


def sanitize_session(
    session: ParsedSession, project_path: str | None = None, *, home_dir: str | None = None
) -> ParsedSession:
    """Return a sanitized copy of ``session``; the input is left unchanged."""
    metadata = session.metadata.model_copy(
        update={
            "title": sanitize_text(session.metadata.title, project_path, home_dir=home_dir),
            "project_name": sanitize_paths(
                session.metadata.project_name, project_path, home_dir=home_dir
            ),
        }
    )
    messages = [
        sanitize_message(message, project_path, home_dir=home_dir) for message in session.messages
    ]
    logger.debug("Sanitized %d messages", len(messages))
    return ParsedSession(messages=messages, metadata=metadata)


def _sanitize_result_content(
    block: ToolResultBlock, project_path: str | None, home_dir: str | None
) -> str | list[ToolResultItem]:
    content = block.content
    if isinstance(content, str):
        return truncate_text(sanitize_text(content, project_path, home_dir=home_dir))
    return [
        item.model_copy(
            update={
                "text": truncate_text(sanitize_text(item.text, project_path, home_dir=home_dir))
            }
        )
        if item.text
        else item
        for item in content
    ]


def _sanitize_tree(
    value: Any, project_path: str | None, home_dir: str | None, key: str = ""
) -> Any:
    if isinstance(value, str):
        if _looks_like_secret_value(key, value):
            return REDACTED
        return sanitize_text(value, project_path, home_dir=home_dir)
    if isinstance(value, list):
        return [_sanitize_tree(item, project_path, home_dir) for item in value]
    if isinstance(value, dict):
        return {k: _sanitize_tree(v, project_path, home_dir, str(k)) for k, v in value.items()}
    return value


def _looks_like_secret_value(key: str, value: str) -> bool:
    if not key or not _SECRET_KEY.search(_CAMEL_BOUNDARY.sub("_", key).lower()):
        return False
    return len(value) >= _MIN_SECRET_LENGTH and not any(ch.isspace() for ch in value)


def _replace_path(text: str, path: str, replacement: str) -> str:
    return re.sub(re.escape(path) + _PATH_END, lambda _: replacement, text)


def _is_under(path: str, home: str) -> bool:
    if not home or home == "/" or not path.startswith(home):
        return False
    return len(path) > len(home) and path[len(home)] in "/\\"
