"""Journal parser: raw JSONL session text to a ParsedSession."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Generator
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath, PureWindowsPath

from pydantic import ValidationError

from ccshare.models.journal import JournalEntry, JournalMessage, JournalUsage
from ccshare.models.messages import (
    CONTENT_BLOCK_ADAPTER,
    CONTENT_BLOCK_TYPES,
    ContentBlock,
    ParsedMessage,
    TextBlock,
    ThinkingBlock,
    ToolUseBlock,
)
from ccshare.models.sessions import ParsedSession, SessionMetadata

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Session"
UNKNOWN_PROJECT = "unknown"
TITLE_MAX_LENGTH = 80
_ELLIPSIS = "..."

# Control characters that break re-serialization downstream (tab, LF, CR are kept).
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def decode_journal(raw: bytes) -> str:
    """Decode raw journal bytes. Raises UnicodeDecodeError on invalid input."""
    return raw.decode("utf-8-sig")


def parse_session_file(path: Path, project_name: str | None = None) -> ParsedSession:
    """Read, decode and parse a journal file."""
    return parse_session(decode_journal(path.read_bytes()), project_name)


def parse_session(text: str, project_name: str | None = None) -> ParsedSession:
    """Parse a full JSONL journal into messages plus derived metadata.

    Malformed lines are skipped; an empty journal yields a session with no
    messages and the placeholder title.
    """
    entries = list(_iter_entries(text))

    messages: list[ParsedMessage] = []
    sequence = 0
    total_input = 0
    total_output = 0
    session_date: str | None = None
    branch: str | None = None
    cwd: str | None = None

    for entry in entries:
        if session_date is None and entry.timestamp:
            session_date = entry.timestamp
        if branch is None and entry.git_branch:
            branch = entry.git_branch
        if cwd is None and entry.cwd:
            cwd = entry.cwd

        usage = entry.effective_usage
        if entry.type == "assistant" and usage is not None:
            total_input += usage.input_tokens
            total_output += usage.output_tokens

        if not entry.is_displayable:
            continue

        content = _extract_content(entry)
        if not content:
            continue

        messages.append(
            ParsedMessage(
                sequence=sequence,
                type="assistant" if entry.type == "assistant" else "user",
                role=(entry.message.role if entry.message else "") or entry.type,
                content=content,
                model=entry.effective_model,
                input_tokens=usage.input_tokens if usage else None,
                output_tokens=usage.output_tokens if usage else None,
                timestamp=entry.timestamp,
                has_thinking=any(isinstance(b, ThinkingBlock) for b in content),
                has_tool_use=any(isinstance(b, ToolUseBlock) for b in content),
            )
        )
        sequence += 1

    metadata = SessionMetadata(
        title=derive_title(messages),
        project_name=project_name or _project_from_cwd(cwd) or UNKNOWN_PROJECT,
        branch=branch,
        model=detect_model(entries),
        session_date=session_date or _now_iso(),
        message_count=len(messages),
        total_input_tokens=total_input,
        total_output_tokens=total_output,
    )
    return ParsedSession(messages=messages, metadata=metadata)


def derive_title(messages: list[ParsedMessage]) -> str:
    """Title from the first text block of the first user message."""
    first_user = next((m for m in messages if m.type == "user"), None)
    if first_user is None:
        return UNTITLED

    text_block = next((b for b in first_user.content if isinstance(b, TextBlock)), None)
    if text_block is None:
        return UNTITLED

    text = text_block.text.strip()
    if len(text) <= TITLE_MAX_LENGTH:
        return text
    return text[: TITLE_MAX_LENGTH - len(_ELLIPSIS)] + _ELLIPSIS


def detect_model(entries: list[JournalEntry]) -> str | None:
    """Model of the first assistant entry that names one, displayable or not."""
    for entry in entries:
        if entry.type == "assistant" and entry.effective_model:
            return entry.effective_model
    return None


def _iter_entries(text: str) -> Generator[JournalEntry]:
    for line_num, line in enumerate(text.split("\n"), 1):
        line = line.strip()
        if not line:
            continue
        try:
            raw = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed journal line %d", line_num)
            continue
        if not isinstance(raw, dict):
            logger.debug("Skipping non-object journal line %d", line_num)
            continue
        yield _entry_from_raw(scrub_control_chars(raw))


def scrub_control_chars(value: object) -> object:
    """Recursively remove control characters from every string value."""
    if isinstance(value, str):
        return _CONTROL_CHARS.sub("", value)
    if isinstance(value, list):
        return [scrub_control_chars(item) for item in value]
    if isinstance(value, dict):
        return {key: scrub_control_chars(item) for key, item in value.items()}
    return value


def _entry_from_raw(raw: dict[str, object]) -> JournalEntry:
    msg = raw.get("message")
    message: JournalMessage | None = None
    if isinstance(msg, dict):
        content = msg.get("content")
        message = JournalMessage(
            role=_as_str(msg.get("role")),
            content=content if isinstance(content, str | list) else [],
            model=_as_optional_str(msg.get("model")),
            usage=_parse_usage(msg.get("usage")),
        )

    return JournalEntry(
        type=_as_str(raw.get("type")),
        message=message,
        usage=_parse_usage(raw.get("usage")),
        timestamp=_as_optional_str(raw.get("timestamp")),
        model=_as_optional_str(raw.get("model")),
        uuid=_as_optional_str(raw.get("uuid")),
        session_id=_as_optional_str(raw.get("sessionId")),
        git_branch=_as_optional_str(raw.get("gitBranch")),
        cwd=_as_optional_str(raw.get("cwd")),
    )


def _parse_usage(value: object) -> JournalUsage | None:
    if not isinstance(value, dict):
        return None
    return JournalUsage(
        input_tokens=_int(value.get("input_tokens", 0)),
        output_tokens=_int(value.get("output_tokens", 0)),
        cache_creation_input_tokens=_int(value.get("cache_creation_input_tokens", 0)),
        cache_read_input_tokens=_int(value.get("cache_read_input_tokens", 0)),
    )


def _extract_content(entry: JournalEntry) -> list[ContentBlock]:
    if entry.message is None:
        return []

    raw_content = entry.message.content
    if isinstance(raw_content, str):
        return [TextBlock(text=raw_content)]

    blocks: list[ContentBlock] = []
    for item in raw_content:
        if isinstance(item, str):
            blocks.append(TextBlock(text=item))
            continue
        block = _parse_content_block(item)
        if block is not None:
            blocks.append(block)
    return blocks


def _parse_content_block(item: object) -> ContentBlock | None:
    if not isinstance(item, dict):
        return None
    block_type = _as_str(item.get("type"))
    if block_type not in CONTENT_BLOCK_TYPES:
        logger.debug("Dropping unsupported content block type %r", block_type)
        return None
    try:
        return CONTENT_BLOCK_ADAPTER.validate_python(item)
    except ValidationError as exc:
        logger.debug("Dropping malformed %s block: %s", block_type, exc.errors()[0]["msg"])
        return None


def _project_from_cwd(cwd: str | None) -> str | None:
    if not cwd:
        return None
    path = PureWindowsPath(cwd) if "\\" in cwd else PurePosixPath(cwd)
    return path.name or None


def _now_iso() -> str:
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _as_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def _as_optional_str(value: object) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _int(val: object) -> int:
    if isinstance(val, bool):
        return int(val)
    if isinstance(val, int):
        return val
    if isinstance(val, float):
        return int(val)
    if isinstance(val, str):
        try:
            return int(float(val))
        except ValueError:
            return 0
    return 0
