"""Pydantic models for ccshare."""

from ccshare.models.diff import DiffLine, DiffLineType, DiffStats
from ccshare.models.journal import JournalEntry, JournalMessage, JournalUsage
from ccshare.models.messages import (
    ContentBlock,
    ParsedMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolResultItem,
    ToolUseBlock,
)
from ccshare.models.sessions import (
    MessagesPage,
    ParsedSession,
    SessionMetadata,
    SharedSession,
    ShareReceipt,
)

__all__ = [
    "ContentBlock",
    "DiffLine",
    "DiffLineType",
    "DiffStats",
    "JournalEntry",
    "JournalMessage",
    "JournalUsage",
    "MessagesPage",
    "ParsedMessage",
    "ParsedSession",
    "SessionMetadata",
    "SharedSession",
    "ShareReceipt",
    "TextBlock",
    "ThinkingBlock",
    "ToolResultBlock",
    "ToolResultItem",
    "ToolUseBlock",
]
