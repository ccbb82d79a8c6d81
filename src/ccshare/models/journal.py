"""Models for raw journal records (one JSONL line each)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DISPLAYABLE_TYPES = frozenset({"user", "assistant"})


class JournalUsage(BaseModel):
    """Token usage attached to a journal entry."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_input_tokens: int = 0
    cache_read_input_tokens: int = 0


class JournalMessage(BaseModel):
    """The ``message`` payload of a user/assistant entry."""

    role: str = ""
    content: str | list[Any] = Field(default_factory=list)
    model: str | None = None
    usage: JournalUsage | None = None


class JournalEntry(BaseModel):
    """A single line from the session journal."""

    model_config = ConfigDict(populate_by_name=True)

    type: str  # user, assistant, system, progress, file-history-snapshot, queue-operation
    message: JournalMessage | None = None
    usage: JournalUsage | None = None
    timestamp: str | None = None
    model: str | None = None
    uuid: str | None = None
    session_id: str | None = Field(default=None, alias="sessionId")
    git_branch: str | None = Field(default=None, alias="gitBranch")
    cwd: str | None = None

    @property
    def is_displayable(self) -> bool:
        return self.type in DISPLAYABLE_TYPES

    @property
    def effective_usage(self) -> JournalUsage | None:
        if self.usage is not None:
            return self.usage
        return self.message.usage if self.message else None

    @property
    def effective_model(self) -> str | None:
        if self.model:
            return self.model
        return self.message.model if self.message and self.message.model else None
