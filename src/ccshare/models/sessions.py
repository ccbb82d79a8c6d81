"""Session-level models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ccshare.models.messages import ParsedMessage


class SessionMetadata(BaseModel):
    """Derived metadata for a parsed session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str
    project_name: str
    branch: str | None = None
    model: str | None = None
    user_name: str | None = None
    session_date: str
    message_count: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0


class ParsedSession(BaseModel):
    """A fully parsed session: the unit handed to the sanitizer and the store."""

    messages: list[ParsedMessage] = Field(default_factory=list)
    metadata: SessionMetadata


class MessagesPage(BaseModel):
    """A window of messages served back from the store."""

    messages: list[ParsedMessage] = Field(default_factory=list)
    total: int = 0
    offset: int = 0
    limit: int = 0


class ShareReceipt(BaseModel):
    """Returned after a session was persisted under a share identifier."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    share_id: str
    url: str


class SharedSession(SessionMetadata):
    """A stored session as listed by its owner."""

    share_id: str
    url: str
