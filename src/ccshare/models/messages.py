"""Message-level models: content blocks and parsed messages."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class TextBlock(BaseModel):
    """Plain text."""

    type: Literal["text"] = "text"
    text: str = ""


class ThinkingBlock(BaseModel):
    """A model's internal reasoning trace."""

    type: Literal["thinking"] = "thinking"
    thinking: str = ""


class ToolUseBlock(BaseModel):
    """A tool invocation from an assistant message."""

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultItem(BaseModel):
    """One item of an array-form tool result. Unknown keys are preserved."""

    model_config = ConfigDict(extra="allow")

    type: str = "text"
    text: str | None = None


class ToolResultBlock(BaseModel):
    """The result of a tool call, correlated to a tool_use by ``tool_use_id``."""

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str | list[ToolResultItem] = ""
    is_error: bool | None = None


ContentBlock = Annotated[
    TextBlock | ThinkingBlock | ToolUseBlock | ToolResultBlock,
    Field(discriminator="type"),
]

CONTENT_BLOCK_ADAPTER: TypeAdapter[ContentBlock] = TypeAdapter(ContentBlock)

CONTENT_BLOCK_TYPES = frozenset({"text", "thinking", "tool_use", "tool_result"})


class ParsedMessage(BaseModel):
    """One displayable turn of the conversation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sequence: int
    type: Literal["user", "assistant"]
    role: str
    content: list[ContentBlock] = Field(default_factory=list)
    model: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    timestamp: str | None = None
    has_thinking: bool = False
    has_tool_use: bool = False
