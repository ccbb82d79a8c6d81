"""Line diff models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class DiffLineType(StrEnum):
    CONTEXT = "context"
    REMOVED = "removed"
    ADDED = "added"


class DiffLine(BaseModel):
    """One line of a before/after change set."""

    type: DiffLineType
    text: str


class DiffStats(BaseModel):
    """Added/removed line counts for summary display."""

    added: int = 0
    removed: int = 0
