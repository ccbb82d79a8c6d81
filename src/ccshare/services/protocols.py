"""Protocol definitions for the collaborators around the pipeline."""

from __future__ import annotations

from typing import Protocol

from ccshare.models.messages import ParsedMessage
from ccshare.models.sessions import SessionMetadata


class SessionStoreProtocol(Protocol):
    """Persistence of sanitized sessions keyed by share identifier."""

    async def save(
        self, share_id: str, metadata: SessionMetadata, messages: list[ParsedMessage]
    ) -> None: ...

    async def get_metadata(self, share_id: str) -> SessionMetadata | None: ...

    async def get_messages(self, share_id: str, offset: int, limit: int) -> list[ParsedMessage]: ...

    async def count_messages(self, share_id: str) -> int: ...

    async def list_sessions(self) -> list[tuple[str, SessionMetadata]]: ...

    async def delete(self, share_id: str) -> bool: ...


class ShareIdGenerator(Protocol):
    """Produces a new opaque, unique share identifier."""

    def __call__(self) -> str: ...
