"""Share service: turns journals into sanitized sessions and hands them to the store."""

from __future__ import annotations

import logging
import secrets
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from ccshare.data.parser import parse_session, parse_session_file
from ccshare.data.sanitizer import sanitize_session
from ccshare.models.messages import ParsedMessage
from ccshare.models.sessions import (
    MessagesPage,
    ParsedSession,
    SessionMetadata,
    SharedSession,
    ShareReceipt,
)

if TYPE_CHECKING:
    from pathlib import Path

    from ccshare.config import Config
    from ccshare.services.protocols import SessionStoreProtocol, ShareIdGenerator

logger = logging.getLogger(__name__)

SHARE_ID_BYTES = 9  # 12 url-safe characters


def generate_share_id() -> str:
    return secrets.token_urlsafe(SHARE_ID_BYTES)


def prepare_session_file(
    path: Path,
    project_name: str | None = None,
    project_path: str | None = None,
    *,
    home_dir: str | None = None,
) -> Result[ParsedSession, str]:
    """Read, parse and sanitize a journal file.

    Returns:
        Ok with the sanitized session, or Err if the file cannot be read or decoded.
    """
    try:
        parsed = parse_session_file(path, project_name)
    except UnicodeDecodeError as exc:
        return Err(f"Journal {path} is not valid UTF-8: {exc.reason}")
    except OSError as exc:
        return Err(f"Cannot read journal {path}: {exc.strerror or exc}")
    return Ok(sanitize_session(parsed, project_path, home_dir=home_dir))


def paginate_messages(messages: list[ParsedMessage], offset: int, limit: int) -> MessagesPage:
    """Read-only window over a session's messages in sequence order."""
    offset = max(offset, 0)
    limit = max(limit, 1)
    ordered = sorted(messages, key=lambda m: m.sequence)
    return MessagesPage(
        messages=ordered[offset : offset + limit],
        total=len(ordered),
        offset=offset,
        limit=limit,
    )


class ShareService:
    """Service for the upload and paginated read paths."""

    def __init__(
        self,
        store: SessionStoreProtocol,
        config: Config,
        id_generator: ShareIdGenerator = generate_share_id,
    ) -> None:
        self._store = store
        self._config = config
        self._new_id = id_generator

    def prepare(
        self,
        text: str,
        project_name: str | None = None,
        project_path: str | None = None,
    ) -> ParsedSession:
        """Parse and sanitize journal text. Never fails on malformed records."""
        parsed = parse_session(text, project_name)
        return sanitize_session(parsed, project_path, home_dir=self._config.home_dir)

    def prepare_file(
        self,
        path: Path,
        project_name: str | None = None,
        project_path: str | None = None,
    ) -> Result[ParsedSession, str]:
        """Read a journal file and prepare it.

        Returns:
            Ok with the sanitized session, or Err if the file cannot be read or decoded.
        """
        return prepare_session_file(
            path, project_name, project_path, home_dir=self._config.home_dir
        )

    async def share(self, session: ParsedSession) -> Result[ShareReceipt, str]:
        """Persist a sanitized session under a fresh share identifier."""
        share_id = self._new_id()
        try:
            await self._store.save(share_id, session.metadata, session.messages)
        except Exception as exc:
            logger.warning("Failed to store session %s: %s", share_id, exc)
            return Err(f"Failed to store session: {exc}")
        return Ok(ShareReceipt(share_id=share_id, url=self._config.share_url(share_id)))

    async def get_metadata(self, share_id: str) -> Result[SessionMetadata, str]:
        try:
            metadata = await self._store.get_metadata(share_id)
        except Exception as exc:
            logger.warning("Failed to load session %s: %s", share_id, exc)
            return Err(f"Failed to load session {share_id}: {exc}")
        if metadata is None:
            return Err(f"Session {share_id} not found")
        return Ok(metadata)

    async def get_page(
        self, share_id: str, offset: int = 0, limit: int | None = None
    ) -> Result[MessagesPage, str]:
        """Get a window of messages.

        Returns:
            Ok with the page (limit clamped to 1..max_page_size), or Err if the
            session is unknown or the store fails.
        """
        metadata = await self.get_metadata(share_id)
        if isinstance(metadata, Err):
            return metadata

        normalized_offset = max(offset, 0)
        requested = self._config.page_size if limit is None else limit
        normalized_limit = min(max(requested, 1), self._config.max_page_size)

        try:
            messages = await self._store.get_messages(
                share_id, normalized_offset, normalized_limit
            )
            total = await self._store.count_messages(share_id)
        except Exception as exc:
            logger.warning("Failed to load messages for %s: %s", share_id, exc)
            return Err(f"Failed to load session {share_id}: {exc}")
        return Ok(
            MessagesPage(
                messages=messages,
                total=total,
                offset=normalized_offset,
                limit=normalized_limit,
            )
        )

    async def list_shared(self) -> Result[list[SharedSession], str]:
        try:
            rows = await self._store.list_sessions()
        except Exception as exc:
            return Err(f"Failed to list sessions: {exc}")
        return Ok(
            [
                SharedSession(
                    share_id=share_id,
                    url=self._config.share_url(share_id),
                    **metadata.model_dump(),
                )
                for share_id, metadata in rows
            ]
        )

    async def unshare(self, share_id: str) -> Result[bool, str]:
        try:
            return Ok(await self._store.delete(share_id))
        except Exception as exc:
            return Err(f"Failed to delete session {share_id}: {exc}")
