"""Shared fixtures for ccshare tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from ccshare.config import Config
from ccshare.data.parser import parse_session_file
from ccshare.models.sessions import ParsedSession

SAMPLE_SESSION_PATH = Path(__file__).parent / "data" / "sample_session.jsonl"
SAMPLE_HOME = "/Users/alice"
SAMPLE_PROJECT = "/Users/alice/projects/demo"


@pytest.fixture
def sample_session_path() -> Path:
    """Path to the sample session JSONL file."""
    return SAMPLE_SESSION_PATH


@pytest.fixture
def sample_session() -> ParsedSession:
    """The sample journal, parsed but not sanitized."""
    return parse_session_file(SAMPLE_SESSION_PATH)


@pytest.fixture
def test_config() -> Config:
    """Config with a fixed home directory so path rewriting is deterministic."""
    return Config(
        home_dir=SAMPLE_HOME,
        base_url="https://share.example.com",
    )


@pytest.fixture
def make_journal() -> Callable[..., str]:
    """Build JSONL journal text from record dicts (or raw strings for broken lines)."""

    def _make(*records: dict[str, object] | str) -> str:
        return "\n".join(r if isinstance(r, str) else json.dumps(r) for r in records)

    return _make


def user_entry(content: object, **extra: object) -> dict[str, object]:
    return {"type": "user", "message": {"role": "user", "content": content}, **extra}


def assistant_entry(content: object, **extra: object) -> dict[str, object]:
    message = {"role": "assistant", "content": content}
    for key in ("model", "usage"):
        if key in extra:
            message[key] = extra.pop(key)
    return {"type": "assistant", "message": message, **extra}
