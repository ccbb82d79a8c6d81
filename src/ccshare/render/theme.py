"""Colour palette, fonts and display formatting helpers for rendered sessions."""

from __future__ import annotations

from datetime import UTC, datetime

# ── Color palette: dark theme with warm accents ──

COLORS = {
    "bg": "#14120F",
    "surface": "#1C1A17",
    "elevated": "#24211D",
    "border": "#34302A",
    "text": "#EDE6DA",
    "text_secondary": "#B8AFA2",
    "text_muted": "#7D756A",
    "accent": "#C9956B",
    "user": "#6B9BC9",
    "tool": "#9B8EC4",
    "error": "#D16D6D",
    "added": "#6DD182",
    "removed": "#D16D6D",
}

# ── Fonts ──

FONT_FAMILY = "-apple-system, 'SF Pro Text', 'Helvetica Neue', 'Segoe UI', Roboto, sans-serif"
MONO_FAMILY = "'SF Mono', Menlo, Consolas, 'Liberation Mono', monospace"


def format_tokens(count: int) -> str:
    """Format a token count with K/M suffixes for readability."""
    if count < 1000:
        return str(count)
    if count < 1_000_000:
        return f"{count / 1000:.1f}K"
    return f"{count / 1_000_000:.1f}M"


def format_date(iso_str: str) -> str:
    """Format an ISO timestamp as ``Month D, YYYY HH:MM`` in UTC; bad input is returned as-is."""
    try:
        dt = datetime.fromisoformat(iso_str.replace("Z", "+00:00"))
    except ValueError:
        return iso_str
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    dt = dt.astimezone(UTC)
    return f"{dt.strftime('%B')} {dt.day}, {dt.year} {dt.strftime('%H:%M')}"
