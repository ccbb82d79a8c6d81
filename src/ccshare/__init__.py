"""Share agent session journals: parse, sanitize, render."""

__version__ = "0.1.0"
