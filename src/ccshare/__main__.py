"""Allow running as `python -m ccshare`."""

from ccshare.cli import app

if __name__ == "__main__":
    app()
