"""Configuration for ccshare."""

from dataclasses import dataclass, field

from ccshare.data.sanitizer import resolve_home_dir


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    home_dir: str = field(default_factory=resolve_home_dir)
    base_url: str = "http://localhost:3000"
    page_size: int = 50
    max_page_size: int = 100

    def share_url(self, share_id: str) -> str:
        return f"{self.base_url.rstrip('/')}/s/{share_id}"
