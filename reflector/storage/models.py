"""Data models for short links."""

from dataclasses import dataclass


@dataclass
class ShortLink:
    """Represents one entry of the mapping set."""

    code: str
    url: str

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "code": self.code,
            "url": self.url,
        }
