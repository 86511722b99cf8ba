"""Exception hierarchy shared across grayscout applications."""

from __future__ import annotations

from typing import List, Optional, Sequence


class GrayscoutError(RuntimeError):
    """Base class for all grayscout failures."""


class ConfigError(GrayscoutError):
    """Raised for missing credentials or invalid runtime settings."""


class TransportError(GrayscoutError):
    """Raised when a network call fails or returns an unexpected status."""


class ResponseFormatError(GrayscoutError):
    """Raised when a generation response does not have the expected shape."""


class DecodeError(GrayscoutError):
    """Raised when an image file cannot be decoded or encoded."""


class DiscoveryExhausted(GrayscoutError):
    """Raised when URL discovery hits its round limit before the target count."""

    def __init__(
        self,
        target_count: int,
        rounds: int,
        accepted: Optional[Sequence[str]] = None,
    ) -> None:
        self.target_count = target_count
        self.rounds = rounds
        self.accepted: List[str] = list(accepted or [])
        super().__init__(
            f"Found {len(self.accepted)}/{target_count} reachable image URLs "
            f"after {rounds} discovery rounds"
        )


__all__ = [
    "GrayscoutError",
    "ConfigError",
    "TransportError",
    "ResponseFormatError",
    "DecodeError",
    "DiscoveryExhausted",
]
