"""Result records produced by the image fetcher pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class ImageOutcome:
    """What happened to one accepted URL."""

    index: int
    url: str
    original_path: Path
    grayscale_path: Path
    downloaded: bool = False
    converted: bool = False
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.downloaded and self.converted


@dataclass
class PipelineReport:
    """Summary of a complete fetcher run."""

    requested: int
    urls: List[str] = field(default_factory=list)
    outcomes: List[ImageOutcome] = field(default_factory=list)
    discovery_rounds: int = 0

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded
