"""Progress reporting for streamed AI responses."""

import time
from dataclasses import dataclass, field
from typing import Optional

from ..utils.logger import console

DOT_EVERY = 10


@dataclass
class StreamProgress:
    """Progress of one streaming call. Create a fresh one per request."""

    started_at: float = field(default_factory=time.monotonic)
    first_chunk_at: Optional[float] = None
    chunks: int = 0
    characters: int = 0

    def record(self, text: str) -> bool:
        """Count a chunk; True when a progress dot is due."""
        if self.first_chunk_at is None:
            self.first_chunk_at = time.monotonic()
        self.chunks += 1
        self.characters += len(text)
        return self.chunks % DOT_EVERY == 0

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at

    @property
    def waited(self) -> Optional[float]:
        """Seconds until the first chunk arrived."""
        if self.first_chunk_at is None:
            return None
        return self.first_chunk_at - self.started_at


def show_dot():
    console.print(".", end="", style="dim")


def estimate_seconds(size: int, low: int, high: int, divisor: int) -> int:
    """Rough processing-time estimate for a prompt of ``size`` characters."""
    return max(low, min(high, -(-size // divisor)))
