"""
Data models for caption shadowing.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Cue:
    """One caption entry: a time interval and the text shown during it."""

    start: float  # seconds
    end: float  # seconds
    text: str  # single line, trimmed

    def __post_init__(self) -> None:
        if not (math.isfinite(self.start) and math.isfinite(self.end)):
            raise ValueError(f"cue times must be finite, got {self.start}, {self.end}")
        if self.start < 0:
            raise ValueError(f"cue start must be non-negative, got {self.start}")
        if self.end < self.start:
            raise ValueError(f"cue end {self.end} is before start {self.start}")
        if not self.text.strip():
            raise ValueError("cue text must not be blank")
        if self.text != self.text.strip() or self.text.splitlines() != [self.text]:
            raise ValueError(f"cue text must be a single trimmed line, got {self.text!r}")


# Ordered cues of one caption track, in source order.
CueSet = tuple[Cue, ...]
