"""
Playback time to active cue mapping.
"""

import logging
from bisect import bisect_right
from collections.abc import Iterable
from itertools import pairwise
from typing import NamedTuple

from .models import Cue, CueSet

logger = logging.getLogger("shadowcue")


class _Snapshot(NamedTuple):
    cues: CueSet
    # Start times, only when cues are ordered and pairwise disjoint.
    starts: tuple[float, ...] | None

    @classmethod
    def build(cls, cues: Iterable[Cue]) -> "_Snapshot":
        cues = tuple(cues)
        disjoint = all(a.end < b.start for a, b in pairwise(cues))
        starts = tuple(c.start for c in cues) if disjoint else None
        return cls(cues, starts)

    def find(self, time: float) -> int | None:
        if self.starts is not None:
            i = bisect_right(self.starts, time) - 1
            if i >= 0 and time <= self.cues[i].end:
                return i
            return None
        for i, cue in enumerate(self.cues):
            if cue.start <= time <= cue.end:
                return i
        return None


class Timeline:
    """Tracks which cue of a caption track is active at the latest playback time.

    Lookups report the first cue in sequence order whose ``[start, end]``
    interval contains the time. Ordered, non-overlapping tracks are searched by
    bisection; anything else (overlaps, out-of-order cues, shared boundaries)
    is scanned linearly so the first-match answer never changes.
    """

    def __init__(self, cues: Iterable[Cue] = ()):
        self._snapshot = _Snapshot.build(cues)
        self._time: float | None = None
        self._active: int | None = None

    @property
    def cues(self) -> CueSet:
        return self._snapshot.cues

    @property
    def time(self) -> float | None:
        return self._time

    @property
    def active_index(self) -> int | None:
        return self._active

    def __len__(self) -> int:
        return len(self._snapshot.cues)

    def active_cue(self, time: float) -> int | None:
        """Index of the cue active at ``time``, or None."""
        return self._snapshot.find(time)

    def update(self, time: float) -> int | None:
        """Record a playback sample and return the active cue index."""
        self._time = time
        active = self._snapshot.find(time)
        if active != self._active:
            logger.debug("Active cue %s -> %s at %.3fs", self._active, active, time)
        self._active = active
        return active

    def seek_target(self, index: int) -> float:
        """Start time of cue ``index``; raises IndexError outside ``[0, len)``."""
        cues = self._snapshot.cues
        if not 0 <= index < len(cues):
            raise IndexError(f"cue index {index} out of range for {len(cues)} cues")
        return cues[index].start

    def replace(self, cues: Iterable[Cue]) -> None:
        """Swap in a new cue set and re-evaluate the last playback sample against it."""
        snapshot = _Snapshot.build(cues)
        self._snapshot = snapshot
        self._active = snapshot.find(self._time) if self._time is not None else None
        logger.debug("Timeline now holds %d cues", len(snapshot.cues))
