"""
Shadowing session: a media file, its caption track, and the playback timeline.
"""

import logging
from pathlib import Path

from .io_media import CAPTION_EXT, caption_path_for
from .models import Cue, CueSet
from .timeline import Timeline
from .vtt_utils import parse_captions, read_caption_text, write_caption_text

logger = logging.getLogger("shadowcue")

PLAYBACK_SPEEDS = (0.5, 0.75, 1.0, 1.25, 1.5, 2.0)
SKIP_SECONDS = 10.0


class ShadowSession:
    """Caption state for one media file.

    Holds the raw caption text the user edits, the cues parsed from it, and the
    timeline that maps playback samples to the active cue. Playback itself is
    driven by the caller, which pushes samples with :meth:`tick` and consumes
    the seek targets this class computes.
    """

    def __init__(
        self,
        media_path: str | Path,
        caption_path: Path | None = None,
        text: str = "",
        caption_ext: str = CAPTION_EXT,
        strict: bool = False,
        duration: float | None = None,
        save_path: Path | None = None,
    ):
        self.media_path = Path(media_path)
        self.caption_path = caption_path
        # where save() creates the track when none was loaded
        self.save_path = save_path or caption_path_for(media_path, caption_ext)
        self.caption_ext = caption_ext
        self.strict = strict
        self.duration = duration
        self.speed = 1.0
        self.text = text
        self.timeline = Timeline(parse_captions(text, strict=strict))

    @classmethod
    def open(
        cls,
        media_path: str | Path,
        caption_path: str | Path | None = None,
        caption_ext: str = CAPTION_EXT,
        strict: bool = False,
        duration: float | None = None,
    ) -> "ShadowSession":
        """Load the caption track that sits next to ``media_path``.

        A missing or unreadable track is not an error: the session simply has
        no captions and no track path until one is saved. An explicit
        ``caption_path`` is still where that first save goes.
        """
        path = Path(caption_path) if caption_path else caption_path_for(media_path, caption_ext)
        text = read_caption_text(path)
        if text is None:
            logger.info("No captions for %s", media_path)
            return cls(media_path, None, "", caption_ext, strict, duration, save_path=path)
        session = cls(media_path, path, text, caption_ext, strict, duration)
        logger.info("Loaded %d cues from %s", len(session.cues), path)
        return session

    @property
    def cues(self) -> CueSet:
        return self.timeline.cues

    @property
    def active_index(self) -> int | None:
        return self.timeline.active_index

    @property
    def active_cue(self) -> Cue | None:
        idx = self.timeline.active_index
        return None if idx is None else self.timeline.cues[idx]

    def edit(self, text: str) -> CueSet:
        """Replace the raw caption text and re-derive the cues from it."""
        self.text = text
        cues = parse_captions(text, strict=self.strict)
        self.timeline.replace(cues)
        return cues

    def save(self) -> Path:
        """Write the raw caption text back to its track, creating it if needed."""
        path = self.caption_path or self.save_path
        write_caption_text(path, self.text)
        self.caption_path = path
        self.edit(self.text)
        logger.info("Saved %d cues to %s", len(self.cues), path)
        return path

    def tick(self, time: float) -> int | None:
        return self.timeline.update(time)

    def seek_to_cue(self, index: int) -> float:
        return self.timeline.seek_target(index)

    def rewind_target(self, current: float, seconds: float = SKIP_SECONDS) -> float:
        return max(0.0, current - seconds)

    def forward_target(self, current: float, seconds: float = SKIP_SECONDS) -> float:
        target = current + seconds
        if self.duration is not None:
            target = min(target, self.duration)
        return target

    def set_speed(self, speed: float) -> None:
        if speed not in PLAYBACK_SPEEDS:
            raise ValueError(f"unsupported playback speed {speed}; choose from {PLAYBACK_SPEEDS}")
        self.speed = speed
