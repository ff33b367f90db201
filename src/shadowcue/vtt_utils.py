"""
Caption track parsing, writing, and timestamp utilities.
"""

import logging
import math
import os
import re
import tempfile
from collections.abc import Iterable
from pathlib import Path

from .models import Cue, CueSet

logger = logging.getLogger("shadowcue")

TIMING_DELIMITER = " --> "
VTT_HEADER = "WEBVTT"

_STRICT_TS_RE = re.compile(r"^(\d+):([0-5]\d):([0-5]\d[.,]\d+)$")


def _lenient_int(part: str) -> int:
    part = part.strip()
    return int(part) if part.isdecimal() else 0


def _lenient_seconds(part: str) -> float:
    try:
        value = float(part.strip().replace(",", "."))
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def parse_timestamp(value: str, strict: bool = False) -> float | None:
    """Parse ``H:MM:SS.mmm`` (``,`` also accepted before the fraction) into seconds.

    Anything other than three colon-separated components is rejected. In the
    default lenient mode non-numeric hours, minutes or seconds count as 0, which
    is what existing caption files rely on; ``strict=True`` rejects them instead.
    Values too large to represent as seconds are rejected in both modes.
    """
    value = value.strip()
    try:
        if strict:
            m = _STRICT_TS_RE.match(value)
            if not m:
                return None
            h, mins, secs = m.groups()
            total = int(h) * 3600 + int(mins) * 60 + float(secs.replace(",", "."))
        else:
            parts = value.split(":")
            if len(parts) != 3:
                return None
            total = (
                _lenient_int(parts[0]) * 3600
                + _lenient_int(parts[1]) * 60
                + _lenient_seconds(parts[2])
            )
    except (ValueError, OverflowError):
        # int() digit limit, or hours beyond float range
        return None
    return total if math.isfinite(total) else None


def format_timestamp(t: float) -> str:
    """Format seconds as ``HH:MM:SS.fff``, keeping sub-millisecond digits when present."""
    if t < 0:
        raise ValueError(f"timestamp must be non-negative, got {t}")
    us = round(t * 1_000_000)
    h, rem = divmod(us, 3_600_000_000)
    m, rem = divmod(rem, 60_000_000)
    s, frac = divmod(rem, 1_000_000)
    digits = f"{frac:06d}".rstrip("0").ljust(3, "0")
    return f"{h:02}:{m:02}:{s:02}.{digits}"


def _parse_timing_line(line: str, strict: bool) -> tuple[float, float] | None:
    halves = line.split(TIMING_DELIMITER)
    if len(halves) != 2:
        return None
    start = parse_timestamp(halves[0], strict)
    end = parse_timestamp(halves[1], strict)
    if start is None or end is None or end < start:
        return None
    return start, end


def parse_captions(text: str, strict: bool = False) -> CueSet:
    """Parse caption track text into cues, skipping whatever cannot be salvaged.

    Never raises on malformed input. A pending cue collects text until a blank
    line or the end of input; a timing line inside it only moves its start and
    end. A timing line that fails to parse changes nothing, so text after it
    with no cue pending is dropped rather than attached to a later cue. Cues
    come back in source order; nothing is sorted.
    """
    cues: list[Cue] = []
    window: tuple[float, float] | None = None
    buf: list[str] = []
    skipped = 0

    def close() -> None:
        nonlocal window, buf
        if window is not None and buf:
            joined = " ".join(buf).strip()
            if joined:
                cues.append(Cue(start=window[0], end=window[1], text=joined))
        window = None
        buf = []

    for raw in text.splitlines():
        line = raw.strip()
        if TIMING_DELIMITER in line:
            parsed = _parse_timing_line(line, strict)
            if parsed is None:
                skipped += 1
                logger.debug("Skipping malformed timing line: %r", line)
            else:
                window = parsed
        elif not line:
            if buf:
                close()
        elif window is not None and not line.isdigit():
            buf.append(line)
    close()

    if skipped:
        logger.debug("Parsed %d cues, skipped %d malformed timing lines", len(cues), skipped)
    return tuple(cues)


def serialize_captions(cues: Iterable[Cue], header: bool = True, numbered: bool = False) -> str:
    """Render cues back to caption track text.

    Raises ValueError for a cue whose text would read back as something else:
    a bare number (taken for a cue index) or a timing delimiter.
    """
    chunks: list[str] = []
    if header:
        chunks.append(f"{VTT_HEADER}\n\n")
    for i, cue in enumerate(cues, 1):
        if cue.text.isdigit() or TIMING_DELIMITER in cue.text:
            raise ValueError(f"cue {i - 1} text cannot be written to a caption track: {cue.text!r}")
        index = f"{i}\n" if numbered else ""
        chunks.append(
            f"{index}{format_timestamp(cue.start)}{TIMING_DELIMITER}"
            f"{format_timestamp(cue.end)}\n{cue.text}\n\n"
        )
    return "".join(chunks)


def read_caption_text(path: str | Path) -> str | None:
    """Read a whole caption file, or None when it is missing or unreadable."""
    path = Path(path)
    if not path.exists():
        logger.debug("No caption track at %s", path)
        return None
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read caption track %s: %s", path, e)
        return None


def read_captions(path: str | Path, strict: bool = False) -> CueSet:
    """Parse a caption file; an absent track yields no cues."""
    text = read_caption_text(path)
    if text is None:
        return ()
    return parse_captions(text, strict=strict)


def write_caption_text(path: str | Path, text: str) -> None:
    """Replace a caption file with ``text`` in one step."""
    path = Path(path)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    logger.debug("Wrote %d chars to %s", len(text), path)


def write_captions(
    cues: Iterable[Cue], path: str | Path, header: bool = True, numbered: bool = False
) -> None:
    """Write cues to a caption file."""
    write_caption_text(path, serialize_captions(cues, header=header, numbered=numbered))
