"""
Media file helpers: caption track location and duration probing.
"""

import logging
from pathlib import Path

from pydub.utils import mediainfo

logger = logging.getLogger("shadowcue")

CAPTION_EXT = ".vtt"


def caption_path_for(media_path: str | Path, ext: str = CAPTION_EXT) -> Path:
    """Conventional caption track path: same folder and base name as the media."""
    if not ext.startswith("."):
        ext = "." + ext
    return Path(media_path).with_suffix(ext)


def probe_duration(media_path: str | Path) -> float | None:
    """Get media duration in seconds via ffprobe, or None if it cannot be probed."""
    try:
        info = mediainfo(str(media_path))
    except (OSError, ValueError) as e:
        logger.warning("Could not probe %s: %s", media_path, e)
        return None
    try:
        seconds = float(info.get("duration", ""))
    except ValueError:
        logger.warning("No duration reported for %s", media_path)
        return None
    return seconds if seconds > 0 else None
