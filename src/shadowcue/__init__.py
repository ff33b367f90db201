"""
Shadowcue - follow a caption track in sync with media playback.

A small engine for:
- Parsing WebVTT-style caption tracks into time-ordered cues
- Mapping a playback clock to the active cue
- Editing caption text and re-applying it immediately
- Seeking playback to the start of any cue
"""

__version__ = "0.1.0"
