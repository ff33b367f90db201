"""
Command-line interface for caption shadowing.
"""

import argparse
import logging
import os
import sys
import time

from dotenv import load_dotenv
from tqdm import tqdm

from .io_media import CAPTION_EXT, probe_duration
from .session import PLAYBACK_SPEEDS, ShadowSession
from .vtt_utils import format_timestamp, serialize_captions

logger = logging.getLogger("shadowcue")


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    ap = argparse.ArgumentParser(description="Follow a caption track in sync with playback")

    ap.add_argument(
        "--stage",
        choices=["list", "at", "seek", "follow", "normalize"],
        default="list",
        help="list: print cues; at: active cue at --time; seek: start of cue --index; "
        "follow: run a playback clock and print cues as they become active; "
        "normalize: rewrite the track in canonical form",
    )

    # IO
    ap.add_argument("--input_media", required=True, help="Media file the captions belong to")
    ap.add_argument(
        "--subs-path", default=None, help="Caption track (default: <media base name><ext>)"
    )
    ap.add_argument(
        "--caption-ext",
        default=os.getenv("SHADOWCUE_CAPTION_EXT", CAPTION_EXT),
        help="Caption extension looked up next to the media",
    )
    ap.add_argument(
        "--strict",
        action="store_true",
        default=_env_flag("SHADOWCUE_STRICT"),
        help="Reject timestamps with non-numeric fields instead of reading them as 0",
    )

    # Lookup
    ap.add_argument("--time", type=float, default=0.0, help="Playback time in seconds (at)")
    ap.add_argument("--index", type=int, default=0, help="Cue index (seek)")

    # Playback clock
    ap.add_argument("--speed", type=float, choices=PLAYBACK_SPEEDS, default=1.0)
    ap.add_argument(
        "--tick",
        type=float,
        default=float(os.getenv("SHADOWCUE_TICK", "0.1")),
        help="Seconds between playback samples",
    )
    ap.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Clock length in seconds (default: probed media duration or last cue end)",
    )
    ap.add_argument("--no-wait", action="store_true", help="Run the clock without sleeping")

    # Writing
    ap.add_argument("--no-header", action="store_true", help="Omit the WEBVTT header")
    ap.add_argument("--numbered", action="store_true", help="Prefix cues with an index line")

    # Logging
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return ap.parse_args(argv)


def _cue_line(i: int, session: ShadowSession) -> str:
    cue = session.cues[i]
    return f"{i:>4}  {format_timestamp(cue.start)} --> {format_timestamp(cue.end)}  {cue.text}"


def follow(session: ShadowSession, tick: float, wait: bool = True) -> None:
    """Advance a playback clock over the media and report cue changes."""
    if tick <= 0:
        raise ValueError(f"--tick must be positive, got {tick}")
    duration = session.duration
    if duration is None:
        duration = max((c.end for c in session.cues), default=0.0)
    step = tick * session.speed
    steps = int(duration / step) + 1
    last = None
    with tqdm(total=round(duration, 1), unit="s", desc="Playback", leave=False) as bar:
        for n in range(steps):
            t = min(n * step, duration)
            active = session.tick(t)
            if active is not None and active != last:
                tqdm.write(_cue_line(active, session))
            last = active
            bar.n = round(t, 1)
            bar.refresh()
            if wait:
                time.sleep(tick)


def run(args: argparse.Namespace) -> int:
    duration = args.duration
    if duration is None and args.stage == "follow":
        duration = probe_duration(args.input_media)

    session = ShadowSession.open(
        args.input_media,
        caption_path=args.subs_path,
        caption_ext=args.caption_ext,
        strict=args.strict,
        duration=duration,
    )
    session.set_speed(args.speed)

    if args.stage == "list":
        for i in range(len(session.cues)):
            print(_cue_line(i, session))
    elif args.stage == "at":
        active = session.tick(args.time)
        print("-" if active is None else _cue_line(active, session))
    elif args.stage == "seek":
        print(f"{session.seek_to_cue(args.index):.3f}")
    elif args.stage == "follow":
        follow(session, args.tick, wait=not args.no_wait)
    elif args.stage == "normalize":
        if session.caption_path is None:
            logger.error("No caption track to normalize for %s", args.input_media)
            return 1
        session.edit(
            serialize_captions(session.cues, header=not args.no_header, numbered=args.numbered)
        )
        session.save()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    load_dotenv()

    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        return run(args)
    except (IndexError, ValueError) as e:
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
