"""
Tests for caption track parsing and writing.
"""

import pytest

from src.shadowcue.models import Cue
from src.shadowcue.vtt_utils import (
    format_timestamp,
    parse_captions,
    parse_timestamp,
    read_caption_text,
    read_captions,
    serialize_captions,
    write_caption_text,
    write_captions,
)

SAMPLE = "00:00:01.000 --> 00:00:03.500\nHello there\n\n00:00:04.000 --> 00:00:06.000\nHow are you\n"


def test_parse_two_cues():
    """Test the basic two-cue track."""
    cues = parse_captions(SAMPLE)

    assert cues == (
        Cue(start=1.0, end=3.5, text="Hello there"),
        Cue(start=4.0, end=6.0, text="How are you"),
    )


def test_parse_vtt_header_index_lines_and_crlf():
    """Test header, numeric index lines and CRLF line breaks are ignored."""
    text = (
        "WEBVTT\r\n\r\n1\r\n00:00:01,000 --> 00:00:02,000\r\n  First line \r\nsecond line\r\n\r\n"
        "2\r\n00:00:02.500 --> 00:00:03.000\r\n42\r\nLast\r\n"
    )
    cues = parse_captions(text)

    assert len(cues) == 2
    assert cues[0].text == "First line second line"
    assert cues[1] == Cue(start=2.5, end=3.0, text="Last")


def test_trailing_cue_without_blank_line():
    """Test the final cue is emitted without a trailing newline."""
    cues = parse_captions(SAMPLE + "\n00:00:07.000 --> 00:00:08.000\nLast line")

    assert len(cues) == 3
    assert cues[-1] == Cue(start=7.0, end=8.0, text="Last line")


def test_malformed_timing_line_drops_its_text():
    """Test text after a malformed timing line is not attached to a later cue."""
    text = (
        "00:00 --> 00:00:03.500\nOrphan text\n\n"
        "00:00:04.000 --> 00:00:05.000\nKept\n"
    )
    cues = parse_captions(text)

    assert cues == (Cue(start=4.0, end=5.0, text="Kept"),)


def test_malformed_timing_line_after_blank_still_discards():
    """Test orphan text stays dropped across blank lines until a valid timing line."""
    text = "00:00 --> 00:01\nOrphan\n\nMore orphan\n\n00:00:01.000 --> 00:00:02.000\nOk\n"

    assert [c.text for c in parse_captions(text)] == ["Ok"]


def test_blank_line_before_text_keeps_cue_open():
    """Test a blank line with no accumulated text does not close the cue."""
    cues = parse_captions("00:00:01.000 --> 00:00:02.000\n\nLate text\n")

    assert cues == (Cue(start=1.0, end=2.0, text="Late text"),)


def test_degenerate_cues_dropped():
    """Test cues without text or with only index numbers are never emitted."""
    text = (
        "Text before any timing\n\n"
        "00:00:01.000 --> 00:00:02.000\n\n\n"
        "00:00:02.000 --> 00:00:03.000\n123\n"
        "00:00:04.000 --> 00:00:05.000\nReal\n"
    )

    assert parse_captions(text) == (Cue(start=4.0, end=5.0, text="Real"),)


def test_timing_line_inside_open_cue_moves_its_window():
    """Test a timing line with no blank separator keeps the text and takes the new times."""
    text = "00:00:01.000 --> 00:00:02.000\nOne\n00:00:03.000 --> 00:00:04.000\nTwo\n"

    assert parse_captions(text) == (Cue(start=3.0, end=4.0, text="One Two"),)


def test_malformed_timing_line_inside_open_cue_changes_nothing():
    """Test a bad timing line neither closes nor alters the pending cue."""
    text = "00:00:01.000 --> 00:00:02.000\nOne\n00:00 --> 00:00:09.000\nTwo\n\n"

    assert parse_captions(text) == (Cue(start=1.0, end=2.0, text="One Two"),)


def test_oversized_hours_dropped():
    """Test hours too large for int or float conversion skip the line instead of raising."""
    for digits in (400, 5000):
        text = (
            "9" * digits
            + ":00:00.000 --> 00:00:02.000\nHi\n\n00:00:03.000 --> 00:00:04.000\nOk\n"
        )
        assert parse_captions(text) == (Cue(start=3.0, end=4.0, text="Ok"),)
        assert parse_captions(text, strict=True) == (Cue(start=3.0, end=4.0, text="Ok"),)

    assert parse_timestamp("9" * 400 + ":00:00.000") is None
    assert parse_timestamp("9" * 5000 + ":00:00.000", strict=True) is None


def test_out_of_order_cues_kept_in_source_order():
    """Test the parser does not sort."""
    text = "00:00:05.000 --> 00:00:06.000\nB\n\n00:00:01.000 --> 00:00:02.000\nA\n"

    assert [c.text for c in parse_captions(text)] == ["B", "A"]


def test_end_before_start_rejected():
    """Test a timing line running backwards opens no cue."""
    assert parse_captions("00:00:05.000 --> 00:00:01.000\nBackwards\n") == ()


def test_parse_timestamp():
    """Test timestamp grammar."""
    assert parse_timestamp("01:02:03.500") == pytest.approx(3723.5)
    assert parse_timestamp("0:00:01,250") == pytest.approx(1.25)
    assert parse_timestamp("00:01.000") is None
    assert parse_timestamp("1:2:3:4") is None
    # lenient: non-numeric fields read as zero
    assert parse_timestamp("xx:01:02.000") == pytest.approx(62.0)
    assert parse_timestamp("00:00:abc") == 0.0


def test_parse_timestamp_strict():
    """Test strict mode rejects what lenient mode defaults to zero."""
    assert parse_timestamp("01:02:03.500", strict=True) == pytest.approx(3723.5)
    assert parse_timestamp("00:00:01,250", strict=True) == pytest.approx(1.25)
    assert parse_timestamp("xx:01:02.000", strict=True) is None
    assert parse_timestamp("00:61:00.000", strict=True) is None
    assert parse_timestamp("00:00:01", strict=True) is None

    text = "00:00:xx.000 --> 00:00:02.000\nDropped\n\n00:00:03.000 --> 00:00:04.000\nKept\n"
    assert [c.text for c in parse_captions(text, strict=True)] == ["Kept"]
    assert [c.text for c in parse_captions(text)] == ["Dropped", "Kept"]


def test_format_timestamp():
    """Test timestamp formatting."""
    assert format_timestamp(0) == "00:00:00.000"
    assert format_timestamp(3.5) == "00:00:03.500"
    assert format_timestamp(3723.25) == "01:02:03.250"
    assert format_timestamp(1.2345) == "00:00:01.2345"
    with pytest.raises(ValueError):
        format_timestamp(-1.0)


def test_serialize_roundtrip():
    """Test serialize/parse roundtrip."""
    cues = (
        Cue(start=0.0, end=2.5, text="Hello world."),
        Cue(start=2.5, end=5.0, text="This is a test."),
        Cue(start=3661.125, end=3662.0, text="Much later"),
    )

    for header, numbered in [(True, False), (False, True)]:
        parsed = parse_captions(serialize_captions(cues, header=header, numbered=numbered))
        assert [c.text for c in parsed] == [c.text for c in cues]
        for got, want in zip(parsed, cues):
            assert got.start == pytest.approx(want.start)
            assert got.end == pytest.approx(want.end)


def test_serialize_rejects_text_that_reads_back_differently():
    """Test cues that would be dropped or misread on re-parse cannot be written."""
    with pytest.raises(ValueError):
        serialize_captions([Cue(start=1.0, end=2.0, text="2024")])
    with pytest.raises(ValueError):
        serialize_captions([Cue(start=1.0, end=2.0, text="a --> b")])


def test_parse_is_idempotent_through_serialize():
    """Test parse(serialize(parse(text))) == parse(text)."""
    text = (
        "WEBVTT\n\nNOTE a comment\n\n1\n00:00:01,000 --> 00:00:02.123456\nA\nB\n\n"
        "00:00 --> bad\nignored\n\n00:00:03.000 --> 00:00:03.000\n  C  \n"
    )
    once = parse_captions(text)

    assert parse_captions(serialize_captions(once)) == once


def test_file_io_roundtrip(tmp_path):
    """Test caption files are written in full and read back."""
    path = tmp_path / "clip.vtt"
    cues = parse_captions(SAMPLE)

    write_captions(cues, path)

    assert read_caption_text(path).startswith("WEBVTT\n\n")
    assert read_captions(path) == cues
    assert list(tmp_path.iterdir()) == [path]


def test_read_missing_or_undecodable(tmp_path):
    """Test missing and unreadable tracks read as no captions."""
    assert read_caption_text(tmp_path / "missing.vtt") is None
    assert read_captions(tmp_path / "missing.vtt") == ()

    bad = tmp_path / "bad.vtt"
    bad.write_bytes(b"\xff\xfe\xfa not utf-8")
    assert read_captions(bad) == ()


def test_read_strips_bom(tmp_path):
    """Test a UTF-8 BOM does not leak into the parsed text."""
    path = tmp_path / "bom.vtt"
    path.write_bytes(b"\xef\xbb\xbf" + SAMPLE.encode("utf-8"))

    assert len(read_captions(path)) == 2


def test_write_caption_text_replaces(tmp_path):
    """Test writing replaces existing content."""
    path = tmp_path / "clip.vtt"
    path.write_text("old", encoding="utf-8")

    write_caption_text(path, "new")

    assert path.read_text(encoding="utf-8") == "new"
