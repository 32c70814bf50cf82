import io
from fractions import Fraction

import pytest

from ebustl_cues.STLReader.parsers import tti_blocks_parser
from ebustl_cues.STLReader.parsers.tti_blocks_parser import (
    decode_tti_block,
    parse_tti_block,
    parse_tti_blocks,
    read_tti_block,
)
from helpers_for_testing import make_text_field, make_tti_block

DEFAULT_TAGS = "{\\c&HFFFFFF&}{\\3c&H000000&}"


# =============================================================================
# Helper to create buffer from TTI blocks
# =============================================================================


def make_tti_buffer(tti_blocks: list) -> io.BytesIO:
    """Create a BytesIO buffer from TTI blocks."""
    data = b"".join(tti_blocks)
    return io.BytesIO(data)


# =============================================================================
# Tests for read_tti_block / parse_tti_block
# =============================================================================


class TestReadTTIBlock:
    """Tests for fixed-size block reads."""

    def test_reads_full_block(self):
        tti = make_tti_block()
        buffer = make_tti_buffer([tti])

        assert read_tti_block(buffer) == tti
        assert read_tti_block(buffer) is None

    def test_short_read_is_end_of_stream(self):
        buffer = io.BytesIO(b"x" * 127)

        assert read_tti_block(buffer) is None

    def test_empty_buffer(self):
        assert read_tti_block(io.BytesIO(b"")) is None


class TestParseTTIBlock:
    """Tests for TTI field extraction."""

    def test_fields(self):
        tti = make_tti_block(
            sn=0x0102,
            ebn=0xFE,
            cs=0x03,
            tci=(10, 1, 2, 3),
            tco=(10, 4, 5, 6),
            vp=12,
            jc=0x01,
            text=b"Text",
        )

        block = parse_tti_block(tti)

        assert block.sn == 0x0102
        assert block.ebn == 0xFE
        assert block.cs == 0x03
        assert block.tci == bytes([10, 1, 2, 3])
        assert block.tco == bytes([10, 4, 5, 6])
        assert block.vertical_position == 12
        assert block.justification_code == 0x01
        assert block.comment_flag == 0
        assert block.text_field == make_text_field(b"Text")
        assert len(block.text_field) == 112

    def test_wrong_size_raises(self):
        with pytest.raises(ValueError, match="TTI block must be 128 bytes"):
            parse_tti_block(b"x" * 100)


# =============================================================================
# Tests for decode_tti_block
# =============================================================================


class TestDecodeTTIBlock:
    """Tests for single block decoding."""

    def test_cue_fields(self):
        tti = make_tti_block(tci=(10, 0, 5, 0), tco=(10, 0, 7, 0), text=b"Hi")

        cue = decode_tti_block(tti, 4, Fraction(1, 1000))

        assert cue.start_ms == 5000
        assert cue.end_ms == 7000
        assert cue.readorder == 4
        assert cue.end_display_time == 2000
        assert cue.text == "{\\an2}" + DEFAULT_TAGS + "Hi{\\bord3}"

    def test_end_display_time_rescaled(self):
        tti = make_tti_block(tci=(10, 0, 5, 0), tco=(10, 0, 7, 0))

        cue = decode_tti_block(tti, 0, Fraction(1, 90000))

        assert cue.end_ms == 7000
        assert cue.end_display_time == 180000

    def test_empty_block_returns_none(self):
        tti = make_tti_block(text=b"")

        assert decode_tti_block(tti, 0, Fraction(1, 1000)) is None

    def test_frames_in_timing(self):
        tti = make_tti_block(tci=(10, 0, 1, 12), tco=(10, 0, 2, 0))

        cue = decode_tti_block(tti, 0, Fraction(1, 1000))

        assert cue.start_ms == 1480
        assert cue.end_ms == 2000

    def test_layout_bytes_not_part_of_text(self):
        """Bytes 13-15 never leak into the text."""
        tti = make_tti_block(vp=0x41, jc=0x42, text=b"X")

        cue = decode_tti_block(tti, 0, Fraction(1, 1000))

        assert cue.text.endswith(DEFAULT_TAGS + "X{\\bord3}")


# =============================================================================
# Tests for parse_tti_blocks
# =============================================================================


class TestParseTTIBlocks:
    """Tests for the block reading loop."""

    def test_parse_single_block(self):
        buffer = make_tti_buffer([make_tti_block(text=b"Hello World")])

        cues = parse_tti_blocks(buffer)

        assert len(cues) == 1
        assert "Hello World" in cues[0].text

    def test_parse_multiple_blocks(self):
        buffer = make_tti_buffer(
            [
                make_tti_block(sn=1, text=b"First caption"),
                make_tti_block(sn=2, text=b"Second caption"),
            ]
        )

        cues = parse_tti_blocks(buffer)

        assert len(cues) == 2
        assert "First caption" in cues[0].text
        assert "Second caption" in cues[1].text

    def test_parse_empty_buffer(self):
        assert parse_tti_blocks(io.BytesIO(b"")) == []

    def test_partial_block_ignored(self):
        buffer = make_tti_buffer([make_tti_block(text=b"Complete"), b"x" * 50])

        cues = parse_tti_blocks(buffer)

        assert len(cues) == 1

    def test_readorder_only_counts_emitted_cues(self):
        buffer = make_tti_buffer(
            [
                make_tti_block(sn=1, text=b"One"),
                make_tti_block(sn=2, text=b""),
                make_tti_block(sn=3, text=b"Three"),
            ]
        )

        cues = parse_tti_blocks(buffer)

        assert [cue.readorder for cue in cues] == [0, 1]
        assert "Three" in cues[1].text

    def test_first_readorder(self):
        buffer = make_tti_buffer([make_tti_block(), make_tti_block()])

        cues = parse_tti_blocks(buffer, first_readorder=10)

        assert [cue.readorder for cue in cues] == [10, 11]

    def test_sink_receives_cues_in_order(self):
        received = []
        buffer = make_tti_buffer(
            [make_tti_block(text=b"A"), make_tti_block(text=b"B")]
        )

        cues = parse_tti_blocks(buffer, sink=received.append)

        assert received == cues

    def test_shared_timestamps_keep_read_order(self):
        buffer = make_tti_buffer(
            [
                make_tti_block(tci=(10, 0, 1, 0), text=b"A"),
                make_tti_block(tci=(10, 0, 1, 0), text=b"B"),
            ]
        )

        cues = parse_tti_blocks(buffer)

        assert cues[0].start_ms == cues[1].start_ms
        assert cues[0].readorder < cues[1].readorder


# =============================================================================
# Tests for parse_tti_blocks - Failure Mid-Stream
# =============================================================================


def fail_on_second_block(monkeypatch):
    """Make markup building raise MemoryError from the second block on."""
    original = tti_blocks_parser.build_cue_markup
    calls = []

    def build(*args):
        calls.append(args)
        if len(calls) >= 2:
            raise MemoryError("out of memory")
        return original(*args)

    monkeypatch.setattr(tti_blocks_parser, "build_cue_markup", build)


class TestParseTTIBlocksMemoryError:
    """Tests for a failing block after cues were already emitted."""

    def test_error_propagates_and_emitted_cue_kept(self, monkeypatch):
        fail_on_second_block(monkeypatch)
        received = []
        buffer = make_tti_buffer(
            [make_tti_block(text=b"First"), make_tti_block(text=b"Second")]
        )

        with pytest.raises(MemoryError):
            parse_tti_blocks(buffer, sink=received.append)

        assert len(received) == 1
        assert received[0].readorder == 0
        assert received[0].text == "{\\an2}" + DEFAULT_TAGS + "First{\\bord3}"
