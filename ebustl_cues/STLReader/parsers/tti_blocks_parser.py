import logging
import struct
from fractions import Fraction
from typing import BinaryIO, Callable, List, Optional

from ebustl_cues.models import (
    TTI_BLOCK_SIZE,
    TTI_TEXT_FIELD_LENGTH,
    TTI_TEXT_FIELD_OFFSET,
    STLCue,
    TTIBlock,
)
from ebustl_cues.STLReader.helpers import (
    build_cue_markup,
    decode_timecode,
    format_block_hex,
    rescale_duration,
)

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------ #
# TTI block reading
# ------------------------------------------------------------------ #
def read_tti_block(buffer: BinaryIO) -> Optional[bytes]:
    """
    Read the next 128‑byte TTI block, or None once fewer than 128 bytes
    are left (end of stream).
    """
    tti = buffer.read(TTI_BLOCK_SIZE)
    if not tti or len(tti) < TTI_BLOCK_SIZE:
        return None
    return tti


def parse_tti_block(tti: bytes) -> TTIBlock:
    """
    Split a TTI block into its fields.

    TTI layout (128 bytes):
     0:     SGN  (Subtitle Group Number)
     1‑2:   SN   (Subtitle Number, big‑endian)
     3:     EBN  (Extension Block Number)
     4:     CS   (Cumulative Status)
     5‑8:   TCI  (In‑cue   HH:MM:SS:FF, 1 byte per field)
     9‑12:  TCO  (Out‑cue  HH:MM:SS:FF, 1 byte per field)
     13:    VP   (Vertical Position)
     14:    JC   (Justification Code: 0=unchanged, 1=left, 2=center, 3=right)
     15:    CF   (Comment Flag: 0=subtitle, 1=comment)
     16‑127: Text field (112 bytes)
    """
    if len(tti) != TTI_BLOCK_SIZE:
        raise ValueError(f"TTI block must be {TTI_BLOCK_SIZE} bytes, got {len(tti)}")

    return TTIBlock(
        sgn=tti[0],
        sn=struct.unpack(">H", tti[1:3])[0],
        ebn=tti[3],
        cs=tti[4],
        tci=bytes(tti[5:9]),
        tco=bytes(tti[9:13]),
        vertical_position=tti[13],
        justification_code=tti[14],
        comment_flag=tti[15],
        text_field=bytes(
            tti[TTI_TEXT_FIELD_OFFSET : TTI_TEXT_FIELD_OFFSET + TTI_TEXT_FIELD_LENGTH]
        ),
    )


def decode_tti_block(
    tti: bytes, readorder: int, time_base: Fraction
) -> Optional[STLCue]:
    """
    Decode one TTI block into a cue.

    Returns None when the block has no printable text.
    """
    logger.debug("TTI block (hex): %s", format_block_hex(tti))
    block = parse_tti_block(tti)

    text = build_cue_markup(
        block.text_field, block.vertical_position, block.justification_code
    )
    if not text:
        logger.debug("Skipping TTI block SN=%d without text", block.sn)
        return None

    start_ms = decode_timecode(block.tci)
    duration_ms = decode_timecode(block.tco) - start_ms
    logger.debug("Cue %d markup: %s", readorder, text)

    return STLCue(
        start_ms=start_ms,
        end_ms=start_ms + duration_ms,
        text=text,
        readorder=readorder,
        end_display_time=rescale_duration(duration_ms, time_base),
    )


# ------------------------------------------------------------------ #
# TTI parsing
# ------------------------------------------------------------------ #
def parse_tti_blocks(
    buffer: BinaryIO,
    time_base: Fraction = Fraction(1, 1000),
    first_readorder: int = 0,
    sink: Optional[Callable[[STLCue], None]] = None,
) -> List[STLCue]:
    """
    Decode all 128‑byte TTI blocks from the given buffer.

    Reading stops at the first short block. Only blocks with text become
    cues; they are numbered from ``first_readorder`` upwards and handed to
    ``sink`` as soon as they are decoded.
    """
    cues: List[STLCue] = []
    readorder = first_readorder

    while True:
        tti = read_tti_block(buffer)
        if tti is None:
            break

        cue = decode_tti_block(tti, readorder, time_base)
        if cue is None:
            continue

        readorder += 1
        cues.append(cue)
        if sink is not None:
            sink(cue)

    return cues
