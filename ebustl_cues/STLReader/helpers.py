"""
EBU STL Helpers - STLReader
- Turns the fields of a TTI block into cue data:
    - Timecodes (HH MM SS FF bytes -> milliseconds)
    - ISO 6937 text (diacritic + letter pairs -> Unicode)
    - Control codes (line breaks, end of text, text/background colors)
    - ASS markup (alignment, per-line color tags, border width)
"""

import logging
from fractions import Fraction
from typing import List, Dict, Tuple

from ebustl_cues.models import (
    ASS_BORDER_TAG,
    ASS_LINE_BREAK,
    BACKGROUND_COLOR_BGR,
    FRAME_DURATION_MS,
    TEXT_COLOR_BGR,
    TIMECODE_HOUR_OFFSET,
    VERTICAL_POSITION_MIDDLE_FIRST,
    VERTICAL_POSITION_MIDDLE_LAST,
    BackgroundColor,
    ColorState,
    EBUSTLControlCode,
    HorizontalAlignment,
    JustificationCode,
    STLLine,
    TextColor,
    VerticalAlignment,
)

logger = logging.getLogger(__name__)

MS_TIME_BASE = Fraction(1, 1000)


# =============================================================================
# Timecodes
# =============================================================================


def decode_timecode(timecode: bytes) -> int:
    """
    Convert a 4-byte HH MM SS FF timecode into milliseconds.

    Hours carry a +10 offset and frames are counted at 25 fps. Field
    ranges are not checked, so minutes > 59 still give a number.
    """
    hours, minutes, seconds, frames = timecode[0], timecode[1], timecode[2], timecode[3]
    return (
        (hours - TIMECODE_HOUR_OFFSET) * 3600 + minutes * 60 + seconds
    ) * 1000 + frames * FRAME_DURATION_MS


def rescale_duration(duration_ms: int, time_base: Fraction) -> int:
    """
    Rescale a millisecond duration into ``time_base`` units.

    Rounds to the nearest integer, halves away from zero.
    """
    scaled = Fraction(duration_ms) * MS_TIME_BASE / time_base
    magnitude = abs(scaled)
    rounded = int(magnitude + Fraction(1, 2))
    return rounded if scaled >= 0 else -rounded


def format_block_hex(block: bytes) -> str:
    """Format a TTI block as space separated hex bytes for debug logs."""
    return " ".join(f"{byte:02X}" for byte in block)


# =============================================================================
# ISO 6937 Text Decoding
# =============================================================================

ISO6937_GRAVE = 0xC1
ISO6937_ACUTE = 0xC2
ISO6937_CIRCUMFLEX = 0xC3
ISO6937_DIAERESIS = 0xC8

ISO6937_DIACRITIC_FIRST = 0xC1
ISO6937_DIACRITIC_LAST = 0xCF

# (diacritic byte, base letter) -> precomposed character
ISO6937_COMBINATIONS: Dict[Tuple[int, str], str] = {
    (ISO6937_GRAVE, "A"): "À",
    (ISO6937_GRAVE, "E"): "È",
    (ISO6937_GRAVE, "I"): "Ì",
    (ISO6937_GRAVE, "O"): "Ò",
    (ISO6937_GRAVE, "U"): "Ù",
    (ISO6937_GRAVE, "a"): "à",
    (ISO6937_GRAVE, "e"): "è",
    (ISO6937_GRAVE, "i"): "ì",
    (ISO6937_GRAVE, "o"): "ò",
    (ISO6937_GRAVE, "u"): "ù",
    (ISO6937_ACUTE, "A"): "Á",
    (ISO6937_ACUTE, "E"): "É",
    (ISO6937_ACUTE, "I"): "Í",
    (ISO6937_ACUTE, "O"): "Ó",
    (ISO6937_ACUTE, "U"): "Ú",
    (ISO6937_ACUTE, "a"): "á",
    (ISO6937_ACUTE, "e"): "é",
    (ISO6937_ACUTE, "i"): "í",
    (ISO6937_ACUTE, "o"): "ó",
    (ISO6937_ACUTE, "u"): "ú",
    (ISO6937_CIRCUMFLEX, "A"): "Â",
    (ISO6937_CIRCUMFLEX, "E"): "Ê",
    (ISO6937_CIRCUMFLEX, "I"): "Î",
    (ISO6937_CIRCUMFLEX, "O"): "Ô",
    (ISO6937_CIRCUMFLEX, "U"): "Û",
    (ISO6937_CIRCUMFLEX, "a"): "â",
    (ISO6937_CIRCUMFLEX, "e"): "ê",
    (ISO6937_CIRCUMFLEX, "i"): "î",
    (ISO6937_CIRCUMFLEX, "o"): "ô",
    (ISO6937_CIRCUMFLEX, "u"): "û",
    (ISO6937_DIAERESIS, "A"): "Ä",
    (ISO6937_DIAERESIS, "E"): "Ë",
    (ISO6937_DIAERESIS, "I"): "Ï",
    (ISO6937_DIAERESIS, "O"): "Ö",
    (ISO6937_DIAERESIS, "U"): "Ü",
    (ISO6937_DIAERESIS, "a"): "ä",
    (ISO6937_DIAERESIS, "e"): "ë",
    (ISO6937_DIAERESIS, "i"): "ï",
    (ISO6937_DIAERESIS, "o"): "ö",
    (ISO6937_DIAERESIS, "u"): "ü",
}


def transcode_iso6937(raw: bytes) -> str:
    """
    Decode ISO 6937 bytes to a Unicode string.

    A diacritic byte (0xC1-0xCF) followed by a base letter becomes one
    precomposed character. When the pair has no mapping, or the diacritic
    is the last byte, the diacritic is kept as a literal character and the
    following byte is decoded on its own. Every other byte maps to the
    Latin-1 code point of the same value.
    """
    chars: List[str] = []
    i = 0
    length = len(raw)
    while i < length:
        byte = raw[i]
        if ISO6937_DIACRITIC_FIRST <= byte <= ISO6937_DIACRITIC_LAST and i + 1 < length:
            combined = ISO6937_COMBINATIONS.get((byte, chr(raw[i + 1])))
            if combined is not None:
                chars.append(combined)
                i += 2
                continue
        chars.append(chr(byte))
        i += 1
    return "".join(chars)


# =============================================================================
# Control Codes
# =============================================================================


def split_text_field(text_field: bytes) -> List[STLLine]:
    """
    Split a TTI text field into display lines.

    Single forward pass over the field:
    - 0x8A closes the current line and starts a new one with default colors
    - 0x8F ends the text
    - 0x00-0x07 set the text color, 0x10-0x17 the background color; the
      last setting on a line is the one the line is shown with
    - bytes from 0x20 up are collected raw, other control bytes are dropped
    """
    lines: List[STLLine] = []
    current = STLLine()

    for offset, byte in enumerate(text_field):
        if byte == EBUSTLControlCode.NEWLINE:
            lines.append(current)
            current = STLLine()
            continue
        if byte == EBUSTLControlCode.END_OF_TEXT:
            break
        if EBUSTLControlCode.TEXT_COLOR_FIRST <= byte <= EBUSTLControlCode.TEXT_COLOR_LAST:
            current.colors = ColorState(
                text_color=TextColor(byte),
                background_color=current.colors.background_color,
            )
            logger.debug(
                "Text color %s at offset %d (line %d)",
                current.colors.text_color.name,
                offset,
                len(lines),
            )
            continue
        if (
            EBUSTLControlCode.BACKGROUND_COLOR_FIRST
            <= byte
            <= EBUSTLControlCode.BACKGROUND_COLOR_LAST
        ):
            current.colors = ColorState(
                text_color=current.colors.text_color,
                background_color=BackgroundColor(byte & 0x07),
            )
            logger.debug(
                "Background color %s at offset %d (line %d)",
                current.colors.background_color.name,
                offset,
                len(lines),
            )
            continue
        if byte >= EBUSTLControlCode.SPACE:
            current.raw.append(byte)

    lines.append(current)
    return lines


# =============================================================================
# ASS Markup
# =============================================================================


def resolve_alignment(vertical_position: int, justification_code: int) -> int:
    """
    Map Vertical Position and Justification Code to an ASS numpad
    alignment (1-9).

    Unknown justification codes fall back to center.
    """
    if justification_code == JustificationCode.LEFT:
        horizontal = HorizontalAlignment.LEFT
    elif justification_code == JustificationCode.RIGHT:
        horizontal = HorizontalAlignment.RIGHT
    else:
        horizontal = HorizontalAlignment.CENTER

    if vertical_position < VERTICAL_POSITION_MIDDLE_FIRST:
        vertical = VerticalAlignment.BOTTOM
    elif vertical_position <= VERTICAL_POSITION_MIDDLE_LAST:
        vertical = VerticalAlignment.MIDDLE
    else:
        vertical = VerticalAlignment.TOP

    return (vertical - 1) * 3 + horizontal


def color_tags(colors: ColorState) -> str:
    """ASS primary and border color override tags for a line."""
    return (
        f"{{\\c&H{TEXT_COLOR_BGR[colors.text_color]}&}}"
        f"{{\\3c&H{BACKGROUND_COLOR_BGR[colors.background_color]}&}}"
    )


def build_cue_markup(
    text_field: bytes, vertical_position: int, justification_code: int
) -> str:
    """
    Build the ASS markup for one TTI block.

    Returns an empty string when the text field has no printable
    characters, in which case the block produces no cue.
    """
    rendered: List[str] = []
    for line in split_text_field(text_field):
        if not line.has_content:
            continue
        rendered.append(color_tags(line.colors) + transcode_iso6937(bytes(line.raw)))

    if not rendered:
        return ""

    parts = [f"{{\\an{resolve_alignment(vertical_position, justification_code)}}}"]
    parts.append(ASS_LINE_BREAK.join(rendered))
    parts.append(ASS_BORDER_TAG)
    return "".join(parts)
