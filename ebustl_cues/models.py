"""
EBU STL Models - Data structures and type definitions.

Contains:
- Format constants for the GSI header and TTI blocks
- Enums for control codes, colors and justification
- Color tables used by the ASS markup
- Dataclasses for parsed blocks, lines and decoded cues
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Dict, Any


# =============================================================================
# Format Constants
# =============================================================================

GSI_BLOCK_SIZE = 1024
TTI_BLOCK_SIZE = 128
TTI_TEXT_FIELD_OFFSET = 16
TTI_TEXT_FIELD_LENGTH = TTI_BLOCK_SIZE - TTI_TEXT_FIELD_OFFSET

# Offset of the "STL" signature inside the Disk Format Code
STL_SIGNATURE_OFFSET = 3
STL_SIGNATURE = b"STL"

FRAME_RATE = 25
FRAME_DURATION_MS = 1000 // FRAME_RATE
TIMECODE_HOUR_OFFSET = 10


# =============================================================================
# EBU STL Control Codes (for Text Field)
# =============================================================================


class EBUSTLControlCode(IntEnum):
    """EBU STL Text Field control codes"""

    # Text colors (0x00-0x07)
    TEXT_COLOR_FIRST = 0x00
    TEXT_COLOR_LAST = 0x07

    # Background colors (0x10-0x17)
    BACKGROUND_COLOR_FIRST = 0x10
    BACKGROUND_COLOR_LAST = 0x17

    # First printable character
    SPACE = 0x20

    # Line break
    NEWLINE = 0x8A

    # End of text / unused space filler
    END_OF_TEXT = 0x8F


# =============================================================================
# Colors
# =============================================================================


class TextColor(IntEnum):
    """Text colors selected by control bytes 0x00-0x07"""

    WHITE = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    BLACK = 7


class BackgroundColor(IntEnum):
    """Background colors selected by control bytes 0x10-0x17 (low 3 bits)"""

    WHITE = 0
    YELLOW = 1
    GREEN = 2
    BLUE = 3
    RED = 4
    MAGENTA = 5
    CYAN = 6
    BLACK = 7


# ASS colors are written as &HBBGGRR&
TEXT_COLOR_BGR: Dict[TextColor, str] = {
    TextColor.WHITE: "FFFFFF",
    TextColor.RED: "0000FF",
    TextColor.GREEN: "00FF00",
    TextColor.YELLOW: "00FFFF",
    TextColor.BLUE: "FF0000",
    TextColor.MAGENTA: "FF00FF",
    TextColor.CYAN: "FFFF00",
    TextColor.BLACK: "000000",
}

BACKGROUND_COLOR_BGR: Dict[BackgroundColor, str] = {
    BackgroundColor.WHITE: "FFFFFF",
    BackgroundColor.YELLOW: "00FFFF",
    BackgroundColor.GREEN: "00FF00",
    BackgroundColor.BLUE: "FF0000",
    BackgroundColor.RED: "0000FF",
    BackgroundColor.MAGENTA: "FF00FF",
    BackgroundColor.CYAN: "FFFF00",
    BackgroundColor.BLACK: "000000",
}


# =============================================================================
# Layout Codes
# =============================================================================


class JustificationCode(IntEnum):
    """EBU STL Justification codes"""

    UNCHANGED = 0x00
    LEFT = 0x01
    CENTERED = 0x02
    RIGHT = 0x03


class HorizontalAlignment(IntEnum):
    """Column of the ASS numpad alignment grid"""

    LEFT = 1
    CENTER = 2
    RIGHT = 3


class VerticalAlignment(IntEnum):
    """Row rank of the ASS numpad alignment grid (1 is the top row)"""

    TOP = 1
    MIDDLE = 2
    BOTTOM = 3


# Vertical Position rows: below 8 is bottom, 8-16 middle, above 16 top
VERTICAL_POSITION_MIDDLE_FIRST = 8
VERTICAL_POSITION_MIDDLE_LAST = 16


# =============================================================================
# ASS Markup
# =============================================================================

ASS_LINE_BREAK = "\\N"
ASS_BORDER_TAG = "{\\bord3}"


# =============================================================================
# Parsed Data Structures
# =============================================================================


@dataclass(frozen=True)
class TTIBlock:
    """The fields of one 128-byte TTI block."""

    sgn: int  # Subtitle Group Number
    sn: int  # Subtitle Number
    ebn: int  # Extension Block Number
    cs: int  # Cumulative Status
    tci: bytes  # Time Code In (HH MM SS FF)
    tco: bytes  # Time Code Out (HH MM SS FF)
    vertical_position: int
    justification_code: int
    comment_flag: int
    text_field: bytes


@dataclass(frozen=True)
class ColorState:
    """Text and background color active on a line."""

    text_color: TextColor = TextColor.WHITE
    background_color: BackgroundColor = BackgroundColor.BLACK


@dataclass
class STLLine:
    """A single display line of a TTI text field."""

    raw: bytearray = field(default_factory=bytearray)
    colors: ColorState = field(default_factory=ColorState)

    @property
    def has_content(self) -> bool:
        """Check if the line holds any printable byte."""
        return bool(self.raw)


@dataclass(frozen=True)
class STLCue:
    """A decoded subtitle event."""

    start_ms: int
    end_ms: int
    text: str  # ASS markup
    readorder: int
    # Block duration in the decoding session's time base
    end_display_time: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_ms": self.start_ms,
            "end_ms": self.end_ms,
            "text": self.text,
            "readorder": self.readorder,
            "end_display_time": self.end_display_time,
        }


def cues_to_dicts(cues: List[STLCue]) -> List[Dict[str, Any]]:
    """Convert cues to their dictionary representation."""
    return [cue.to_dict() for cue in cues]
