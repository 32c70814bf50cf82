"""
ASS (Advanced SubStation Alpha) document builder for decoded STL cues.

Cue text is already ASS markup (alignment, colors, line breaks), so events
are added verbatim on top of a fixed PAL script header.
"""

from __future__ import annotations

from typing import Iterable

import pysubs2
from pysubs2 import Alignment, SSAEvent, SSAFile, SSAStyle

from ebustl_cues.models import STLCue


class STLAssWriter:
    """Builds ASS subtitle files from STL cues."""

    def __init__(self, play_res_x: int = 720, play_res_y: int = 576):
        """
        Initialize ASS builder.

        Args:
            play_res_x: Script resolution width (PAL frame by default)
            play_res_y: Script resolution height
        """
        self.play_res_x = play_res_x
        self.play_res_y = play_res_y
        self.subs = SSAFile()

        # Set script info
        self.subs.info["ScriptType"] = "v4.00+"
        self.subs.info["PlayResX"] = str(play_res_x)
        self.subs.info["PlayResY"] = str(play_res_y)
        self.subs.info["ScaledBorderAndShadow"] = "yes"
        self.subs.info["YCbCr Matrix"] = "None"

        default_style = SSAStyle(
            fontname="Arial",
            fontsize=30,
            primarycolor=pysubs2.Color(255, 255, 255, 0),  # White
            secondarycolor=pysubs2.Color(255, 0, 0, 0),  # Red
            outlinecolor=pysubs2.Color(0, 0, 0, 0),  # Black outline
            backcolor=pysubs2.Color(0, 0, 0, 0),  # Black shadow
            bold=False,
            italic=False,
            underline=False,
            strikeout=False,
            scalex=100.0,
            scaley=100.0,
            spacing=0.0,
            angle=0.0,
            borderstyle=1,
            outline=1.0,
            shadow=1.0,
            alignment=Alignment.BOTTOM_CENTER,
            marginl=10,
            marginr=10,
            marginv=10,
            encoding=1,
        )

        self.subs.styles["Default"] = default_style

    def add_cue(self, cue: STLCue) -> None:
        """Add one cue as a Dialogue event."""
        event = SSAEvent(
            start=cue.start_ms,
            end=cue.end_ms,
            text=cue.text,
            style="Default",
        )
        self.subs.events.append(event)

    def add_cues(self, cues: Iterable[STLCue]) -> None:
        """Add cues in read order."""
        for cue in sorted(cues, key=lambda c: c.readorder):
            self.add_cue(cue)

    def to_string(self) -> str:
        return self.subs.to_string("ass")

    def save(self, output_path: str) -> None:
        """
        Save ASS file to disk.

        Args:
            output_path: Path to save ASS file
        """
        self.subs.save(output_path, format_="ass")

    def get_subs(self) -> SSAFile:
        """Get the SSAFile object for further processing."""
        return self.subs
