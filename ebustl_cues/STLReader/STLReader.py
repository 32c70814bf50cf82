"""
STLReader - EBU STL (.stl) subtitle decoder.

Supports EBU TECH 3264‑E (EBU STL file) format, ISO 6937 text at 25 fps.

The reader skips the GSI block (first 1024 bytes) and decodes the TTI blocks
(128 bytes each) into cues carrying ASS markup:
    [
        {
            "start_ms": 5000,                 # milliseconds
            "end_ms": 7000,                   # milliseconds
            "text": "{\\an2}{\\c&HFFFFFF&}{\\3c&H000000&}Caption text{\\bord3}",
            "readorder": 0,                   # sequence index in this session
            "end_display_time": 2000,         # duration in the reader's time base
        },
        ...
    ]
"""

from __future__ import annotations

from fractions import Fraction
from typing import Any, Callable, Dict, List, Optional

import pysubs2

from ebustl_cues.ass_writer import STLAssWriter
from ebustl_cues.models import STLCue
from .decoder import decode_stl_file
from .parsers.tti_blocks_parser import decode_tti_block


class STLReader:
    """
    EBU STL reader producing styled cues.

    One instance is one decoding session: cue sequence numbers keep
    increasing across ``read`` and ``decode_block`` calls.
    """

    def __init__(
        self,
        time_base: Optional[Fraction] = None,
        sink: Optional[Callable[[STLCue], None]] = None,
    ):
        """
        Args:
            time_base: Time base that cue durations are rescaled into.
                       Defaults to milliseconds (1/1000).
            sink: Optional callable receiving each cue as it is decoded.
        """
        if time_base is None:
            time_base = Fraction(1, 1000)
        time_base = Fraction(time_base)
        if time_base <= 0:
            raise ValueError(f"Time base must be positive, got {time_base}")

        self._time_base = time_base
        self._sink = sink
        self._readorder = 0
        self._cues: Optional[List[STLCue]] = None
        self._result: Optional[Dict[str, Any]] = None

    @property
    def time_base(self) -> Fraction:
        return self._time_base

    @property
    def readorder(self) -> int:
        """Sequence number the next decoded cue will get."""
        return self._readorder

    @property
    def cues(self) -> Optional[List[STLCue]]:
        return self._cues

    @property
    def result(self) -> Optional[Dict[str, Any]]:
        return self._result

    # --------------------------------------------------------------------- #
    # Public API
    # --------------------------------------------------------------------- #
    def read(self, raw: bytes) -> Dict[str, Any]:
        """
        Decode STL binary bytes and return a cue payload
        """
        cues: List[STLCue] = []

        def collect(cue: STLCue) -> None:
            cues.append(cue)
            self._readorder = cue.readorder + 1
            if self._sink is not None:
                self._sink(cue)

        self._result = decode_stl_file(
            raw,
            time_base=self._time_base,
            first_readorder=self._readorder,
            sink=collect,
        )
        self._cues = cues
        return self._result

    def decode_block(self, tti: bytes) -> Optional[STLCue]:
        """
        Decode a single 128‑byte TTI block.

        Returns None for blocks without text; those do not consume a
        sequence number.
        """
        cue = decode_tti_block(tti, self._readorder, self._time_base)
        if cue is None:
            return None

        self._readorder += 1
        if self._sink is not None:
            self._sink(cue)
        return cue

    def to_ass(self) -> pysubs2.SSAFile:
        """Build an ASS document from the cues of the last ``read``."""
        writer = STLAssWriter()
        writer.add_cues(self._cues or [])
        return writer.get_subs()
