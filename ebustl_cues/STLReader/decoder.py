import io
import logging
import warnings
from fractions import Fraction
from typing import Any, Callable, Dict, Optional

from ebustl_cues.models import (
    GSI_BLOCK_SIZE,
    STL_SIGNATURE,
    STL_SIGNATURE_OFFSET,
    TTI_BLOCK_SIZE,
    STLCue,
    cues_to_dicts,
)
from .parsers.tti_blocks_parser import parse_tti_blocks
from .STLValidationWarning import STLValidationWarning

logger = logging.getLogger(__name__)


def probe_stl(raw: bytes) -> bool:
    """
    Check for the "STL" signature at bytes 3-5 (start of the Disk Format
    Code, e.g. "STL25.01").
    """
    if not raw or len(raw) < STL_SIGNATURE_OFFSET + len(STL_SIGNATURE):
        return False
    end = STL_SIGNATURE_OFFSET + len(STL_SIGNATURE)
    return bytes(raw[STL_SIGNATURE_OFFSET:end]) == STL_SIGNATURE


def decode_stl_file(
    raw: bytes,
    time_base: Optional[Fraction] = None,
    first_readorder: int = 0,
    sink: Optional[Callable[[STLCue], None]] = None,
) -> Dict[str, Any]:
    """
    Decode STL binary bytes and return a cue payload

    Args:
        raw: Complete STL file (1024-byte GSI header + TTI blocks)
        time_base: Time base for each cue's end_display_time (default 1/1000)
        first_readorder: Sequence number given to the first decoded cue
        sink: Optional callable receiving each STLCue as soon as it is decoded

    Returns a dict with:
        - cues: list of cue dicts (start_ms, end_ms, text, readorder,
          end_display_time)
        - time_base: the time base used
        - next_readorder: sequence number for the next cue in the session
    """
    if not raw:
        raise ValueError("STL raw data in bytes is required")

    if len(raw) < GSI_BLOCK_SIZE:
        raise ValueError(f"STL file too short to contain GSI header: {len(raw)} bytes")

    if not probe_stl(raw):
        dfc = raw[3:11].decode("ascii", errors="ignore").strip()
        raise ValueError(
            f"Invalid EBU-STL file: Disk Format Code '{dfc}' does not start with 'STL'. "
            "This file does not appear to be a valid EBU-STL subtitle file."
        )

    if time_base is None:
        time_base = Fraction(1, 1000)

    buffer = io.BytesIO(raw)

    # GSI block (first 1024 bytes) is skipped without interpretation
    buffer.seek(GSI_BLOCK_SIZE)

    # TTI blocks (remaining 128‑byte records)
    cues = parse_tti_blocks(
        buffer, time_base=time_base, first_readorder=first_readorder, sink=sink
    )
    logger.info("Decoded %d cue(s) from %d bytes of STL data", len(cues), len(raw))

    trailing = (len(raw) - GSI_BLOCK_SIZE) % TTI_BLOCK_SIZE
    if trailing:
        warnings.warn(
            f"STL file validation issues: {trailing} trailing byte(s) after the "
            f"last complete TTI block were ignored. "
            f"Decoded {len(cues)} cues successfully.",
            STLValidationWarning,
            stacklevel=3,
        )

    return {
        "cues": cues_to_dicts(cues),
        "time_base": time_base,
        "next_readorder": first_readorder + len(cues),
    }
