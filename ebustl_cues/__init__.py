from ebustl_cues.STLReader import STLReader, STLValidationWarning, decode_stl_file, probe_stl
from ebustl_cues.ass_writer import STLAssWriter
from ebustl_cues.models import STLCue

__all__ = [
    "STLReader",
    "STLValidationWarning",
    "STLAssWriter",
    "STLCue",
    "decode_stl_file",
    "probe_stl",
]
