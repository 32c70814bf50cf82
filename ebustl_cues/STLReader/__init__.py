from .STLReader import STLReader
from .STLValidationWarning import STLValidationWarning
from .decoder import decode_stl_file, probe_stl

__all__ = ["STLReader", "STLValidationWarning", "decode_stl_file", "probe_stl"]
