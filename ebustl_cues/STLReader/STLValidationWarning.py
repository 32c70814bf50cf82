class STLValidationWarning(UserWarning):
    """Non-fatal irregularity found while decoding an EBU STL file."""
