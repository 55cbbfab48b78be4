class InvalidParameterError(ValueError):
    """Raised before any computation when cell size, bins or the pixel buffer are unusable."""
