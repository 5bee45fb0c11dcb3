class RasterError(Exception):
    """Raised when a PDF cannot be rendered to images."""
