from __future__ import annotations


class SDGError(Exception):
    """Base class for errors raised by the segment Delaunay graph."""


class DegenerateInputError(SDGError):
    """A site that the diagram cannot represent (zero length, collinear overlap)."""

    def __init__(self, message: str, site=None):
        super().__init__(message)
        self.site = site


class InvalidTriangulationError(SDGError):
    """A broken structural or Delaunay invariant. Not recoverable."""


class UnsupportedConfigurationError(SDGError):
    """An edge that cannot be classified as one of the four primitive kinds."""


class SiteFormatError(SDGError, ValueError):
    def __init__(self, message: str, line_no: int | None = None):
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no
