"""Error taxonomy for the archiving pipeline."""

from __future__ import annotations


class FitArchiverError(RuntimeError):
    """Base class for archiver failures."""


class DecodeError(FitArchiverError):
    """Raised when a file cannot be read or decoded as a FIT activity."""


class InvalidTemplateError(FitArchiverError):
    """Raised when a file template cannot be compiled."""


class RenderError(FitArchiverError):
    """Raised when a compiled template cannot be rendered for a file."""


class CollisionExhaustedError(FitArchiverError):
    """Raised when every suffixed destination candidate is taken."""
