# fea3d/errors.py
"""Exceptions raised by the analysis pipeline and its I/O collaborators."""


class InvalidModelError(ValueError):
    """Raised when the analysis input references nodes/DOFs that do not exist."""
    pass


class GeometryError(InvalidModelError):
    """Raised for zero-length elements or a degenerate local frame."""
    pass


class MechanismError(RuntimeError):
    """Raised when the augmented system cannot be factorized (unstable or over-constrained)."""
    pass


class ConfigError(ValueError):
    """Raised when a job file cannot be read or fails validation."""
    pass


class ExportError(OSError):
    """
    Raised when writing a result file fails.

    The analysis itself succeeded: ``summary`` holds the complete result.
    """

    def __init__(self, message, summary=None):
        super().__init__(message)
        self.summary = summary
