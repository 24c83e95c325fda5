"""
Custom exceptions for the ISDA CDS analytics library.

Argument problems (bad lengths, unsorted pillars, tiny bumps) are reported with
the builtin ValueError. The classes below cover curve and calibration failures.
"""


class CDSError(Exception):
    """Base exception for all CDS analytics errors."""


class CurveError(CDSError):
    """Invalid curve construction (unsorted knots, mismatched lengths)."""


class BootstrapError(CurveError):
    """A credit or yield curve could not be calibrated."""

    def __init__(self, message: str, pillar: int | None = None):
        super().__init__(message)
        self.pillar = pillar


class ArbitrageError(BootstrapError):
    """Calibration would need a negative forward hazard rate."""


class ConvergenceError(CDSError):
    """Root finding failed to bracket or converge."""
