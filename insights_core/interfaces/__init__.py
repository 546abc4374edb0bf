"""Interface protocols for dependency inversion."""

from .protocols import ISampleSource

__all__ = ["ISampleSource"]
