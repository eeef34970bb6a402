# Domain Interfaces Package
"""
Abstract base classes defining what the matcher needs from a histogram.
"""

from .histogram_interface import HistogramInterface

__all__ = ["HistogramInterface"]
