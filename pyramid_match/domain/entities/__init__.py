# Domain Entities Package
"""
Histogram bins, the arena-backed histogram and bin weighting schemes.
"""

from .bin_weight_scheme import BinWeightScheme
from .histogram import Bin, Histogram

__all__ = ["Bin", "BinWeightScheme", "Histogram"]
