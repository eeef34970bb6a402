"""pyramid-match - Pyramid Match Kernel over multi-resolution histograms.

Compares two hierarchical histograms bin by bin along shared index paths
and returns a resolution-weighted similarity or cost.
"""

__version__ = "0.1.0"
__author__ = "pyramid-match Team"

from .core import (
    MatchReturnType,
    PyramidMatcher,
    get_pyramid_matcher,
    pyramid_match_cost,
    pyramid_match_similarity,
)
from .domain.entities import Bin, BinWeightScheme, Histogram

__all__ = [
    "Bin",
    "BinWeightScheme",
    "Histogram",
    "MatchReturnType",
    "PyramidMatcher",
    "get_pyramid_matcher",
    "pyramid_match_cost",
    "pyramid_match_similarity",
]
