"""
Bin weighting policies for pyramid matching.
"""

from enum import Enum


class BinWeightScheme(Enum):
    """How the size used to weight a matched bin pair is derived.

    GLOBAL: both histograms share one binning, so matched bins must
    report the same size and that size is used.
    LOCAL: each histogram sized its own bins; the two sizes are summed.
    """

    GLOBAL = "global"
    LOCAL = "local"
