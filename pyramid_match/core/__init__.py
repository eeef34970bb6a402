"""Core matching components for pyramid-match."""

from .matcher import (
    MatchNode,
    MatchReturnType,
    PyramidMatcher,
    get_pyramid_matcher,
    pyramid_match_cost,
    pyramid_match_similarity,
)

__all__ = [
    "MatchNode",
    "MatchReturnType",
    "PyramidMatcher",
    "get_pyramid_matcher",
    "pyramid_match_cost",
    "pyramid_match_similarity",
]
