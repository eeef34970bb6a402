"""Pyramid match kernel over multi-resolution histograms.

Two histograms are walked in lock-step from the root. Every pair of bins
sitting at the same index path in both trees contributes its intersection
min(count_a, count_b), minus whatever its children already matched, weighted
by the resolution of the bin: finer bins count more towards similarity and
less towards cost.

Example:
    >>> from pyramid_match import Histogram, PyramidMatcher
    >>> a = Histogram.from_bins([((0,), 4, 1)], root_count=10, root_size=4)
    >>> b = Histogram.from_bins([((0,), 6, 1)], root_count=10, root_size=4)
    >>> round(PyramidMatcher().get_pyramid_match_similarity(a, b), 6)
    3.2
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np

from pyramid_match.domain.entities.bin_weight_scheme import BinWeightScheme
from pyramid_match.domain.entities.histogram import Bin
from pyramid_match.domain.interfaces.histogram_interface import HistogramInterface
from pyramid_match.utils import get_logger, log_execution_time
from pyramid_match.utils.config import MatcherConfig
from pyramid_match.utils.exceptions import BinSizeMismatchError, InvalidInputError

logger = get_logger(__name__)

SchemeLike = Union[BinWeightScheme, str]

NO_PARENT = -1


class MatchReturnType(Enum):
    """Which aggregate a traversal returns."""

    COST = "cost"
    SIMILARITY = "similarity"


@dataclass
class MatchNode:
    """A pair of bins sharing one index path, waiting on the traversal stack.

    Attributes:
        first_slot: Slot of the bin in the first histogram.
        second_slot: Slot of the bin in the second histogram.
        parent: Stack position of the parent node, NO_PARENT for the root.
        intersection: Raw intersection already reported by finalized children.
        expanded: Whether common children have been pushed.
    """

    first_slot: int
    second_slot: int
    parent: int = NO_PARENT
    intersection: float = 0.0
    expanded: bool = False


class PyramidMatcher:
    """Computes pyramid match cost and similarity between two histograms.

    The matcher holds configuration only; every call owns its own work
    stack, so one instance can be shared across threads as long as the
    histograms are not mutated during a match.
    """

    def __init__(self, config: Optional[MatcherConfig] = None):
        """Initialize the matcher.

        Args:
            config: Matcher configuration. Defaults to MatcherConfig().
        """
        self.config = config if config is not None else MatcherConfig()
        logger.debug(
            f"PyramidMatcher initialized with default scheme "
            f"{self.config.bin_weight_scheme.value}"
        )

    @property
    def bin_weight_scheme(self) -> BinWeightScheme:
        return self.config.bin_weight_scheme

    def get_pyramid_match_cost(
        self,
        first: HistogramInterface,
        second: HistogramInterface,
        bin_weight_scheme: Optional[SchemeLike] = None,
    ) -> float:
        """Return the pyramid match cost between two histograms.

        The histogram with fewer bins is walked as the first tree; the
        result does not depend on argument order.

        Raises:
            BinSizeMismatchError: Under global weighting, matched bins differ in size.
            InvalidInputError: The scheme name is unknown.
        """
        scheme = self._resolve_scheme(bin_weight_scheme)
        if first.num_bins < second.num_bins:
            return self.match_pyramids(first, second, MatchReturnType.COST, scheme)
        return self.match_pyramids(second, first, MatchReturnType.COST, scheme)

    def get_pyramid_match_similarity(
        self,
        first: HistogramInterface,
        second: HistogramInterface,
        bin_weight_scheme: Optional[SchemeLike] = None,
    ) -> float:
        """Return the pyramid match similarity between two histograms.

        Raises:
            BinSizeMismatchError: Under global weighting, matched bins differ in size.
            InvalidInputError: The scheme name is unknown.
        """
        scheme = self._resolve_scheme(bin_weight_scheme)
        if first.num_bins < second.num_bins:
            return self.match_pyramids(first, second, MatchReturnType.SIMILARITY, scheme)
        return self.match_pyramids(second, first, MatchReturnType.SIMILARITY, scheme)

    def match_pyramids(
        self,
        first: HistogramInterface,
        second: HistogramInterface,
        return_type: MatchReturnType,
        bin_weight_scheme: Optional[SchemeLike] = None,
    ) -> float:
        """Walk both trees post-order and return the requested aggregate.

        Uses an explicit stack instead of recursion. A node is visited
        twice: the first visit pushes the children common to both trees,
        the second visit (after those children were popped) scores it.

        Args:
            first: First histogram.
            second: Second histogram.
            return_type: COST or SIMILARITY.
            bin_weight_scheme: Scheme override; the configured one when None.

        Returns:
            The accumulated cost or similarity.
        """
        scheme = self._resolve_scheme(bin_weight_scheme)
        score = 0.0
        cost = 0.0
        finalized = 0

        # Every node above the root has its parent below it on the stack,
        # and a parent is only popped once all of its children are gone.
        todo: list[MatchNode] = [MatchNode(first.root_slot, second.root_slot)]
        try:
            while todo:
                position = len(todo) - 1
                current = todo[position]
                first_bin = first.bin_at(current.first_slot)
                second_bin = second.bin_at(current.second_slot)

                if not current.expanded:
                    self._push_common_children(first, second, first_bin, current, position, todo)
                    current.expanded = True
                    continue

                bin_size = self._bin_size(first_bin, second_bin, scheme)
                weight = 1.0 / (1.0 + bin_size)
                intersection = min(first_bin.count, second_bin.count)

                # Parents are credited the raw intersection, not the net one
                if current.parent != NO_PARENT:
                    todo[current.parent].intersection += intersection

                intersection -= current.intersection
                score += weight * intersection
                cost += bin_size * intersection

                todo.pop()
                finalized += 1
        finally:
            todo.clear()

        if self.config.log_match_stats:
            logger.debug(
                f"Matched {finalized} bin pairs "
                f"({first.num_bins} vs {second.num_bins} bins, {scheme.value}): "
                f"score={score:.6f}, cost={cost:.6f}"
            )

        if return_type is MatchReturnType.COST:
            return cost
        return score

    @staticmethod
    def _push_common_children(
        first: HistogramInterface,
        second: HistogramInterface,
        first_bin: Bin,
        current: MatchNode,
        position: int,
        todo: list[MatchNode],
    ) -> None:
        """Push one node per child selector present under both bins.

        Both child lists are sorted by selector, so a single merge pass
        finds every common child.
        """
        first_children = first.child_slots(current.first_slot)
        second_children = second.child_slots(current.second_slot)
        # Children share the parent's path, only the next element differs
        level = first_bin.depth

        i = 0
        j = 0
        while i < len(first_children) and j < len(second_children):
            first_index = first.bin_at(first_children[i]).index[level]
            second_index = second.bin_at(second_children[j]).index[level]
            if first_index == second_index:
                todo.append(MatchNode(first_children[i], second_children[j], parent=position))
                i += 1
                j += 1
            elif first_index < second_index:
                i += 1
            else:
                j += 1

    @staticmethod
    def _bin_size(first_bin: Bin, second_bin: Bin, scheme: BinWeightScheme) -> float:
        if scheme is BinWeightScheme.LOCAL:
            return first_bin.size + second_bin.size

        if first_bin.size != second_bin.size:
            error = BinSizeMismatchError(
                path=first_bin.index,
                first_size=first_bin.size,
                second_size=second_bin.size,
            )
            logger.error(f"Aborting pyramid match: {error} {error.context}")
            raise error
        return first_bin.size

    def _resolve_scheme(self, scheme: Optional[SchemeLike]) -> BinWeightScheme:
        if scheme is None:
            return self.config.bin_weight_scheme
        if isinstance(scheme, BinWeightScheme):
            return scheme
        if isinstance(scheme, str):
            try:
                return BinWeightScheme(scheme.strip().lower())
            except ValueError:
                pass
        raise InvalidInputError(
            f"Unknown bin weight scheme. Choose from: {[s.value for s in BinWeightScheme]}",
            field="bin_weight_scheme",
            value=scheme,
        )

    def batch_similarity(
        self,
        query: HistogramInterface,
        candidates: Sequence[HistogramInterface],
        bin_weight_scheme: Optional[SchemeLike] = None,
    ) -> np.ndarray:
        """Compute similarity between a query histogram and many candidates.

        Args:
            query: Query histogram.
            candidates: Candidate histograms.
            bin_weight_scheme: Scheme override.

        Returns:
            Array of similarity scores, shape (len(candidates),).
        """
        scheme = self._resolve_scheme(bin_weight_scheme)
        return np.array(
            [
                self.get_pyramid_match_similarity(query, candidate, scheme)
                for candidate in candidates
            ],
            dtype=np.float64,
        )

    def kernel_matrix(
        self,
        histograms: Sequence[HistogramInterface],
        bin_weight_scheme: Optional[SchemeLike] = None,
        normalize: bool = False,
    ) -> np.ndarray:
        """Compute the symmetric matrix of pairwise similarities.

        Each unordered pair is matched once and mirrored.

        Args:
            histograms: Histograms to compare.
            bin_weight_scheme: Scheme override.
            normalize: Divide K[i, j] by sqrt(K[i, i] * K[j, j]). Entries
                whose rows have zero self-similarity are set to 0.

        Returns:
            Array of shape (n, n).
        """
        scheme = self._resolve_scheme(bin_weight_scheme)
        n = len(histograms)
        kernel = np.zeros((n, n), dtype=np.float64)

        with log_execution_time(logger, f"kernel matrix over {n} histograms"):
            for i in range(n):
                for j in range(i, n):
                    value = self.get_pyramid_match_similarity(histograms[i], histograms[j], scheme)
                    kernel[i, j] = value
                    kernel[j, i] = value

        if not normalize:
            return kernel

        diagonal = np.sqrt(np.diag(kernel))
        denominator = np.outer(diagonal, diagonal)
        normalized = np.zeros_like(kernel)
        np.divide(kernel, denominator, out=normalized, where=denominator > 0)
        return normalized


# Matchers keyed by their configuration
_matcher_cache: dict[str, PyramidMatcher] = {}


def get_pyramid_matcher(config: Optional[MatcherConfig] = None) -> PyramidMatcher:
    """Get or create a PyramidMatcher instance (singleton per configuration).

    Args:
        config: Matcher configuration; defaults to MatcherConfig()

    Returns:
        Cached or newly created PyramidMatcher
    """
    config = config if config is not None else MatcherConfig()
    cache_key = f"{config.bin_weight_scheme.value}_{config.log_match_stats}"

    if cache_key not in _matcher_cache:
        logger.debug("Creating new PyramidMatcher")
        _matcher_cache[cache_key] = PyramidMatcher(config)

    return _matcher_cache[cache_key]


def pyramid_match_cost(
    first: HistogramInterface,
    second: HistogramInterface,
    bin_weight_scheme: Optional[SchemeLike] = None,
) -> float:
    """Pyramid match cost using the default matcher."""
    return get_pyramid_matcher().get_pyramid_match_cost(first, second, bin_weight_scheme)


def pyramid_match_similarity(
    first: HistogramInterface,
    second: HistogramInterface,
    bin_weight_scheme: Optional[SchemeLike] = None,
) -> float:
    """Pyramid match similarity using the default matcher."""
    return get_pyramid_matcher().get_pyramid_match_similarity(first, second, bin_weight_scheme)
