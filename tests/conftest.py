"""Pytest fixtures and configuration for pyramid-match tests."""

from typing import Callable

import numpy as np
import pytest

from pyramid_match.core.matcher import PyramidMatcher, _matcher_cache
from pyramid_match.domain.entities import BinWeightScheme, Histogram
from pyramid_match.utils.config import AppConfig, BenchmarkConfig, MatcherConfig, reset_config


def build_grid_pyramid(points: np.ndarray, levels: int) -> Histogram:
    """Bin 2-D points from [0, 1)^2 into a quadtree pyramid.

    The root covers the unit square (size 1.0); every level halves the
    cell side. Selectors number the four quadrants 0..3.
    """
    points = np.asarray(points, dtype=np.float64)
    hist = Histogram(root_count=len(points), root_size=1.0)
    counts: dict[tuple[int, ...], int] = {}

    for x, y in points:
        path: tuple[int, ...] = ()
        for level in range(1, levels + 1):
            cells = 2 ** level
            col = min(int(x * cells), cells - 1)
            row = min(int(y * cells), cells - 1)
            quadrant = (row % 2) * 2 + (col % 2)
            path = path + (quadrant,)
            counts[path] = counts.get(path, 0) + 1

    for path in sorted(counts, key=len):
        hist.add_bin(path, count=counts[path], size=0.5 ** len(path))
    return hist


def build_random_pyramid(
    rng: np.random.Generator,
    depth: int = 3,
    branching: int = 4,
    keep_probability: float = 0.7,
) -> Histogram:
    """Build a random pyramid whose parent counts cover their children.

    Bin sizes depend only on depth (2 ** (depth - level)), so any two
    pyramids from this builder can be matched under global weighting.
    """
    leaves: dict[tuple[int, ...], int] = {}
    frontier: list[tuple[int, ...]] = [()]
    for _ in range(depth):
        next_frontier = []
        for path in frontier:
            for selector in range(branching):
                if rng.random() < keep_probability:
                    next_frontier.append(path + (selector,))
        frontier = next_frontier
    for path in frontier:
        leaves[path] = int(rng.integers(0, 10))

    counts: dict[tuple[int, ...], int] = {}
    for path, count in leaves.items():
        for level in range(len(path) + 1):
            prefix = path[:level]
            counts[prefix] = counts.get(prefix, 0) + count

    entries = [
        (path, count, float(2 ** (depth - len(path))))
        for path, count in counts.items()
    ]
    if () not in counts:
        entries.append(((), 0, float(2 ** depth)))
    return Histogram.from_bins(entries)


@pytest.fixture
def test_config() -> AppConfig:
    """Provide test-specific configuration with a tiny benchmark."""
    return AppConfig(
        matcher=MatcherConfig(bin_weight_scheme="global", log_match_stats=True),
        benchmark=BenchmarkConfig(min_size=4, max_size=12, step=4, seed=3),
        log_level="DEBUG",
    )


@pytest.fixture
def matcher(test_config) -> PyramidMatcher:
    """Matcher defaulting to global weighting."""
    return PyramidMatcher(test_config.matcher)


@pytest.fixture
def local_matcher() -> PyramidMatcher:
    """Matcher defaulting to local weighting."""
    return PyramidMatcher(MatcherConfig(bin_weight_scheme=BinWeightScheme.LOCAL))


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(20071)


@pytest.fixture
def random_pyramid(rng) -> Callable[..., Histogram]:
    """Factory producing random, globally comparable pyramids."""
    def _factory(**kwargs) -> Histogram:
        return build_random_pyramid(rng, **kwargs)
    return _factory


@pytest.fixture
def grid_pyramid() -> Callable[[np.ndarray, int], Histogram]:
    """Quadtree pyramid builder over 2-D points."""
    return build_grid_pyramid


@pytest.fixture
def single_level_pair() -> tuple[Histogram, Histogram]:
    """Root-only histograms: counts 3 and 5, both of size 2."""
    return Histogram(root_count=3, root_size=2), Histogram(root_count=5, root_size=2)


@pytest.fixture
def two_level_pair() -> tuple[Histogram, Histogram]:
    """Roots 10/10 of size 4 sharing one child [0] with counts 4/6 of size 1."""
    first = Histogram.from_bins([((0,), 4, 1.0)], root_count=10, root_size=4.0)
    second = Histogram.from_bins([((0,), 6, 1.0)], root_count=10, root_size=4.0)
    return first, second


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset cached configuration and matchers between tests."""
    reset_config()
    _matcher_cache.clear()
    yield
    reset_config()
    _matcher_cache.clear()
