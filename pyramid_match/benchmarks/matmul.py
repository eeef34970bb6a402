"""
Matrix multiplication benchmark with pluggable strategies.

Compares a naive triple loop against numpy's BLAS-backed product on
random square matrices. Strategies are plain callables, so other
implementations can be registered without touching the runner.

Example:
    >>> bench = MatMulBenchmark()
    >>> results = bench.run([50, 100], seed=0)
    >>> results[0].speedup("blas", "naive")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional

import numpy as np
from tqdm import tqdm

from pyramid_match.utils import get_logger, log_performance
from pyramid_match.utils.config import BenchmarkConfig
from pyramid_match.utils.exceptions import InvalidInputError, StrategyMismatchError
from pyramid_match.utils.performance import PerformanceMonitor

logger = get_logger(__name__)

MatMulStrategy = Callable[[np.ndarray, np.ndarray], np.ndarray]


def _check_shapes(a: np.ndarray, b: np.ndarray) -> None:
    if a.ndim != 2 or b.ndim != 2 or a.shape[1] != b.shape[0]:
        raise InvalidInputError(
            f"Cannot multiply matrices of shapes {a.shape} and {b.shape}",
            field="shape",
            value=(a.shape, b.shape),
        )


def matmul_naive(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """
    Multiply two matrices with an explicit row/column/inner loop.

    Args:
        a: Matrix of shape (m, k).
        b: Matrix of shape (k, n).

    Returns:
        Product of shape (m, n), float64.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    _check_shapes(a, b)

    rows = a.tolist()
    cols = b.T.tolist()
    c = np.empty((a.shape[0], b.shape[1]), dtype=np.float64)
    for i, row in enumerate(rows):
        for j, col in enumerate(cols):
            total = 0.0
            for x, y in zip(row, col):
                total += x * y
            c[i, j] = total
    return c


def matmul_blas(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Multiply two matrices with numpy (BLAS dgemm underneath)."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    _check_shapes(a, b)
    return np.dot(a, b)


STRATEGIES: Dict[str, MatMulStrategy] = {
    "naive": matmul_naive,
    "blas": matmul_blas,
}


def random_square_matrix(n: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Return an n x n matrix of uniform values in [0, 1)."""
    if n < 1:
        raise InvalidInputError("Matrix size must be positive", field="n", value=n)
    rng = rng if rng is not None else np.random.default_rng()
    return rng.random((n, n))


@dataclass
class BenchmarkResult:
    """Timings for one matrix size.

    Attributes:
        size: Dimension of the square matrices.
        timings: Seconds spent per strategy.
        max_abs_diff: Largest deviation of each strategy from the reference.
    """

    size: int
    timings: Dict[str, float] = field(default_factory=dict)
    max_abs_diff: Dict[str, float] = field(default_factory=dict)

    def speedup(self, strategy: str, baseline: str) -> float:
        """How many times faster `strategy` ran than `baseline`."""
        elapsed = self.timings[strategy]
        if elapsed <= 0:
            return float("inf")
        return self.timings[baseline] / elapsed


class MatMulBenchmark:
    """
    Time several multiplication strategies on the same random inputs.

    The first strategy is the reference; every other strategy must agree
    with it within `rtol`, otherwise StrategyMismatchError is raised.
    """

    def __init__(
        self,
        strategies: Optional[Mapping[str, MatMulStrategy]] = None,
        monitor: Optional[PerformanceMonitor] = None,
        rtol: float = 1e-9,
    ):
        self.strategies = dict(strategies if strategies is not None else STRATEGIES)
        if not self.strategies:
            raise InvalidInputError("At least one strategy is required", field="strategies")
        self.monitor = monitor if monitor is not None else PerformanceMonitor(enabled=True)
        if not self.monitor.enabled:
            self.monitor.enable()
        self.rtol = rtol

    @classmethod
    def from_config(
        cls,
        config: BenchmarkConfig,
        monitor: Optional[PerformanceMonitor] = None,
    ) -> "MatMulBenchmark":
        """Build a benchmark running the strategies named in the config."""
        return cls(
            strategies={name: STRATEGIES[name] for name in config.strategies},
            monitor=monitor,
            rtol=config.rtol,
        )

    def run_size(self, n: int, rng: Optional[np.random.Generator] = None) -> BenchmarkResult:
        """Benchmark every strategy on one pair of n x n matrices."""
        rng = rng if rng is not None else np.random.default_rng()
        a = random_square_matrix(n, rng)
        b = random_square_matrix(n, rng)

        result = BenchmarkResult(size=n)
        reference_name: Optional[str] = None
        reference: Optional[np.ndarray] = None

        for name, strategy in self.strategies.items():
            operation = f"{name}[{n}]"
            with self.monitor.measure(operation, items_count=1):
                product = strategy(a, b)
            result.timings[name] = self.monitor.last(operation).duration_seconds
            log_performance(logger, operation, result.timings[name])

            if reference is None:
                reference_name, reference = name, product
                result.max_abs_diff[name] = 0.0
                continue

            diff = float(np.max(np.abs(product - reference)))
            result.max_abs_diff[name] = diff
            if not np.allclose(product, reference, rtol=self.rtol, atol=0.0):
                raise StrategyMismatchError(
                    strategy=name,
                    reference=reference_name,
                    max_abs_diff=diff,
                    context={"size": n},
                )

        return result

    def run(
        self,
        sizes: Iterable[int],
        seed: Optional[int] = None,
        progress: bool = True,
    ) -> List[BenchmarkResult]:
        """Benchmark each size in turn with a shared seeded generator."""
        rng = np.random.default_rng(seed)
        sizes = list(sizes)
        return [
            self.run_size(n, rng)
            for n in tqdm(sizes, desc="Benchmarking matmul", disable=not progress)
        ]
