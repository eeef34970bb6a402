"""Matrix multiplication benchmarking utility, independent of the matcher."""

from .matmul import (
    STRATEGIES,
    BenchmarkResult,
    MatMulBenchmark,
    matmul_blas,
    matmul_naive,
    random_square_matrix,
)

__all__ = [
    "STRATEGIES",
    "BenchmarkResult",
    "MatMulBenchmark",
    "matmul_blas",
    "matmul_naive",
    "random_square_matrix",
]
