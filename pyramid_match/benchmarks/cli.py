"""Command-line interface for the matrix multiplication benchmark.

Usage:
    python -m pyramid_match.benchmarks.cli --min-size 50 --max-size 200 --step 50
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from pyramid_match.utils import get_config, get_logger, log_execution_time, set_log_level
from pyramid_match.utils.config import AppConfig, BenchmarkConfig
from pyramid_match.utils.exceptions import AppException, ConfigFileNotFoundError

from .matmul import STRATEGIES, BenchmarkResult, MatMulBenchmark

logger = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Benchmark naive versus BLAS matrix multiplication",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Benchmark with config defaults
  python -m pyramid_match.benchmarks.cli

  # Only numpy, larger matrices, fixed seed
  python -m pyramid_match.benchmarks.cli --strategy blas --min-size 500 --max-size 2000 --step 100 --seed 7
        """
    )

    parser.add_argument('--min-size', type=int, default=None, help='Smallest matrix dimension (overrides config)')
    parser.add_argument('--max-size', type=int, default=None, help='Largest matrix dimension (overrides config)')
    parser.add_argument('--step', type=int, default=None, help='Size increment (overrides config)')
    parser.add_argument(
        '--strategy',
        action='append',
        choices=sorted(STRATEGIES),
        default=None,
        help='Strategy to run; repeat for several. The first one is the reference.'
    )
    parser.add_argument('--seed', type=int, default=None, help='Random seed (overrides config)')
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help='Path to configuration file (default: auto-detect)'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default=None,
        help='Override log level'
    )
    parser.add_argument('--no-progress', action='store_true', help='Hide the progress bar')

    return parser.parse_args(argv)


def build_benchmark_config(args: argparse.Namespace, config: AppConfig) -> BenchmarkConfig:
    """Merge command-line overrides into the configured benchmark settings."""
    overrides = {
        'min_size': args.min_size,
        'max_size': args.max_size,
        'step': args.step,
        'strategies': args.strategy,
        'seed': args.seed,
    }
    merged = config.benchmark.model_dump()
    merged.update({key: value for key, value in overrides.items() if value is not None})
    return BenchmarkConfig.model_validate(merged)


def format_results(results: Sequence[BenchmarkResult], strategies: Sequence[str]) -> str:
    """Render results as a fixed-width table."""
    header = f"{'N':>6}" + "".join(f"{name:>14}" for name in strategies)
    if len(strategies) > 1:
        header += f"{'speedup':>12}"
    lines = [header, "-" * len(header)]
    for result in results:
        line = f"{result.size:>6}" + "".join(
            f"{result.timings[name]:>13.4f}s" for name in strategies
        )
        if len(strategies) > 1:
            line += f"{result.speedup(strategies[-1], strategies[0]):>11.1f}x"
        lines.append(line)
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)

    try:
        try:
            config = get_config(args.config, reload=args.config is not None)
        except ConfigFileNotFoundError as e:
            if args.config is not None:
                raise
            logger.warning(f"{e}\nUsing default configuration")
            config = AppConfig()

        set_log_level(logger, args.log_level or config.log_level)

        bench_config = build_benchmark_config(args, config)
        benchmark = MatMulBenchmark.from_config(bench_config)

        logger.info(f"Strategies: {', '.join(bench_config.strategies)}")
        logger.info(f"Sizes: {bench_config.sizes()}")

        with log_execution_time(logger, "matrix multiplication benchmark"):
            results = benchmark.run(
                bench_config.sizes(),
                seed=bench_config.seed,
                progress=not args.no_progress,
            )

        print("\n" + format_results(results, bench_config.strategies))
        return 0

    except KeyboardInterrupt:
        logger.warning("Benchmark interrupted by user")
        return 1

    except (AppException, ValueError) as e:
        logger.error(f"Benchmark failed: {e}", exc_info=True)
        print(f"\n✗ Benchmark failed: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
