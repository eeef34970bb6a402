"""
Custom exception hierarchy for pyramid-match.

Provides a structured exception hierarchy for different error scenarios:
- AppException: Base for all application errors
- ConfigError: Configuration-related errors
- PreconditionError: Contract violations detected while matching
- ValidationError: Invalid histogram input
- BenchmarkError: Matrix multiplication benchmark failures

Each exception includes:
- Descriptive message
- Optional error code for programmatic handling
- Optional context dictionary for debugging

Example:
    >>> from pyramid_match.utils.exceptions import BinSizeMismatchError
    >>> raise BinSizeMismatchError(path=(0, 2), first_size=1.0, second_size=2.0)
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence


# ============================================
# Base Exception
# ============================================


class AppException(Exception):
    """
    Base exception for all pyramid-match errors.

    All custom exceptions inherit from this class, allowing:
    - Catch-all handling of application errors
    - Error code and context support

    Attributes:
        message: Human-readable error description.
        code: Optional error code for programmatic handling.
        context: Optional dictionary with debugging context.

    Example:
        >>> try:
        ...     raise AppException("Something went wrong", code="APP_001")
        ... except AppException as e:
        ...     print(f"Error {e.code}: {e.message}")
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self._default_code()
        self.context = context or {}
        super().__init__(self.message)

    def _default_code(self) -> str:
        """Generate default error code from class name."""
        # CamelCase -> UPPER_SNAKE_CASE
        name = self.__class__.__name__
        code = ""
        for i, char in enumerate(name):
            if char.isupper() and i > 0:
                code += "_"
            code += char.upper()
        return code

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "context": self.context,
        }


# ============================================
# Configuration Errors
# ============================================


class ConfigError(AppException):
    """
    Base exception for configuration-related errors.

    Raised when there are issues with:
    - Loading configuration files
    - Parsing YAML
    - Validating configuration values
    """

    pass


class ConfigFileNotFoundError(ConfigError):
    """Raised when a required configuration file is not found."""

    def __init__(
        self,
        message: str = "Configuration file not found",
        path: Optional[str] = None,
        **kwargs,
    ) -> None:
        context = kwargs.pop("context", {})
        if path:
            context["path"] = path
        super().__init__(message, code="CONFIG_FILE_NOT_FOUND", context=context, **kwargs)


class ConfigurationError(ConfigError):
    """
    Raised when configuration is invalid or cannot be parsed.

    Example:
        >>> raise ConfigurationError(
        ...     "Top-level YAML document must be a mapping",
        ...     context={"path": "config/config.yaml"}
        ... )
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        **kwargs,
    ) -> None:
        super().__init__(message, code="CONFIG_INVALID", **kwargs)


class ConfigValidationError(ConfigError):
    """
    Raised when configuration values fail validation.

    Example:
        >>> raise ConfigValidationError(
        ...     "max_size must be >= min_size",
        ...     field="benchmark.max_size",
        ...     value=10
        ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs,
    ) -> None:
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = value
        super().__init__(message, code="CONFIG_VALIDATION", context=context, **kwargs)


# ============================================
# Matching Errors
# ============================================


class PreconditionError(AppException):
    """
    Base exception for caller contract violations.

    These are not recoverable runtime conditions: the inputs were built
    in a way the matcher cannot compare, and the computation is aborted.
    """

    pass


class BinSizeMismatchError(PreconditionError):
    """
    Raised when matched bins disagree on size under global bin weighting.

    Both histograms must have been built with the same binning for the
    global scheme to apply.

    Example:
        >>> raise BinSizeMismatchError(
        ...     path=(3, 1),
        ...     first_size=0.5,
        ...     second_size=0.25
        ... )
    """

    def __init__(
        self,
        message: str = "Matched bins have different sizes under global weighting",
        path: Optional[Sequence[int]] = None,
        first_size: Optional[float] = None,
        second_size: Optional[float] = None,
        **kwargs,
    ) -> None:
        context = kwargs.pop("context", {})
        if path is not None:
            context["path"] = tuple(path)
        if first_size is not None:
            context["first_size"] = first_size
        if second_size is not None:
            context["second_size"] = second_size
        super().__init__(message, code="BIN_SIZE_MISMATCH", context=context, **kwargs)


# ============================================
# Validation Errors
# ============================================


class ValidationError(AppException):
    """
    Base exception for input validation errors.

    Raised when histogram input or call arguments fail validation.
    """

    pass


class InvalidInputError(ValidationError):
    """Raised when input data is invalid."""

    def __init__(
        self,
        message: str = "Invalid input",
        field: Optional[str] = None,
        value: Any = None,
        **kwargs,
    ) -> None:
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)[:100]
        super().__init__(message, code="INVALID_INPUT", context=context, **kwargs)


class InvalidBinError(ValidationError):
    """
    Raised when a bin is given a malformed path, count or size.

    Example:
        >>> raise InvalidBinError(
        ...     "Bin count must be non-negative",
        ...     path=(0, 1),
        ...     reason="count=-2"
        ... )
    """

    def __init__(
        self,
        message: str = "Invalid bin",
        path: Optional[Sequence[Any]] = None,
        reason: Optional[str] = None,
        **kwargs,
    ) -> None:
        context = kwargs.pop("context", {})
        if path is not None:
            context["path"] = tuple(path)
        if reason:
            context["reason"] = reason
        super().__init__(message, code="INVALID_BIN", context=context, **kwargs)


class DuplicateBinError(ValidationError):
    """Raised when a bin is added at a path that already holds one."""

    def __init__(
        self,
        message: str = "Bin already exists",
        path: Optional[Sequence[int]] = None,
        **kwargs,
    ) -> None:
        context = kwargs.pop("context", {})
        if path is not None:
            context["path"] = tuple(path)
        super().__init__(message, code="DUPLICATE_BIN", context=context, **kwargs)


class MissingParentBinError(ValidationError):
    """Raised when a bin is added before the bin one level above it."""

    def __init__(
        self,
        message: str = "Parent bin does not exist",
        path: Optional[Sequence[int]] = None,
        **kwargs,
    ) -> None:
        context = kwargs.pop("context", {})
        if path is not None:
            context["path"] = tuple(path)
            context["parent_path"] = tuple(path)[:-1]
        super().__init__(message, code="MISSING_PARENT_BIN", context=context, **kwargs)


# ============================================
# Benchmark Errors
# ============================================


class BenchmarkError(AppException):
    """Base exception for benchmarking utility errors."""

    pass


class StrategyMismatchError(BenchmarkError):
    """
    Raised when two multiplication strategies disagree on a product.

    Example:
        >>> raise StrategyMismatchError(
        ...     strategy="naive",
        ...     reference="blas",
        ...     max_abs_diff=0.3
        ... )
    """

    def __init__(
        self,
        message: str = "Strategies produced different results",
        strategy: Optional[str] = None,
        reference: Optional[str] = None,
        max_abs_diff: Optional[float] = None,
        **kwargs,
    ) -> None:
        context = kwargs.pop("context", {})
        if strategy:
            context["strategy"] = strategy
        if reference:
            context["reference"] = reference
        if max_abs_diff is not None:
            context["max_abs_diff"] = max_abs_diff
        super().__init__(message, code="STRATEGY_MISMATCH", context=context, **kwargs)


# Alias for common import pattern
PyramidMatchError = AppException
