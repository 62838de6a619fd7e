"""Error handling utilities for the PNF checker."""

from dataclasses import dataclass
from datetime import date
from typing import Optional, Dict, Any, Generic, TypeVar
from enum import Enum

T = TypeVar("T")


class ErrorType(Enum):
    """Enumeration of error types in the PNF checker."""

    # Input validation errors (recoverable, user re-enters)
    INVALID_DATE = "INVALID_DATE"
    INVALID_PERIOD = "INVALID_PERIOD"
    INVALID_ANSWER = "INVALID_ANSWER"

    # Configuration errors
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Contract violations inside the engine
    DATE_COMPUTATION_FAILED = "DATE_COMPUTATION_FAILED"

    # Flow errors
    FLOW_TERMINATED = "FLOW_TERMINATED"

    # General Errors
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class ErrorContext:
    """
    Context information for errors in the PNF checker.

    Attributes:
        error_type: Type of error from ErrorType enum
        message: Human-readable error message
        recoverable: Whether the user can correct the input and continue
        fallback_action: Optional description of what the caller should do next
        details: Optional additional error details
        original_exception: Optional original exception that caused this error
    """

    error_type: ErrorType
    message: str
    recoverable: bool
    fallback_action: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    original_exception: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error context to dictionary for logging/serialization.

        Returns:
            Dictionary representation of error context
        """
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "fallback_action": self.fallback_action,
            "details": self.details or {},
            "original_exception": str(self.original_exception) if self.original_exception else None
        }


class PNFCheckerError(Exception):
    """
    Base exception for all PNF checker errors.

    Only raised for failures the caller cannot recover from. Expected
    validation failures travel as a failed Result instead.

    Attributes:
        context: ErrorContext with detailed error information
    """

    def __init__(self, context: ErrorContext):
        """
        Initialize PNF checker error.

        Args:
            context: ErrorContext with error details
        """
        self.context = context
        super().__init__(context.message)

    def __str__(self) -> str:
        """String representation of the error."""
        base = f"{self.context.error_type.value}: {self.context.message}"
        if self.context.fallback_action:
            base += f" (Fallback: {self.context.fallback_action})"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for logging/serialization.

        Returns:
            Dictionary representation of error
        """
        return self.context.to_dict()


class ConfigurationError(PNFCheckerError):
    """Exception for missing or invalid configuration and broken date contracts."""

    @classmethod
    def cutover_missing(cls) -> "ConfigurationError":
        """
        Create error for an unset cutover date.

        Returns:
            ConfigurationError instance
        """
        context = ErrorContext(
            error_type=ErrorType.CONFIG_MISSING,
            message="Cutover date is not set",
            recoverable=False,
            fallback_action="Set pnf.cutover_date in config.yaml or PNF_CUTOVER_DATE"
        )
        return cls(context)

    @classmethod
    def invalid_value(
        cls,
        key: str,
        value: Any,
        error: Optional[Exception] = None
    ) -> "ConfigurationError":
        """
        Create error for a configuration value that cannot be used.

        Args:
            key: Configuration key
            value: Offending value
            error: Optional original exception

        Returns:
            ConfigurationError instance
        """
        context = ErrorContext(
            error_type=ErrorType.CONFIG_INVALID,
            message=f"Invalid value for '{key}': {value!r}",
            recoverable=False,
            details={"key": key, "value": str(value)},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def date_computation_failed(
        cls,
        operation: str,
        error: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> "ConfigurationError":
        """
        Create error for a date computation that failed on validated inputs.

        Args:
            operation: Description of the computation
            error: Optional original exception
            details: Optional extra details

        Returns:
            ConfigurationError instance
        """
        message = f"Date computation failed during {operation}"
        if error is not None:
            message += f": {str(error)}"
        context = ErrorContext(
            error_type=ErrorType.DATE_COMPUTATION_FAILED,
            message=message,
            recoverable=False,
            details=details or {"operation": operation},
            original_exception=error
        )
        return cls(context)


class FlowError(PNFCheckerError):
    """Exception for answers the decision flow can no longer accept."""

    @classmethod
    def already_terminal(cls, outcome: str) -> "FlowError":
        """
        Create error for an answer submitted after a verdict was reached.

        Args:
            outcome: The verdict the flow ended with

        Returns:
            FlowError instance
        """
        context = ErrorContext(
            error_type=ErrorType.FLOW_TERMINATED,
            message=f"Walkthrough already finished with '{outcome}'",
            recoverable=False,
            fallback_action="Restart the walkthrough",
            details={"outcome": outcome}
        )
        return cls(context)


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Explicit success/failure value for operations that can fail on user input.

    Attributes:
        value: Payload when the operation succeeded
        error: ErrorContext when it failed
    """

    value: Optional[T] = None
    error: Optional[ErrorContext] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorContext) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """
        Return the value, raising if the result is a failure.

        Raises:
            PNFCheckerError: Wrapping the failure context
        """
        if self.error is not None:
            raise PNFCheckerError(self.error)
        return self.value


def invalid_date(message: str, details: Optional[Dict[str, Any]] = None) -> ErrorContext:
    """
    Build the context for a value that is not a real calendar day.

    Args:
        message: Message for the user
        details: Optional offending components

    Returns:
        Recoverable ErrorContext
    """
    return ErrorContext(
        error_type=ErrorType.INVALID_DATE,
        message=message,
        recoverable=True,
        fallback_action="Re-enter the date",
        details=details
    )


def invalid_period(start: Optional[date], end: Optional[date]) -> ErrorContext:
    """
    Build the context for a claim period whose start is not before its end.

    Args:
        start: Claim period start date
        end: Claim period end date

    Returns:
        Recoverable ErrorContext
    """
    return ErrorContext(
        error_type=ErrorType.INVALID_PERIOD,
        message="The claim period start date must be before the end date.",
        recoverable=True,
        fallback_action="Correct the claim period",
        details={
            "start": start.isoformat() if start else None,
            "end": end.isoformat() if end else None
        }
    )


def invalid_answer(question: str, answer: Any) -> ErrorContext:
    """
    Build the context for an answer that does not fit the current question.

    Args:
        question: Name of the question being asked
        answer: The answer received

    Returns:
        Recoverable ErrorContext
    """
    return ErrorContext(
        error_type=ErrorType.INVALID_ANSWER,
        message=f"Answer {answer!r} is not valid for question '{question}'",
        recoverable=True,
        fallback_action="Answer the current question",
        details={"question": question, "answer": str(answer)}
    )


def handle_configuration_error(
    error: Exception,
    operation: str,
    logger,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Handle an unexpected failure inside a date computation.

    Logs the error and raises a ConfigurationError so the caller stops
    instead of silently defaulting.

    Args:
        error: Original exception
        operation: Description of operation that failed
        logger: Logger instance for error logging
        details: Optional extra details

    Raises:
        ConfigurationError: Wrapped error with context
    """
    config_error = ConfigurationError.date_computation_failed(
        operation=operation,
        error=error,
        details=details
    )
    logger.error(f"Non-recoverable configuration error: {config_error}")
    raise config_error
