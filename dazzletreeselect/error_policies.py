"""
Error handling policies for DazzleTreeSelect.

A policy decides what happens when a resolution (options, value) fails:
propagate the error to the caller, hand it to a callback, or collect it.
Whatever the policy, a failed resolution never surfaces partial results.
"""

import sys
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List


class ErrorPolicy(ABC):
    """
    Base class for error handling policies.

    Attributes:
        propagate: When True, callers awaiting a failed resolution receive
            the exception. When False, they receive no data instead.
    """

    propagate = False

    @abstractmethod
    def handle(self, error: Exception, operation: str) -> None:
        """
        Handle an error raised while resolving.

        Args:
            error: The exception that was raised
            operation: Name of the failed resolution (e.g. 'options')

        Raises:
            The error itself when the policy propagates failures.
        """
        pass


class FailFastPolicy(ErrorPolicy):
    """
    Policy that re-raises any error.

    This is the default: failures reach the caller of the operation that
    triggered the resolution.
    """

    propagate = True

    def handle(self, error: Exception, operation: str) -> None:
        """Re-raise the error immediately."""
        raise error


class CallbackPolicy(ErrorPolicy):
    """Policy that routes every failure to an ``on_error`` callback."""

    def __init__(self, on_error: Callable[[Exception], Any]):
        self.on_error = on_error

    def handle(self, error: Exception, operation: str) -> None:
        self.on_error(error)


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that collects errors for later inspection.

    Useful when a UI should degrade to "no options" while the errors are
    reported in one batch.
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize the policy.

        Args:
            verbose: If True, print warnings to stderr when errors occur
        """
        self.errors: List[Dict[str, Any]] = []
        self.verbose = verbose

    def handle(self, error: Exception, operation: str) -> None:
        self.errors.append({
            'operation': operation,
            'error': error,
            'error_type': type(error).__name__,
            'error_message': str(error),
        })

        if self.verbose:
            print(f"\nWARNING: Error resolving {operation}: {error}", file=sys.stderr)

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        return {
            'total_errors': len(self.errors),
            'lookup_failures': sum(1 for e in self.errors
                                   if e['error_type'] in ('LookupFailure', 'ClassificationFailure')),
            'errors': self.errors,
        }
