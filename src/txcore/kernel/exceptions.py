"""Unified exception hierarchy for txcore.

All errors raised by the transaction core inherit from TxCoreException,
enabling unified error handling. Transaction infrastructure failures share
the TransactionException base.

Categories:
- TransactionUsageException: the API was used incorrectly (propagation
  conflicts, completed statuses, invalid timeouts)
- CannotCreateTransactionException: the resource could not begin a transaction
- TransactionSystemException: the resource failed during commit or rollback
- UnexpectedRollbackException: a commit was turned into a rollback
- HeuristicCompletionException: the coordinator reported a non-uniform outcome
"""

from __future__ import annotations

from txcore.kernel.types import HeuristicOutcome

# =============================================================================
# Base Exception
# =============================================================================


class TxCoreException(Exception):
    """Base exception for all txcore errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "TX_STATE").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


class UndeclaredFailureException(TxCoreException):
    """A unit of work raised a failure its surrounding contract did not declare."""

    def __init__(self, message: str, cause: BaseException) -> None:
        super().__init__(message, code="UNDECLARED_FAILURE")
        self.cause = cause
        self.__cause__ = cause


# =============================================================================
# Transaction Exceptions
# =============================================================================


class TransactionException(TxCoreException):
    """Superclass for all transaction exceptions."""


class CannotCreateTransactionException(TransactionException):
    """A transaction could not be created by the underlying resource."""


class NestedTransactionNotSupportedException(CannotCreateTransactionException):
    """Nesting was requested but the resource does not support savepoints."""


class TransactionUsageException(TransactionException):
    """The transaction API was used in an inappropriate way."""


class IllegalTransactionStateException(TransactionUsageException):
    """Propagation conflict, or a completed status was used again."""


class InvalidTimeoutException(TransactionUsageException):
    """An invalid timeout was specified."""

    def __init__(self, message: str, timeout: int) -> None:
        super().__init__(message, context={"timeout": timeout})
        self.timeout = timeout


class UnexpectedRollbackException(TransactionException):
    """A commit attempt resulted in a rollback because of rollback-only marking."""


class TransactionSystemException(TransactionException):
    """Infrastructure failure during begin, commit or rollback.

    When the failure happened while rolling back after an application error,
    the application error is attached via :meth:`init_application_exception`
    so that both are preserved.
    """

    def __init__(self, message: str, code: str | None = None, context: dict | None = None) -> None:
        super().__init__(message, code=code, context=context)
        self._application_exception: BaseException | None = None

    def init_application_exception(self, ex: BaseException) -> None:
        """Attach the application failure that was overridden by this one."""
        if self._application_exception is not None:
            raise RuntimeError(f"Already holding an application exception: {self._application_exception!r}")
        self._application_exception = ex

    @property
    def application_exception(self) -> BaseException | None:
        return self._application_exception

    @property
    def original_exception(self) -> BaseException | None:
        """The application failure if present, else the chained resource failure."""
        if self._application_exception is not None:
            return self._application_exception
        return self.__cause__

    def contains(self, exc_type: type[BaseException]) -> bool:
        """Whether this exception, its cause chain or the application failure is of *exc_type*."""
        if isinstance(self._application_exception, exc_type):
            return True
        current: BaseException | None = self
        while current is not None:
            if isinstance(current, exc_type):
                return True
            current = current.__cause__
        return False


class HeuristicCompletionException(TransactionException):
    """The coordinator could not guarantee a uniform commit or rollback."""

    def __init__(self, outcome: HeuristicOutcome | int, cause: BaseException | None = None) -> None:
        resolved = HeuristicOutcome.from_state(int(outcome))
        super().__init__(
            f"Heuristic completion: outcome state is {resolved.label}",
            code="TX_HEURISTIC",
            context={"outcome": resolved.label},
        )
        self._outcome = resolved
        if cause is not None:
            self.__cause__ = cause

    @property
    def outcome(self) -> HeuristicOutcome:
        return self._outcome

    @property
    def outcome_state(self) -> int:
        """Raw integer outcome state (0 unknown, 1 committed, 2 rolled back, 3 mixed)."""
        return int(self._outcome)

    @staticmethod
    def get_state_string(state: int) -> str:
        return HeuristicOutcome.from_state(state).label
