"""Tests for the txcore exception hierarchy."""

import pytest

from txcore.kernel.exceptions import (
    CannotCreateTransactionException,
    HeuristicCompletionException,
    IllegalTransactionStateException,
    InvalidTimeoutException,
    NestedTransactionNotSupportedException,
    TransactionException,
    TransactionSystemException,
    TransactionUsageException,
    TxCoreException,
    UndeclaredFailureException,
    UnexpectedRollbackException,
)
from txcore.kernel.types import HeuristicOutcome


class TestTxCoreException:
    def test_basic_creation(self):
        exc = TxCoreException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_code_and_context(self):
        exc = TxCoreException("bad state", code="TX_STATE", context={"name": "transfer"})
        assert exc.code == "TX_STATE"
        assert exc.context["name"] == "transfer"

    def test_context_not_shared(self):
        exc = TxCoreException("a")
        exc.context["key"] = "value"
        assert TxCoreException("b").context == {}


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_type",
        [
            CannotCreateTransactionException,
            TransactionUsageException,
            UnexpectedRollbackException,
            TransactionSystemException,
            HeuristicCompletionException,
        ],
    )
    def test_transaction_exceptions(self, exc_type):
        assert issubclass(exc_type, TransactionException)
        assert issubclass(exc_type, TxCoreException)

    def test_illegal_state_is_usage(self):
        assert issubclass(IllegalTransactionStateException, TransactionUsageException)

    def test_nested_not_supported_is_cannot_create(self):
        assert issubclass(NestedTransactionNotSupportedException, CannotCreateTransactionException)

    def test_invalid_timeout_carries_timeout(self):
        exc = InvalidTimeoutException("Invalid transaction timeout", -5)
        assert exc.timeout == -5
        assert exc.context == {"timeout": -5}

    def test_undeclared_failure_wraps_cause(self):
        cause = LookupError("missing")
        exc = UndeclaredFailureException("undeclared", cause)
        assert exc.cause is cause
        assert exc.__cause__ is cause
        assert not isinstance(exc, TransactionException)


class TestHeuristicCompletionException:
    def test_mixed_outcome(self):
        exc = HeuristicCompletionException(HeuristicOutcome.MIXED)
        assert exc.outcome_state == 3
        assert exc.outcome is HeuristicOutcome.MIXED
        assert "mixed" in str(exc)

    @pytest.mark.parametrize(
        ("state", "label"),
        [(0, "unknown"), (1, "committed"), (2, "rolled back"), (3, "mixed"), (42, "unknown")],
    )
    def test_state_strings(self, state, label):
        assert HeuristicCompletionException.get_state_string(state) == label

    def test_raw_int_outcome(self):
        exc = HeuristicCompletionException(1)
        assert exc.outcome is HeuristicOutcome.COMMITTED
        assert str(exc) == "Heuristic completion: outcome state is committed"

    def test_cause_is_chained(self):
        cause = RuntimeError("coordinator")
        assert HeuristicCompletionException(HeuristicOutcome.ROLLED_BACK, cause).__cause__ is cause


class TestTransactionSystemException:
    def test_application_exception(self):
        app_ex = ValueError("business failure")
        exc = TransactionSystemException("rollback failed")
        exc.init_application_exception(app_ex)
        assert exc.application_exception is app_ex
        assert exc.original_exception is app_ex
        assert exc.contains(ValueError)

    def test_application_exception_set_once(self):
        exc = TransactionSystemException("rollback failed")
        exc.init_application_exception(ValueError("first"))
        with pytest.raises(RuntimeError, match="Already holding"):
            exc.init_application_exception(ValueError("second"))

    def test_original_exception_falls_back_to_cause(self):
        cause = OSError("connection reset")
        try:
            raise TransactionSystemException("commit failed") from cause
        except TransactionSystemException as exc:
            assert exc.original_exception is cause
            assert exc.contains(OSError)
            assert not exc.contains(KeyError)
