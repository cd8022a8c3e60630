"""
Tests for the error taxonomy.
"""

from pathlib import Path

from night_factory.errors import (
    BudgetExceededError,
    ConfigError,
    ConfigNotFoundError,
    ErrorCode,
    ErrorContext,
    InvalidConfigError,
    LedgerCorruptedError,
    LedgerError,
    LedgerWriteError,
    NightFactoryError,
    is_fatal,
)


class TestErrorCodes:
    """Test error code enumeration."""

    def test_error_codes_are_strings(self):
        assert ErrorCode.CONFIG_ERROR.value.startswith("ERR_")
        assert ErrorCode.LEDGER_CORRUPTED.value.startswith("ERR_")

    def test_error_codes_unique(self):
        values = [e.value for e in ErrorCode]
        assert len(values) == len(set(values))


class TestNightFactoryError:
    """Test the base error."""

    def test_create_error(self):
        error = NightFactoryError("Something went wrong")

        assert error.message == "Something went wrong"
        assert error.code == ErrorCode.INTERNAL_ERROR

    def test_str_includes_code_and_path(self):
        error = NightFactoryError("Broken", context=ErrorContext(path="reports/budget_meter.json"))
        s = str(error)

        assert "ERR_9000" in s
        assert "Broken" in s
        assert "path=reports/budget_meter.json" in s

    def test_to_dict(self):
        cause = ValueError("bad")
        error = NightFactoryError("Test error", context=ErrorContext(kind="gemini_call"), cause=cause)

        d = error.to_dict()

        assert d["error_type"] == "NightFactoryError"
        assert d["context"]["kind"] == "gemini_call"
        assert d["cause"] == "bad"


class TestSubclasses:
    """Test the concrete errors."""

    def test_config_not_found(self):
        error = ConfigNotFoundError("config/router.json")

        assert isinstance(error, ConfigError)
        assert error.code == ErrorCode.CONFIG_NOT_FOUND
        assert error.path == Path("config/router.json")
        assert error.context.path == "config/router.json"

    def test_invalid_config(self):
        assert InvalidConfigError("x").code == ErrorCode.INVALID_CONFIG

    def test_ledger_errors(self):
        assert isinstance(LedgerCorruptedError("x"), LedgerError)
        assert isinstance(LedgerWriteError("x"), LedgerError)
        assert LedgerWriteError("x").code == ErrorCode.LEDGER_WRITE_ERROR

    def test_budget_exceeded(self):
        error = BudgetExceededError("cap", kind="gemini_call", cost=30.0)

        assert error.kind == "gemini_call"
        assert error.cost == 30.0
        assert error.context.kind == "gemini_call"


class TestIsFatal:
    """Test fatal classification."""

    def test_config_and_ledger_are_fatal(self):
        assert is_fatal(ConfigNotFoundError("x"))
        assert is_fatal(LedgerCorruptedError("x"))

    def test_rejection_is_not_fatal(self):
        assert not is_fatal(BudgetExceededError("cap"))

    def test_foreign_errors(self):
        assert not is_fatal(ValueError("x"))
