"""Tests for unitwork.core.errors module."""

import pytest

from unitwork.core.errors import (
    ConfigurationError,
    EmptyOperationError,
    ErrorCategory,
    ErrorContext,
    InvariantViolationError,
    SchemaMismatchError,
    UnitworkError,
)


class TestErrorContext:
    """Test ErrorContext dataclass."""

    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.entity_type is None
        assert ctx.entity_id is None
        assert ctx.operation is None
        assert ctx.metadata == {}

    def test_to_dict_includes_set_fields(self):
        """to_dict includes only non-None fields plus metadata."""
        ctx = ErrorContext(entity_type="Person", operation="insert", metadata={"column": "Name"})
        d = ctx.to_dict()
        assert d == {"entity_type": "Person", "operation": "insert", "column": "Name"}
        assert "entity_id" not in d


class TestUnitworkError:
    """Test the base error."""

    def test_defaults(self):
        err = UnitworkError("boom")
        assert str(err) == "boom"
        assert err.message == "boom"
        assert err.category == ErrorCategory.INTERNAL
        assert err.retryable is False
        assert err.cause is None

    def test_with_context_sets_known_fields(self):
        err = UnitworkError("boom").with_context(entity_type="City", entity_id="abc")
        assert err.context.entity_type == "City"
        assert err.context.entity_id == "abc"

    def test_with_context_puts_unknown_keys_in_metadata(self):
        err = UnitworkError("boom").with_context(column="CityId")
        assert err.context.metadata == {"column": "CityId"}

    def test_with_context_returns_same_instance(self):
        err = ConfigurationError("boom")
        assert err.with_context(operation="delete") is err

    def test_cause_is_chained(self):
        original = KeyError("Name")
        err = SchemaMismatchError("missing", cause=original)
        assert err.cause is original
        assert err.__cause__ is original

    def test_to_dict(self):
        err = EmptyOperationError("nothing", cause=ValueError("x")).with_context(entity_type="Person")
        d = err.to_dict()
        assert d["error_type"] == "EmptyOperationError"
        assert d["message"] == "nothing"
        assert d["category"] == "VALIDATION"
        assert d["retryable"] is False
        assert d["context"] == {"entity_type": "Person"}
        assert d["cause"] == "x"

    def test_to_dict_omits_empty_context(self):
        assert "context" not in UnitworkError("boom").to_dict()

    def test_repr(self):
        assert repr(ConfigurationError("bad id")) == "ConfigurationError('bad id', category=CONFIG)"


class TestErrorHierarchy:
    """Every concrete error is a UnitworkError with the right category."""

    @pytest.mark.parametrize(
        "error_type, category",
        [
            (ConfigurationError, ErrorCategory.CONFIG),
            (SchemaMismatchError, ErrorCategory.VALIDATION),
            (EmptyOperationError, ErrorCategory.VALIDATION),
            (InvariantViolationError, ErrorCategory.INTERNAL),
        ],
    )
    def test_category(self, error_type, category):
        err = error_type("x")
        assert isinstance(err, UnitworkError)
        assert err.category == category
        assert err.retryable is False

    def test_category_override(self):
        err = ConfigurationError("x", category=ErrorCategory.VALIDATION, retryable=True)
        assert err.category == ErrorCategory.VALIDATION
        assert err.retryable is True

    def test_catchable_as_base(self):
        with pytest.raises(UnitworkError):
            raise InvariantViolationError("broken")

    def test_only_raised_categories_exist(self):
        assert {c.value for c in ErrorCategory} == {"CONFIG", "VALIDATION", "INTERNAL"}
