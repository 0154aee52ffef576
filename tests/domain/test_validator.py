"""
Tests for the activation validator.

Invariants tested:
- Soundness: valid iff every member's dependencies are members
- One message per missing (module, dependency) pair
- The empty set passes unless require_non_empty is set
- Unknown identifiers are rejected, not reported as violations
"""

import pytest

from activation_kernel.domain.validator import EMPTY_SET_ERROR, ValidationResult, validate
from activation_kernel.exceptions import UnknownModuleError


class TestValidate:
    """validate(catalog, active_set)."""

    def test_closed_set_is_valid(self, abc_catalog):
        result = validate(abc_catalog, {"a", "b", "c"})
        assert result.valid
        assert result.errors == ()

    def test_missing_dependency_reported(self, abc_catalog):
        result = validate(abc_catalog, {"a"})
        assert not result.valid
        assert result.errors == ("A requires B",)

    def test_one_error_per_missing_pair(self, diamond_catalog):
        result = validate(diamond_catalog, {"d"})
        assert result.errors == ("D requires B", "D requires C")

    def test_only_direct_edges_reported(self, chain_catalog):
        result = validate(chain_catalog, {"z", "y"})
        assert result.errors == ("Y requires X",)

    def test_errors_in_declaration_order(self, abc_catalog):
        result = validate(abc_catalog, ["c", "a"])
        assert result.errors == ("A requires B", "C requires B")

    def test_empty_set_is_valid_by_default(self, abc_catalog):
        assert validate(abc_catalog, set()).valid

    def test_empty_set_rejected_at_persist_gate(self, abc_catalog):
        result = validate(abc_catalog, set(), require_non_empty=True)
        assert not result.valid
        assert result.errors == (EMPTY_SET_ERROR,)
        assert EMPTY_SET_ERROR == "At least one module must be enabled"

    def test_unknown_module_raises(self, abc_catalog):
        with pytest.raises(UnknownModuleError):
            validate(abc_catalog, {"a", "b", "zz"})

    def test_hotel_messages_use_short_names(self, hotel_catalog):
        result = validate(hotel_catalog, {"as", "bms"})
        assert result.errors == ("Accounting requires Reservations", "Accounting requires Rooms")


class TestValidationResult:
    """ValidationResult factories."""

    def test_ok(self):
        assert ValidationResult.ok() == ValidationResult(valid=True, errors=())

    def test_from_errors_with_no_errors_is_valid(self):
        assert ValidationResult.from_errors([]).valid

    def test_from_errors_with_errors(self):
        result = ValidationResult.from_errors(["X requires Y"])
        assert not result.valid
        assert result.errors == ("X requires Y",)
