"""
Unit tests for SignValidator.
"""
from decimal import Decimal

import pytest

from statement_engine.models.statement import LineItem, Severity, ViolationCategory
from statement_engine.services.account_names import is_contra_description
from statement_engine.services.validators.sign_validator import SignValidator, validate_line_item


class TestSignValidator:
    """Tests for sign conventions by account type."""

    @pytest.fixture
    def validator(self, standard_chart) -> SignValidator:
        return SignValidator(standard_chart, language="en")

    @pytest.mark.parametrize("code,amount", [
        ("0100", "1000"),
        ("1400", "-100"),
        ("2000", "800"),
        ("3000", "900"),
        ("4000", "1000"),
        ("5000", "-600"),
        ("0100", "0"),
        ("5000", "0"),
    ])
    def test_expected_signs_pass(self, validator, code, amount):
        """Test amounts carrying the normal sign are valid."""
        result = validator.validate_line_item(LineItem("Item", code, Decimal(amount)))
        assert result.is_valid
        assert result.errors == []

    def test_negative_asset(self, validator):
        """Test a negative asset names the account and suggests a contra check."""
        result = validator.validate_line_item(LineItem("Cash", "0100", Decimal("-50")))
        assert not result.is_valid
        assert result.errors == ["Asset account 0100 Cash on hand should have positive balance (found -50)"]
        assert result.suggestions == ["Verify if 0100 Cash on hand is a contra account"]

    def test_positive_contra_asset(self, validator):
        """Test contra assets must be negative."""
        result = validator.validate_line_item(LineItem("Depreciation", "1400", Decimal("100")))
        assert not result.is_valid
        assert "Contra account 1400" in result.errors[0]
        assert "should have negative balance" in result.errors[0]

    @pytest.mark.parametrize("code,amount,kind", [
        ("2000", "-10", "Liability"),
        ("3000", "-10", "Equity"),
        ("4000", "-10", "Revenue"),
        ("5000", "10", "Expense"),
    ])
    def test_abnormal_balances(self, validator, code, amount, kind):
        """Test each account type flags the wrong sign."""
        result = validator.validate_line_item(LineItem("Item", code, Decimal(amount)))
        assert not result.is_valid
        assert result.errors[0].startswith(f"{kind} account {code}")
        assert result.violations[0].category == ViolationCategory.SIGN

    def test_sign_override(self, validator):
        """Test treasury shares may be negative."""
        result = validator.validate_line_item(LineItem("Treasury shares", "3400", Decimal("-200")))
        assert result.is_valid
        assert result.violations == []

    def test_range_only_account_is_informational(self, validator):
        """Test unlisted codes in a known range only add an info note."""
        result = validator.validate_line_item(LineItem("Petty cash", "0150", Decimal("10")))
        assert result.is_valid
        assert result.warnings == []
        assert [v.severity for v in result.violations] == [Severity.INFO]

    def test_range_only_account_label(self, validator):
        """Test unlisted codes are named by code and description."""
        result = validator.validate_line_item(LineItem("Petty cash", "0150", Decimal("-10")))
        assert "0150 Petty cash" in result.errors[0]

    def test_unclassified_code(self, validator):
        """Test codes outside the chart are warned about, not errors."""
        result = validator.validate_line_item(LineItem("Suspense", "1900", Decimal("-5")))
        assert result.is_valid
        assert len(result.warnings) == 1
        assert "does not belong to any chart category" in result.warnings[0]

    def test_unclassified_contra_heuristic(self, validator):
        """Test contra keywords are consulted only when lookup misses."""
        result = validator.validate_line_item(
            LineItem("Accumulated depreciation - vehicles", "1900", Decimal("50"))
        )
        assert result.is_valid
        assert len(result.warnings) == 2
        assert "looks like a contra account" in result.warnings[1]

    def test_code_wins_over_description(self, validator):
        """Test a classified code is never overridden by keywords."""
        result = validator.validate_line_item(
            LineItem("Allowance for doubtful accounts", "0300", Decimal("100"))
        )
        assert result.is_valid

    def test_localized_messages(self, standard_chart):
        """Test account names follow the display language."""
        validator = SignValidator(standard_chart, language="ru")
        result = validator.validate_line_item(LineItem("Касса", "0100", Decimal("-1")))
        assert "Денежные средства в кассе" in result.errors[0]

    def test_manufacturing_costs_negative(self, extended_chart):
        """Test manufacturing cost accumulators carry like expenses."""
        validator = SignValidator(extended_chart, language="en")
        assert validator.validate_line_item(LineItem("Direct labor", "9100", Decimal("-20"))).is_valid
        result = validator.validate_line_item(LineItem("Direct labor", "9100", Decimal("20")))
        assert result.errors[0].startswith("Manufacturing account 9100 Direct labor")

    def test_module_level_helper(self):
        """Test the default-profile helper."""
        assert validate_line_item(LineItem("Cash", "0100", Decimal("5"))).is_valid


class TestContraKeywords:
    """Tests for contra-account description detection."""

    @pytest.mark.parametrize("text", [
        "Accumulated Depreciation",
        "Allowance for doubtful accounts",
        "Impairment of goodwill",
        "Накопленный износ",
        "Резерв по сомнительным долгам",
        "Asosiy vositalar amortizatsiyasi",
    ])
    def test_detects_keywords(self, text):
        """Test keywords in all three languages."""
        assert is_contra_description(text)

    def test_plain_description(self):
        """Test ordinary descriptions are not contra."""
        assert not is_contra_description("Cash on hand")
        assert not is_contra_description("")

    def test_language_filter(self):
        """Test restricting the keyword languages."""
        assert not is_contra_description("Накопленный износ", languages=["en"])
