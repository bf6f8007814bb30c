"""
Unit tests for TransitionValidator.
"""
from decimal import Decimal

import pytest

from statement_engine.models.statement import OTHER_SECTION, LineItem
from statement_engine.services.transition_validator import TransitionValidator, can_move


def item(code: str, amount: str = "100") -> LineItem:
    return LineItem(f"Account {code}", code, Decimal(amount))


class TestBalanceSheetTransitions:
    """Tests for balance sheet moves."""

    @pytest.fixture
    def validator(self, standard_chart) -> TransitionValidator:
        return TransitionValidator(standard_chart)

    def test_asset_between_asset_sections(self, validator):
        """Test assets may move between asset sections."""
        result = validator.can_move(item("0100"), "assets_current", "assets_noncurrent", "balance-sheet")
        assert result.is_valid
        assert result.reason is None

    def test_asset_into_liabilities(self, validator):
        """Test assets cannot leave the asset sections."""
        result = validator.can_move(item("0100"), "assets_current", "liabilities_current", "balance-sheet")
        assert not result.is_valid
        assert result.reason.startswith("Asset accounts must remain in assets sections")

    def test_contra_asset_stays_in_assets(self, validator):
        """Test contra assets follow the asset rule."""
        result = validator.can_move(item("1400", "-10"), "assets_noncurrent", "equity", "balance-sheet")
        assert not result.is_valid

    def test_liability_into_equity(self, validator):
        """Test liabilities cannot move to equity."""
        result = validator.can_move(item("2000"), "liabilities_current", "equity", "balance-sheet")
        assert not result.is_valid
        assert result.reason.startswith("Liability accounts must remain in liabilities sections")

    def test_liability_between_liability_sections(self, validator):
        """Test liabilities may be reclassified current/non-current."""
        result = validator.can_move(item("2000"), "liabilities_current", "liabilities_noncurrent", "balance-sheet")
        assert result.is_valid

    def test_equity_into_liabilities(self, validator):
        """Test equity stays in equity."""
        result = validator.can_move(item("3000"), "equity", "liabilities_noncurrent", "balance-sheet")
        assert not result.is_valid
        assert result.reason.startswith("Equity accounts must remain in equity section")

    def test_asset_into_other(self, validator):
        """Test classified items cannot be parked in "other"."""
        result = validator.can_move(item("0100"), "assets_current", OTHER_SECTION, "balance-sheet")
        assert not result.is_valid

    def test_back_to_canonical_always_allowed(self, validator):
        """Test returning an item to its own section is allowed from anywhere."""
        result = validator.can_move(item("0100"), "equity", "assets_current", "balance-sheet")
        assert result.is_valid
        result = validator.can_move(item("0100"), "nowhere", "assets_current", "balance-sheet")
        assert result.is_valid

    def test_unknown_target(self, validator):
        """Test unknown target sections are rejected."""
        result = validator.can_move(item("0100"), "assets_current", "goodwill", "balance-sheet")
        assert not result.is_valid
        assert result.reason == "Invalid target section: goodwill"

    def test_unknown_source(self, validator):
        """Test unknown source sections are rejected."""
        result = validator.can_move(item("0100"), "goodwill", "assets_noncurrent", "balance-sheet")
        assert not result.is_valid
        assert result.reason == "Invalid source section: goodwill"

    def test_unclassified_item_moves_freely(self, validator):
        """Test items outside the chart may go to any known section."""
        result = validator.can_move(item("1900"), OTHER_SECTION, "equity", "balance-sheet")
        assert result.is_valid

    def test_decision_is_stateless(self, validator):
        """Test repeated calls give the same decision."""
        results = {
            validator.can_move(item("2000"), "liabilities_current", "equity", "balance-sheet").is_valid
            for _ in range(5)
        }
        assert results == {False}


class TestIncomeTransitions:
    """Tests for income statement moves."""

    @pytest.fixture
    def validator(self, standard_chart) -> TransitionValidator:
        return TransitionValidator(standard_chart)

    def test_revenue_stays_in_revenue(self, validator):
        """Test sales revenue cannot move to another income section."""
        result = validator.can_move(item("4000"), "revenue", "other_income", "income")
        assert not result.is_valid
        assert result.reason == (
            "Revenue accounts must remain in the revenue section: account 4000 cannot move to other_income"
        )

    def test_other_income_returns_home(self, validator):
        """Test an income item may move back to its own section."""
        result = validator.can_move(item("4500"), "revenue", "other_income", "income")
        assert result.is_valid

    def test_other_income_into_financial_income(self, validator):
        """Test non-revenue income sections only accept their own accounts."""
        result = validator.can_move(item("4500"), "other_income", "financial_income", "pnl")
        assert not result.is_valid

    def test_revenue_into_expenses(self, validator):
        """Test revenue cannot move to an expense section."""
        result = validator.can_move(item("4000"), "revenue", "cost_of_sales", "income")
        assert not result.is_valid
        assert result.reason.startswith("Revenue accounts must remain in the revenue section")

    def test_expense_into_revenue(self, validator):
        """Test expenses cannot move to revenue."""
        result = validator.can_move(item("5000", "-10"), "cost_of_sales", "revenue", "pnl")
        assert not result.is_valid
        assert result.reason.startswith("Expense accounts must be in cost of sales or expense sections")

    def test_expense_between_expense_sections(self, validator):
        """Test expenses may move between expense sections."""
        result = validator.can_move(item("5000", "-10"), "cost_of_sales", "operating_expenses", "income")
        assert result.is_valid

    def test_manufacturing_stays_in_expenses(self, extended_chart):
        """Test manufacturing costs follow the expense rule."""
        validator = TransitionValidator(extended_chart)
        assert validator.can_move(item("9100", "-5"), "manufacturing_costs", "cost_of_sales", "pnl").is_valid
        assert not validator.can_move(item("9100", "-5"), "manufacturing_costs", "revenue", "pnl").is_valid


class TestCashFlowTransitions:
    """Tests for cash flow moves."""

    def test_activities_are_advisory(self, standard_chart):
        """Test any cash flow activity is accepted."""
        validator = TransitionValidator(standard_chart)
        result = validator.can_move(item("4000"), "operating", "financing", "cash-flow")
        assert result.is_valid

    def test_module_level_helper(self):
        """Test the default-profile helper."""
        assert not can_move(item("0100"), "assets_current", "equity", "balance-sheet").is_valid
