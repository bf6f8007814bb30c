"""
Accounting equation validator.

Validates that Assets = Liabilities + Equity (A = L + E) on a balance sheet,
summing line items by the account type of their code.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

import structlog

from statement_engine.config import get_settings
from statement_engine.models.account import AccountType
from statement_engine.models.statement import (
    LineItem,
    Severity,
    Violation,
    ViolationCategory,
)
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts

logger = structlog.get_logger(__name__)


@dataclass
class BalanceSheetTotals:
    """Balance sheet totals for validation."""

    total_assets: Decimal = Decimal("0")
    total_contra_assets: Decimal = Decimal("0")
    total_liabilities: Decimal = Decimal("0")
    total_equity: Decimal = Decimal("0")

    @property
    def net_assets(self) -> Decimal:
        """Assets net of contra accounts (contra amounts are negative)."""
        return self.total_assets + self.total_contra_assets

    @property
    def liabilities_and_equity(self) -> Decimal:
        """Liabilities plus equity as positive magnitudes."""
        return abs(self.total_liabilities) + abs(self.total_equity)


class AccountingEquationValidator:
    """
    Validator for the accounting equation.

    Liabilities and equity may be recorded with either sign convention, so
    both sides are compared as positive magnitudes.
    """

    def __init__(self, chart: Optional[ChartOfAccounts] = None, tolerance: Optional[Decimal] = None):
        """Initialize validator."""
        self.chart = chart or get_chart_of_accounts()
        self.tolerance = tolerance if tolerance is not None else get_settings().tolerance

    def extract_totals(self, items: List[LineItem]) -> BalanceSheetTotals:
        """Sum line items by account type."""
        totals = BalanceSheetTotals()
        for item in items:
            classification = self.chart.lookup(item.code)
            if classification is None:
                continue
            if classification.type == AccountType.ASSET:
                totals.total_assets += item.amount
            elif classification.type == AccountType.CONTRA_ASSET:
                totals.total_contra_assets += item.amount
            elif classification.type == AccountType.LIABILITY:
                totals.total_liabilities += item.amount
            elif classification.type == AccountType.EQUITY:
                totals.total_equity += item.amount
        return totals

    def validate(self, items: List[LineItem]) -> List[Violation]:
        """
        Validate accounting equation from line items.

        Args:
            items: Balance sheet line items.

        Returns:
            Empty list when A = L + E holds within tolerance.
        """
        totals = self.extract_totals(items)
        assets = totals.net_assets
        expected = totals.liabilities_and_equity
        diff = abs(assets - expected)

        if diff <= self.tolerance:
            logger.debug("Accounting equation validated", assets=str(assets))
            return []

        logger.info(
            "Accounting equation failed",
            assets=str(assets),
            liabilities=str(totals.total_liabilities),
            equity=str(totals.total_equity),
            difference=str(diff),
        )
        return [Violation(
            message=(
                f"Balance sheet doesn't balance: Assets ({assets:.2f}) != "
                f"Liabilities + Equity ({expected:.2f}), difference {diff:.2f}"
            ),
            severity=Severity.ERROR,
            category=ViolationCategory.IDENTITY,
            suggestion="Review account classifications",
        )]
