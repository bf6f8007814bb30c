"""
Sign/balance validator.

Checks that each line item's amount carries the sign expected for its account
type: assets, liabilities, equity and revenue positive; contra assets,
expenses and manufacturing costs negative.
"""
from typing import Dict, List, Optional

import structlog

from statement_engine.config import get_settings
from statement_engine.models.account import AccountClassification, AccountType
from statement_engine.models.statement import (
    LineItem,
    Severity,
    ValidationResult,
    Violation,
    ViolationCategory,
)
from statement_engine.services.account_names import is_contra_description
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts

logger = structlog.get_logger(__name__)

# Account types whose amount must be >= 0; the rest must be <= 0
POSITIVE_TYPES = {
    AccountType.ASSET,
    AccountType.LIABILITY,
    AccountType.EQUITY,
    AccountType.REVENUE,
}
NEGATIVE_TYPES = {
    AccountType.CONTRA_ASSET,
    AccountType.EXPENSE,
    AccountType.MANUFACTURING,
}

TYPE_LABELS = {
    AccountType.ASSET: "Asset",
    AccountType.CONTRA_ASSET: "Contra",
    AccountType.LIABILITY: "Liability",
    AccountType.EQUITY: "Equity",
    AccountType.REVENUE: "Revenue",
    AccountType.EXPENSE: "Expense",
    AccountType.MANUFACTURING: "Manufacturing",
}


class SignValidator:
    """
    Validator for line-item sign conventions.

    Code-range classification always decides. Description keywords are only
    consulted when the code is outside the chart.
    """

    def __init__(self, chart: Optional[ChartOfAccounts] = None, language: Optional[str] = None):
        """
        Initialize validator.

        Args:
            chart: Chart of accounts; defaults to the configured profile.
            language: Language for account names in messages.
        """
        self.chart = chart or get_chart_of_accounts()
        self.language = language or get_settings().display_language

    def validate_line_item(self, item: LineItem) -> ValidationResult:
        """
        Validate the sign of one line item.

        Args:
            item: Line item to check.

        Returns:
            ValidationResult; violations are reported, never corrected.
        """
        return ValidationResult.from_violations(self.check(item))

    def check(self, item: LineItem) -> List[Violation]:
        """Collect sign and classification violations for one item."""
        classification = self.chart.lookup(item.code)
        if classification is None:
            return self._check_unclassified(item)

        violations: List[Violation] = []
        if not classification.is_specific:
            violations.append(Violation(
                message=f"Account {item.code} is not a listed account in range {classification.group}",
                severity=Severity.INFO,
                category=ViolationCategory.CLASSIFICATION,
                code=str(item.code),
            ))

        sign_violation = self._check_sign(item, classification)
        if sign_violation:
            violations.append(sign_violation)
        return violations

    def _check_sign(self, item: LineItem, classification: AccountClassification) -> Optional[Violation]:
        label = self._label(item, classification)
        kind = TYPE_LABELS[classification.type]

        if classification.type in POSITIVE_TYPES and item.amount < 0:
            if classification.type in (AccountType.LIABILITY, AccountType.EQUITY) and \
                    self.chart.has_sign_override(item.code):
                return None
            if classification.type == AccountType.ASSET:
                suggestion = f"Verify if {label} is a contra account"
            else:
                suggestion = f"Check for abnormal balance in {label}"
            return Violation(
                message=f"{kind} account {label} should have positive balance (found {item.amount})",
                severity=Severity.ERROR,
                category=ViolationCategory.SIGN,
                code=str(item.code),
                suggestion=suggestion,
            )

        if classification.type in NEGATIVE_TYPES and item.amount > 0:
            return Violation(
                message=f"{kind} account {label} should have negative balance (found {item.amount})",
                severity=Severity.ERROR,
                category=ViolationCategory.SIGN,
                code=str(item.code),
                suggestion="Record contra accounts, expenses and costs as negative amounts",
            )

        return None

    def _check_unclassified(self, item: LineItem) -> List[Violation]:
        violations = [Violation(
            message=f"Account {item.code} ({item.description}) does not belong to any chart category",
            severity=Severity.WARNING,
            category=ViolationCategory.CLASSIFICATION,
            code=str(item.code),
            suggestion="Map unclassified accounts to a chart-of-accounts code",
        )]

        # Description is the only evidence left for contra accounts
        if is_contra_description(item.description) and item.amount > 0:
            violations.append(Violation(
                message=(
                    f"Account {item.code} {item.description} looks like a contra account "
                    f"and should have negative balance (found {item.amount})"
                ),
                severity=Severity.WARNING,
                category=ViolationCategory.SIGN,
                code=str(item.code),
                suggestion="Record contra accounts, expenses and costs as negative amounts",
            ))
        return violations

    def _label(self, item: LineItem, classification: AccountClassification) -> str:
        if classification.is_specific:
            return classification.label(self.language)
        return f"{item.code} {item.description}".strip()


_validator_instances: Dict[str, SignValidator] = {}


def get_sign_validator(chart: Optional[ChartOfAccounts] = None) -> SignValidator:
    """Get shared SignValidator for a chart profile."""
    chart = chart or get_chart_of_accounts()
    validator = _validator_instances.get(chart.profile)
    if validator is None or validator.chart is not chart:
        validator = SignValidator(chart)
        _validator_instances[chart.profile] = validator
    return validator


def validate_line_item(item: LineItem) -> ValidationResult:
    """Validate one item's sign under the configured chart profile."""
    return get_sign_validator().validate_line_item(item)
