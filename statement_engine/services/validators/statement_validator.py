"""
Statement arithmetic validator.

Whole-statement checks, all within the configured tolerance:
1. Line items sum to the stated total
2. Each subtotal equals the sum of its section's items, and subtotals covering
   every item add up to the total
3. Statement-type identity (A = L + E, net income build-up, net cash flow)
4. Required sections are present

Plus advisory checks: required accounts, chart relationship rules and items
sitting outside the section their code belongs to.
"""
from decimal import Decimal
from typing import Dict, List, Optional, Union

import structlog

from statement_engine.config import get_settings
from statement_engine.models.statement import (
    OTHER_SECTION,
    GeneratedStatement,
    LineItem,
    Severity,
    StatementType,
    Subtotal,
    ValidationResult,
    Violation,
    ViolationCategory,
)
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts
from statement_engine.services.section_classifier import SectionClassifier
from statement_engine.services.validators.accounting_equation import AccountingEquationValidator
from statement_engine.services.validators.rule_engine import RuleEngine

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")

CASH_FLOW_ACTIVITIES = ("operating", "investing", "financing")

# Words skipped when matching a subtotal description to a section
SUBTOTAL_STOPWORDS = {"total", "subtotal", "итого", "всего", "jami"}


class StatementValidator:
    """
    Validator for whole-statement arithmetic.

    Never modifies the statement; every failure becomes a violation.
    """

    def __init__(
        self,
        chart: Optional[ChartOfAccounts] = None,
        tolerance: Optional[Decimal] = None,
        language: Optional[str] = None,
    ):
        """
        Initialize validator.

        Args:
            chart: Chart of accounts; defaults to the configured profile.
            tolerance: Equality tolerance in currency units.
            language: Language for section titles in messages.
        """
        settings = get_settings()
        self.chart = chart or get_chart_of_accounts()
        self.tolerance = tolerance if tolerance is not None else settings.tolerance
        self.language = language or settings.display_language
        self.classifier = SectionClassifier(self.chart)
        self.equation = AccountingEquationValidator(self.chart, self.tolerance)
        self.rules = RuleEngine(self.chart, self.tolerance)

    def validate_statement(
        self,
        statement: GeneratedStatement,
        statement_type: Union[str, StatementType],
    ) -> ValidationResult:
        """
        Run all statement checks.

        Args:
            statement: Statement to validate.
            statement_type: Type of statement being validated.

        Returns:
            ValidationResult with one suggestion per failure category.
        """
        violations = self.check(statement, statement_type)
        result = ValidationResult.from_violations(violations)

        logger.info(
            "Statement validation complete",
            statement_type=StatementType.coerce(statement_type).value,
            items=len(statement.line_items),
            errors=len(result.errors),
            warnings=len(result.warnings),
        )
        return result

    def check(
        self,
        statement: GeneratedStatement,
        statement_type: Union[str, StatementType],
    ) -> List[Violation]:
        """Collect violations of every statement check."""
        statement_type = StatementType.coerce(statement_type)
        violations: List[Violation] = []

        violations.extend(self._check_total(statement))
        violations.extend(self._check_subtotals(statement, statement_type))

        if statement_type == StatementType.BALANCE_SHEET:
            violations.extend(self.equation.validate(statement.line_items))
        elif statement_type.is_income_like:
            violations.extend(self._check_income(statement, statement_type))
        elif statement_type == StatementType.CASH_FLOW:
            violations.extend(self._check_cash_flow(statement, statement_type))

        violations.extend(self._check_required_sections(statement, statement_type))
        violations.extend(self._check_required_accounts(statement, statement_type))
        violations.extend(self.rules.evaluate(statement, statement_type))
        violations.extend(self._check_placement(statement, statement_type))
        return violations

    def _differs(self, computed: Decimal, stated: Decimal) -> bool:
        return abs(computed - stated) > self.tolerance

    def _check_total(self, statement: GeneratedStatement) -> List[Violation]:
        computed = statement.line_items_total
        if not self._differs(computed, statement.total):
            return []
        diff = abs(computed - statement.total)
        return [Violation(
            message=(
                f"Total mismatch: line items sum to {computed:.2f} but total is "
                f"{statement.total:.2f} (difference {diff:.2f})"
            ),
            severity=Severity.ERROR,
            category=ViolationCategory.TOTAL,
            suggestion="Review all line items for accuracy",
        )]

    # ------------------------------------------------------------------
    # Subtotals
    # ------------------------------------------------------------------

    def subtotal_members(
        self,
        subtotal: Subtotal,
        statement: GeneratedStatement,
        statement_type: StatementType,
    ) -> List[LineItem]:
        """
        Items a subtotal covers.

        An explicit section id wins; otherwise the description, minus words
        like "Total", is matched as a prefix of each item's section id, section
        text or section title.
        """
        if subtotal.section:
            return [
                item for item in statement.line_items
                if self.classifier.resolve_section(item, statement_type) == subtotal.section
            ]

        words = [w for w in subtotal.description.lower().split() if w not in SUBTOTAL_STOPWORDS]
        if not words:
            return []
        prefix = " ".join(words)

        members = []
        for item in statement.line_items:
            section_id = self.classifier.resolve_section(item, statement_type)
            candidates = (
                section_id,
                item.section_text,
                self.chart.section_title(statement_type, section_id, self.language),
            )
            if any(c.lower().replace("_", " ").startswith(prefix) for c in candidates if c):
                members.append(item)
        return members

    def _check_subtotals(
        self,
        statement: GeneratedStatement,
        statement_type: StatementType,
    ) -> List[Violation]:
        violations = []
        covered = set()
        for subtotal in statement.subtotals:
            members = self.subtotal_members(subtotal, statement, statement_type)
            covered.update(id(item) for item in members)
            calculated = sum((item.amount for item in members), ZERO)
            if self._differs(calculated, subtotal.amount):
                violations.append(Violation(
                    message=(
                        f"Subtotal mismatch for {subtotal.description}: calculated "
                        f"{calculated:.2f} but shows {subtotal.amount:.2f}"
                    ),
                    severity=Severity.ERROR,
                    category=ViolationCategory.SUBTOTAL,
                    suggestion=f"Review items in {subtotal.description}",
                ))

        # Partial subtotal lists (e.g. only "Total Revenue") don't have to add up to the total
        if statement.subtotals and len(covered) == len(statement.line_items):
            stated = sum((subtotal.amount for subtotal in statement.subtotals), ZERO)
            if self._differs(stated, statement.total):
                violations.append(Violation(
                    message=(
                        f"Subtotals sum to {stated:.2f} but total is {statement.total:.2f} "
                        f"(difference {abs(stated - statement.total):.2f})"
                    ),
                    severity=Severity.ERROR,
                    category=ViolationCategory.TOTAL,
                    suggestion="Review all line items for accuracy",
                ))
        return violations

    # ------------------------------------------------------------------
    # Identities
    # ------------------------------------------------------------------

    def income_aggregates(
        self,
        items: List[LineItem],
        statement_type: StatementType,
    ) -> Dict[str, Decimal]:
        """Sum items by the aggregate of their canonical section."""
        sums: Dict[str, Decimal] = {}
        for item in items:
            section_id = self.classifier.classify(item.code, statement_type)
            section = self.chart.section(statement_type, section_id)
            if section is None:
                continue
            sums[section.aggregate] = sums.get(section.aggregate, ZERO) + item.amount
        return sums

    def _check_income(
        self,
        statement: GeneratedStatement,
        statement_type: StatementType,
    ) -> List[Violation]:
        sums = self.income_aggregates(statement.line_items, statement_type)

        # Expenses are recorded negative; the build-up works on magnitudes
        revenue = sums.get("revenue", ZERO)
        cost_of_sales = -sums.get("cost_of_sales", ZERO)
        operating_expenses = -sums.get("operating_expenses", ZERO)
        financial_income = sums.get("financial_income", ZERO)
        financial_expenses = -sums.get("financial_expenses", ZERO)
        other_income = sums.get("other_income", ZERO)
        other_expenses = -sums.get("other_expenses", ZERO)
        income_tax = -sums.get("income_tax", ZERO)

        gross_profit = revenue - cost_of_sales
        operating_profit = gross_profit - operating_expenses
        net_income = (
            operating_profit
            + financial_income
            - financial_expenses
            + other_income
            - other_expenses
            - income_tax
        )

        if not self._differs(net_income, statement.total):
            return []
        return [Violation(
            message=(
                f"Income calculation error: computed net income {net_income:.2f} "
                f"(gross profit {gross_profit:.2f}, operating profit {operating_profit:.2f}) "
                f"!= stated total {statement.total:.2f}"
            ),
            severity=Severity.ERROR,
            category=ViolationCategory.IDENTITY,
            suggestion="Verify expense accounts are negative and every item has a chart account",
        )]

    def cash_flow_buckets(
        self,
        items: List[LineItem],
        statement_type: StatementType = StatementType.CASH_FLOW,
    ) -> Dict[str, Decimal]:
        """Sum items into operating/investing/financing by section text."""
        buckets = {activity: ZERO for activity in CASH_FLOW_ACTIVITIES}
        for item in items:
            activity = self._activity_of(item.section_text)
            if activity is None:
                activity = self._activity_of(self.classifier.resolve_section(item, statement_type))
            if activity is not None:
                buckets[activity] += item.amount
        return buckets

    @staticmethod
    def _activity_of(text: str) -> Optional[str]:
        text_lower = (text or "").lower()
        for activity in CASH_FLOW_ACTIVITIES:
            if activity in text_lower:
                return activity
        return None

    def _check_cash_flow(
        self,
        statement: GeneratedStatement,
        statement_type: StatementType,
    ) -> List[Violation]:
        buckets = self.cash_flow_buckets(statement.line_items, statement_type)
        net_cash_flow = sum(buckets.values(), ZERO)
        if not self._differs(net_cash_flow, statement.total):
            return []
        return [Violation(
            message=(
                f"Cash flow statement does not balance: operating {buckets['operating']:.2f} + "
                f"investing {buckets['investing']:.2f} + financing {buckets['financing']:.2f} = "
                f"{net_cash_flow:.2f} but total is {statement.total:.2f}"
            ),
            severity=Severity.ERROR,
            category=ViolationCategory.IDENTITY,
            suggestion="Assign every cash flow item to operating, investing or financing activities",
        )]

    # ------------------------------------------------------------------
    # Completeness and placement
    # ------------------------------------------------------------------

    def _check_required_sections(
        self,
        statement: GeneratedStatement,
        statement_type: StatementType,
    ) -> List[Violation]:
        present = {
            self.classifier.resolve_section(item, statement_type)
            for item in statement.line_items
        }
        violations = []
        for section_id in self.chart.layout(statement_type).required_sections:
            if section_id in present:
                continue
            title = self.chart.section_title(statement_type, section_id, self.language)
            violations.append(Violation(
                message=f"Missing required section: {title} ({section_id})",
                severity=Severity.ERROR,
                category=ViolationCategory.MISSING_SECTION,
                suggestion=f"Add line items to {title}",
            ))
        return violations

    def _check_required_accounts(
        self,
        statement: GeneratedStatement,
        statement_type: StatementType,
    ) -> List[Violation]:
        codes = {item.code for item in statement.line_items}
        violations = []
        for code in self.chart.layout(statement_type).required_accounts:
            if code in codes:
                continue
            violations.append(Violation(
                message=(
                    f"Required account {code} {self.chart.account_name(code, self.language)} "
                    f"is missing from the {statement_type.value} statement"
                ),
                severity=Severity.WARNING,
                category=ViolationCategory.MISSING_ACCOUNT,
                code=str(code),
                suggestion="Check the trial balance for accounts required by this statement",
            ))
        return violations

    def _check_placement(
        self,
        statement: GeneratedStatement,
        statement_type: StatementType,
    ) -> List[Violation]:
        violations = []
        for item in statement.line_items:
            placed = item.section_key
            if not placed or self.chart.section(statement_type, placed) is None:
                continue
            expected = self.classifier.classify(item.code, statement_type)
            if expected == OTHER_SECTION or expected == placed:
                continue
            violations.append(Violation(
                message=(
                    f"Item {item.description} ({item.code}) is in {placed} "
                    f"but its account belongs to {expected}"
                ),
                severity=Severity.WARNING,
                category=ViolationCategory.CLASSIFICATION,
                code=str(item.code),
                suggestion="Move misplaced items to the section their account code belongs to",
            ))
        return violations


_validator_instances: Dict[str, StatementValidator] = {}


def get_statement_validator(chart: Optional[ChartOfAccounts] = None) -> StatementValidator:
    """Get shared StatementValidator for a chart profile."""
    chart = chart or get_chart_of_accounts()
    validator = _validator_instances.get(chart.profile)
    if validator is None or validator.chart is not chart:
        validator = StatementValidator(chart)
        _validator_instances[chart.profile] = validator
    return validator


def validate_statement(
    statement: GeneratedStatement,
    statement_type: Union[str, StatementType],
) -> ValidationResult:
    """Validate a statement under the configured chart profile."""
    return get_statement_validator().validate_statement(statement, statement_type)
