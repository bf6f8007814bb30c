"""
Interpreter for declarative relationship rules.

Each rule sums its aggregate references over the statement's line items and
applies a fixed predicate. Rule text is never evaluated as code.
"""
from decimal import Decimal
from typing import List, Optional

import structlog

from statement_engine.config import get_settings
from statement_engine.models.account import AccountCodeRange, AccountType
from statement_engine.models.rules import AggregateRef, AggregateSelector, Predicate, Rule
from statement_engine.models.statement import (
    GeneratedStatement,
    LineItem,
    StatementType,
    Violation,
    ViolationCategory,
)
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts

logger = structlog.get_logger(__name__)


class RuleEngine:
    """Evaluates a chart profile's relationship rules against a statement."""

    def __init__(self, chart: Optional[ChartOfAccounts] = None, tolerance: Optional[Decimal] = None):
        self.chart = chart or get_chart_of_accounts()
        self.tolerance = tolerance if tolerance is not None else get_settings().tolerance

    def evaluate(self, statement: GeneratedStatement, statement_type: StatementType) -> List[Violation]:
        """
        Evaluate every rule that applies to the statement type.

        Returns:
            One violation per failed rule.
        """
        violations = []
        for rule in self.chart.rules_for(statement_type):
            violation = self.evaluate_rule(rule, statement.line_items)
            if violation:
                violations.append(violation)
        return violations

    def evaluate_rule(self, rule: Rule, items: List[LineItem]) -> Optional[Violation]:
        """Evaluate one rule; None when it holds or does not apply."""
        presence = [self._has_members(ref, items) for ref in rule.references]
        if not any(presence) or (rule.require_present and not all(presence)):
            return None

        left = self._side_total(rule.left, items)
        right = self._side_total(rule.right, items) if rule.right else rule.constant

        if self._holds(rule.predicate, left, right):
            return None

        logger.debug(
            "Rule failed",
            rule_id=rule.id,
            left=[ref.describe() for ref in rule.left],
            right=[ref.describe() for ref in rule.right] or str(rule.constant),
            left_total=str(left),
            right_total=str(right),
        )
        return Violation(
            message=f"Rule {rule.id} violated: {rule.description} ({left} {rule.predicate.value} {right})",
            severity=rule.severity,
            category=ViolationCategory.RELATIONSHIP,
            suggestion="Review contra accounts against the accounts they offset",
        )

    def aggregate(self, ref: AggregateRef, items: List[LineItem]) -> Decimal:
        """Weighted (optionally absolute) sum of the items a reference selects."""
        total = sum((item.amount for item in items if self._selects(ref, item)), Decimal("0"))
        if ref.absolute:
            total = abs(total)
        return total * ref.weight

    def _side_total(self, refs: List[AggregateRef], items: List[LineItem]) -> Decimal:
        return sum((self.aggregate(ref, items) for ref in refs), Decimal("0"))

    def _has_members(self, ref: AggregateRef, items: List[LineItem]) -> bool:
        return any(self._selects(ref, item) for item in items)

    def _selects(self, ref: AggregateRef, item: LineItem) -> bool:
        if ref.selector == AggregateSelector.TYPE:
            classification = self.chart.lookup(item.code)
            return classification is not None and classification.type == AccountType(ref.value)
        if ref.selector == AggregateSelector.CODE:
            return item.code == ref.value.zfill(4)
        return AccountCodeRange.parse(ref.value).contains(item.code)

    def _holds(self, predicate: Predicate, left: Decimal, right: Decimal) -> bool:
        if predicate == Predicate.GREATER_THAN:
            return left > right
        if predicate == Predicate.GREATER_OR_EQUAL:
            return left >= right - self.tolerance
        if predicate == Predicate.LESS_THAN:
            return left < right
        if predicate == Predicate.LESS_OR_EQUAL:
            return left <= right + self.tolerance
        if predicate == Predicate.WITHIN_EPSILON_OF:
            return abs(left - right) <= self.tolerance
        if predicate == Predicate.NOT_EQUAL:
            return abs(left - right) > self.tolerance
        raise ValueError(f"Unhandled predicate: {predicate}")
