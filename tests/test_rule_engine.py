"""
Unit tests for declarative relationship rules.
"""
from decimal import Decimal

import pytest

from statement_engine.exceptions import ChartConfigurationError
from statement_engine.models.rules import AggregateRef, AggregateSelector, Predicate, Rule
from statement_engine.models.statement import GeneratedStatement, LineItem, Severity, StatementType
from statement_engine.services.validators.rule_engine import RuleEngine


@pytest.fixture
def engine(standard_chart) -> RuleEngine:
    return RuleEngine(standard_chart, tolerance=Decimal("0.01"))


def make_rule(**overrides) -> Rule:
    data = {
        "id": "test-rule",
        "description": "Receivables cover the allowance",
        "statement_types": ["balance-sheet"],
        "left": [{"range": "0300-0399"}],
        "predicate": "greater_or_equal",
        "right": [{"range": "1600-1699", "absolute": True}],
    }
    data.update(overrides)
    return Rule.from_dict(data)


class TestRuleParsing:
    """Tests for Rule.from_dict."""

    def test_parse(self):
        """Test a complete rule mapping."""
        rule = make_rule(severity="error")
        assert rule.predicate == Predicate.GREATER_OR_EQUAL
        assert rule.left[0].selector == AggregateSelector.RANGE
        assert rule.right[0].absolute is True
        assert rule.severity == Severity.ERROR
        assert rule.applies_to(StatementType.BALANCE_SHEET)
        assert not rule.applies_to(StatementType.INCOME)

    def test_constant_side(self):
        """Test rules compared against a constant."""
        rule = make_rule(right=[], constant=0, predicate="greater_than")
        assert rule.constant == Decimal("0")
        assert rule.references == rule.left

    def test_missing_right_side(self):
        """Test a rule needs a right side or constant."""
        with pytest.raises(ChartConfigurationError, match="right side or a constant"):
            make_rule(right=[])

    def test_unknown_account_type(self):
        """Test type aggregates are validated at load."""
        with pytest.raises(ChartConfigurationError, match="Unknown account type"):
            make_rule(left=[{"type": "goodwill"}])

    def test_aggregate_needs_selector(self):
        """Test aggregates must select by code, range or type."""
        with pytest.raises(ChartConfigurationError):
            AggregateRef.from_dict({"absolute": True})

    def test_describe(self):
        """Test aggregate descriptions for log output."""
        ref = AggregateRef.from_dict({"type": "liability", "absolute": True, "weight": -1})
        assert ref.describe() == "-1 * |type liability|"


class TestRuleEngine:
    """Tests for RuleEngine evaluation."""

    def test_rule_holds(self, engine):
        """Test a satisfied rule yields no violation."""
        items = [
            LineItem("Trade receivables", "0300", Decimal("500")),
            LineItem("Allowance", "1600", Decimal("-100")),
        ]
        assert engine.evaluate_rule(make_rule(), items) is None

    def test_rule_fails(self, engine):
        """Test a failed rule reports its id and sides."""
        items = [
            LineItem("Trade receivables", "0300", Decimal("100")),
            LineItem("Allowance", "1600", Decimal("-500")),
        ]
        violation = engine.evaluate_rule(make_rule(), items)
        assert violation is not None
        assert violation.severity == Severity.WARNING
        assert violation.message.startswith("Rule test-rule violated: Receivables cover the allowance")
        assert "100 greater_or_equal 500" in violation.message

    def test_rule_skipped_without_members(self, engine):
        """Test rules are skipped when a referenced group is absent."""
        items = [LineItem("Allowance", "1600", Decimal("-500"))]
        assert engine.evaluate_rule(make_rule(), items) is None

    def test_require_present_false(self, engine):
        """Test partial presence is enough when not required."""
        rule = make_rule(
            left=[{"type": "asset"}, {"type": "liability", "absolute": True, "weight": -1}],
            right=[],
            constant=0,
            predicate="greater_than",
            require_present=False,
        )
        items = [LineItem("Trade payables", "2000", Decimal("300"))]
        violation = engine.evaluate_rule(rule, items)
        assert violation is not None

    def test_code_selector(self, engine):
        """Test selecting a single padded code."""
        ref = AggregateRef.from_dict({"code": "100"})
        items = [
            LineItem("Cash", "0100", Decimal("10")),
            LineItem("Cash in bank", "0110", Decimal("20")),
        ]
        assert engine.aggregate(ref, items) == Decimal("10")

    def test_type_selector_and_weight(self, engine):
        """Test type selection with absolute value and weight."""
        ref = AggregateRef.from_dict({"type": "contra_asset", "absolute": True, "weight": 2})
        items = [
            LineItem("Depreciation", "1400", Decimal("-10")),
            LineItem("Allowance", "1600", Decimal("-5")),
            LineItem("Cash", "0100", Decimal("100")),
        ]
        assert engine.aggregate(ref, items) == Decimal("30")

    @pytest.mark.parametrize("predicate,left,right,holds", [
        (Predicate.GREATER_THAN, "1", "0", True),
        (Predicate.GREATER_THAN, "0", "0", False),
        (Predicate.GREATER_OR_EQUAL, "99.995", "100", True),
        (Predicate.LESS_THAN, "1", "2", True),
        (Predicate.LESS_OR_EQUAL, "100.005", "100", True),
        (Predicate.WITHIN_EPSILON_OF, "10.009", "10", True),
        (Predicate.WITHIN_EPSILON_OF, "10.02", "10", False),
        (Predicate.NOT_EQUAL, "10.02", "10", True),
        (Predicate.NOT_EQUAL, "10.001", "10", False),
    ])
    def test_predicates(self, engine, predicate, left, right, holds):
        """Test every predicate of the interpreter."""
        assert engine._holds(predicate, Decimal(left), Decimal(right)) is holds

    def test_evaluate_filters_by_statement_type(self, engine):
        """Test only rules for the statement type run."""
        statement = GeneratedStatement(line_items=[
            LineItem("Trade receivables", "0300", Decimal("100")),
            LineItem("Allowance", "1600", Decimal("-500")),
        ])
        violations = engine.evaluate(statement, StatementType.BALANCE_SHEET)
        assert [v.message.split(":")[0] for v in violations] == [
            "Rule contra-receivables violated",
            "Rule going-concern violated",
        ]
        assert engine.evaluate(statement, StatementType.INCOME) == []

    def test_going_concern(self, engine):
        """Test net assets must be positive."""
        statement = GeneratedStatement(line_items=[
            LineItem("Cash", "0100", Decimal("100")),
            LineItem("Borrowings", "2100", Decimal("300")),
        ])
        violations = engine.evaluate(statement, StatementType.BALANCE_SHEET)
        assert any("going-concern" in v.message for v in violations)
