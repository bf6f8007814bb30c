"""
Declarative relationship rules.

A rule compares weighted sums of line-item aggregates against either a
constant or another set of aggregates. Rules are data; the interpreter lives
in services/validators/rule_engine.py.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from statement_engine.exceptions import ChartConfigurationError
from statement_engine.models.account import AccountCodeRange, AccountType
from statement_engine.models.statement import Severity, StatementType


class Predicate(str, Enum):
    """Comparison applied between the left and right side of a rule."""
    GREATER_THAN = "greater_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_THAN = "less_than"
    LESS_OR_EQUAL = "less_or_equal"
    WITHIN_EPSILON_OF = "within_epsilon_of"
    NOT_EQUAL = "not_equal"


class AggregateSelector(str, Enum):
    """How an aggregate picks its line items."""
    CODE = "code"
    RANGE = "range"
    TYPE = "type"


@dataclass(frozen=True)
class AggregateRef:
    """Reference to the sum of a group of line items."""
    selector: AggregateSelector
    value: str
    absolute: bool = False
    weight: Decimal = Decimal("1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregateRef":
        for selector in AggregateSelector:
            if selector.value in data:
                value = str(data[selector.value])
                break
        else:
            raise ChartConfigurationError(
                "Aggregate reference needs one of code, range or type",
                details={"aggregate": data},
            )

        if selector == AggregateSelector.TYPE:
            try:
                AccountType(value)
            except ValueError:
                raise ChartConfigurationError(
                    f"Unknown account type in rule aggregate: {value}",
                    details={"aggregate": data},
                )
        else:
            # Validates the code or range syntax at load time
            AccountCodeRange.parse(value)

        return cls(
            selector=selector,
            value=value,
            absolute=bool(data.get("absolute", False)),
            weight=Decimal(str(data.get("weight", 1))),
        )

    def describe(self) -> str:
        text = f"{self.selector.value} {self.value}"
        if self.absolute:
            text = f"|{text}|"
        if self.weight != 1:
            text = f"{self.weight} * {text}"
        return text


@dataclass(frozen=True)
class Rule:
    """A relationship rule declared in a chart profile."""
    id: str
    description: str
    statement_types: List[StatementType]
    left: List[AggregateRef]
    predicate: Predicate
    right: List[AggregateRef] = field(default_factory=list)
    constant: Optional[Decimal] = None
    severity: Severity = Severity.WARNING
    require_present: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        """
        Build a rule from its YAML mapping.

        Raises:
            ChartConfigurationError: If the rule is incomplete or names an
                unknown predicate.
        """
        rule_id = data.get("id")
        if not rule_id or not data.get("left"):
            raise ChartConfigurationError("Rule needs an id and a left side", details={"rule": data})

        try:
            predicate = Predicate(data.get("predicate", ""))
        except ValueError:
            raise ChartConfigurationError(
                f"Rule {rule_id} has unknown predicate {data.get('predicate')!r}",
                details={"rule_id": rule_id},
            )

        right = [AggregateRef.from_dict(ref) for ref in data.get("right", [])]
        constant = data.get("constant")
        if not right and constant is None:
            raise ChartConfigurationError(
                f"Rule {rule_id} needs a right side or a constant",
                details={"rule_id": rule_id},
            )

        return cls(
            id=rule_id,
            description=data.get("description", rule_id),
            statement_types=[StatementType.coerce(t) for t in data.get("statement_types", [])],
            left=[AggregateRef.from_dict(ref) for ref in data["left"]],
            predicate=predicate,
            right=right,
            constant=Decimal(str(constant)) if constant is not None else None,
            severity=Severity(data.get("severity", Severity.WARNING.value)),
            require_present=bool(data.get("require_present", True)),
        )

    def applies_to(self, statement_type: StatementType) -> bool:
        return not self.statement_types or statement_type in self.statement_types

    @property
    def references(self) -> List[AggregateRef]:
        return self.left + self.right
