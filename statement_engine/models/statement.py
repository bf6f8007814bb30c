"""
Statement data structures for classification and validation.

Implements:
- LineItem, Subtotal and GeneratedStatement (the in-memory statement)
- Violation and Correction records carrying an explicit Severity
- ValidationResult and TransitionResult returned by the validators
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from statement_engine.exceptions import UnsupportedStatementTypeError
from statement_engine.models.account import AccountCode

OTHER_SECTION = "other"


class StatementType(str, Enum):
    """Financial statement types."""
    BALANCE_SHEET = "balance-sheet"
    INCOME = "income"
    PNL = "pnl"
    CASH_FLOW = "cash-flow"

    @classmethod
    def coerce(cls, value: Union[str, "StatementType"]) -> "StatementType":
        """Accept enum members, values ("balance-sheet") or names ("balance_sheet")."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        raise UnsupportedStatementTypeError(value)

    @property
    def is_income_like(self) -> bool:
        return self in (StatementType.INCOME, StatementType.PNL)


class Severity(str, Enum):
    """Severity of a violation; ERROR > WARNING > INFO."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return {"error": 2, "warning": 1, "info": 0}[self.value]


class ViolationCategory(str, Enum):
    """Failure category, used to de-duplicate suggestions."""
    SIGN = "sign"
    TOTAL = "total"
    SUBTOTAL = "subtotal"
    IDENTITY = "identity"
    MISSING_SECTION = "missing_section"
    MISSING_ACCOUNT = "missing_account"
    TRANSITION = "transition"
    CLASSIFICATION = "classification"
    RELATIONSHIP = "relationship"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class SectionRef:
    """Structured section placement of a line item."""
    code: str
    name: str = ""


@dataclass
class LineItem:
    """A single line of a generated statement."""
    description: str
    code: AccountCode
    amount: Decimal
    section: Union[str, SectionRef] = ""
    id: str = ""

    def __post_init__(self):
        self.code = AccountCode(self.code)
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))
        if not self.id:
            self.id = f"{self.code}:{self.description}"

    @property
    def section_key(self) -> str:
        """Section identifier text of the current placement."""
        if isinstance(self.section, SectionRef):
            return self.section.code
        return self.section

    @property
    def section_text(self) -> str:
        """Section id and display name, for substring matching."""
        if isinstance(self.section, SectionRef):
            return f"{self.section.code} {self.section.name}".strip()
        return self.section


@dataclass
class Subtotal:
    """Stated subtotal of one section."""
    description: str
    amount: Decimal
    section: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            self.amount = Decimal(str(self.amount))


@dataclass(frozen=True)
class Violation:
    """A single validation failure with explicit severity."""
    message: str
    severity: Severity
    category: ViolationCategory
    code: Optional[str] = None
    suggestion: Optional[str] = None


@dataclass(frozen=True)
class Correction:
    """Entry in a statement's correction log."""
    message: str
    severity: Severity = Severity.INFO
    category: Optional[ViolationCategory] = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_violation(cls, violation: Violation, recorded_at: Optional[datetime] = None) -> "Correction":
        return cls(
            message=violation.message,
            severity=violation.severity,
            category=violation.category,
            recorded_at=recorded_at or datetime.now(timezone.utc),
        )

    def __str__(self) -> str:
        return self.message


@dataclass
class GeneratedStatement:
    """Statement produced by the generation collaborator or by edits."""
    line_items: List[LineItem] = field(default_factory=list)
    subtotals: List[Subtotal] = field(default_factory=list)
    total: Decimal = Decimal("0")
    validations: List[str] = field(default_factory=list)
    corrections: List[Correction] = field(default_factory=list)

    def __post_init__(self):
        if not isinstance(self.total, Decimal):
            self.total = Decimal(str(self.total))

    def find_item(self, item_id: str) -> Optional[LineItem]:
        return next((item for item in self.line_items if item.id == item_id), None)

    def reset_logs(self) -> None:
        """Clear the audit and correction logs on full regeneration."""
        self.validations.clear()
        self.corrections.clear()

    @property
    def line_items_total(self) -> Decimal:
        return sum((item.amount for item in self.line_items), Decimal("0"))


@dataclass
class ValidationResult:
    """Result of a validation call."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    suggestions: Optional[List[str]] = None
    violations: List[Violation] = field(default_factory=list)

    @classmethod
    def from_violations(cls, violations: List[Violation]) -> "ValidationResult":
        """
        Build a result from collected violations.

        Suggestions are de-duplicated to one per violation category.
        """
        suggestions: List[str] = []
        seen_categories = set()
        for violation in violations:
            if violation.suggestion and violation.category not in seen_categories:
                seen_categories.add(violation.category)
                suggestions.append(violation.suggestion)

        return cls(
            is_valid=not any(v.severity == Severity.ERROR for v in violations),
            errors=[v.message for v in violations if v.severity == Severity.ERROR],
            warnings=[v.message for v in violations if v.severity == Severity.WARNING],
            suggestions=suggestions or None,
            violations=list(violations),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
            "suggestions": self.suggestions,
        }


@dataclass(frozen=True)
class TransitionResult:
    """Decision on a drag-and-drop section move."""
    is_valid: bool
    reason: Optional[str] = None
