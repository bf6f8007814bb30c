"""Models package."""
from statement_engine.models.account import (
    AccountClassification,
    AccountCode,
    AccountCodeRange,
    AccountType,
    LocalizedName,
    NormalBalance,
    is_in_range,
)
from statement_engine.models.statement import (
    OTHER_SECTION,
    Correction,
    GeneratedStatement,
    LineItem,
    SectionRef,
    Severity,
    StatementType,
    Subtotal,
    TransitionResult,
    ValidationResult,
    Violation,
    ViolationCategory,
)
from statement_engine.models.rules import AggregateRef, AggregateSelector, Predicate, Rule

__all__ = [
    "AccountClassification",
    "AccountCode",
    "AccountCodeRange",
    "AccountType",
    "LocalizedName",
    "NormalBalance",
    "is_in_range",
    "OTHER_SECTION",
    "Correction",
    "GeneratedStatement",
    "LineItem",
    "SectionRef",
    "Severity",
    "StatementType",
    "Subtotal",
    "TransitionResult",
    "ValidationResult",
    "Violation",
    "ViolationCategory",
    "AggregateRef",
    "AggregateSelector",
    "Predicate",
    "Rule",
]
