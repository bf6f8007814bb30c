"""
Statement classification and validation engine.

Classifies chart-of-accounts codes into statement sections, validates signs,
totals and accounting identities, gates drag-and-drop section moves and
monitors generated statements for drift.
"""
from statement_engine.exceptions import (
    ChartConfigurationError,
    ChartProfileNotFoundError,
    InvalidAccountCodeError,
    MalformedStatementError,
    StatementEngineError,
    UnsupportedStatementTypeError,
)
from statement_engine.models import (
    OTHER_SECTION,
    AccountCode,
    Correction,
    GeneratedStatement,
    LineItem,
    SectionRef,
    Severity,
    StatementType,
    Subtotal,
    TransitionResult,
    ValidationResult,
)
from statement_engine.schemas import parse_statement
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts
from statement_engine.services.monitor import MonitorStatus, StatementMonitor
from statement_engine.services.section_classifier import classify
from statement_engine.services.statement_builder import StatementBuilder
from statement_engine.services.transition_validator import can_move
from statement_engine.services.validators import validate_line_item, validate_statement

__version__ = "1.0.0"

__all__ = [
    "ChartConfigurationError",
    "ChartProfileNotFoundError",
    "InvalidAccountCodeError",
    "MalformedStatementError",
    "StatementEngineError",
    "UnsupportedStatementTypeError",
    "OTHER_SECTION",
    "AccountCode",
    "Correction",
    "GeneratedStatement",
    "LineItem",
    "SectionRef",
    "Severity",
    "StatementType",
    "Subtotal",
    "TransitionResult",
    "ValidationResult",
    "parse_statement",
    "ChartOfAccounts",
    "get_chart_of_accounts",
    "MonitorStatus",
    "StatementMonitor",
    "classify",
    "StatementBuilder",
    "can_move",
    "validate_line_item",
    "validate_statement",
]
