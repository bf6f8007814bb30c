"""Validators package."""
from statement_engine.services.validators.accounting_equation import AccountingEquationValidator
from statement_engine.services.validators.rule_engine import RuleEngine
from statement_engine.services.validators.sign_validator import SignValidator, validate_line_item
from statement_engine.services.validators.statement_validator import StatementValidator, validate_statement

__all__ = [
    "AccountingEquationValidator",
    "RuleEngine",
    "SignValidator",
    "StatementValidator",
    "validate_line_item",
    "validate_statement",
]
