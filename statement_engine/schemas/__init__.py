"""Payload schemas."""
from statement_engine.schemas.statement import (
    CorrectionPayload,
    GeneratedStatementPayload,
    LineItemPayload,
    SectionPayload,
    SubtotalPayload,
    parse_statement,
)

__all__ = [
    "CorrectionPayload",
    "GeneratedStatementPayload",
    "LineItemPayload",
    "SectionPayload",
    "SubtotalPayload",
    "parse_statement",
]
