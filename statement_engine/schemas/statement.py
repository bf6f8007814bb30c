"""
Pydantic schemas for generated statement payloads.

Parses the JSON produced by the statement generator (camelCase keys, numbers
as strings or floats) and converts it to the domain model.
"""
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from statement_engine.exceptions import InvalidAccountCodeError, MalformedStatementError
from statement_engine.models.account import AccountCode, parse_code
from statement_engine.models.statement import (
    Correction,
    GeneratedStatement,
    LineItem,
    SectionRef,
    Severity,
    Subtotal,
)

_LEADING_CODE = re.compile(r"^\s*(\d{1,4})\b")
_ERROR_WORDS = re.compile(r"\b(error|invalid|violation)s?\b", re.IGNORECASE)
_WARNING_WORDS = re.compile(r"\b(warning|check)s?\b", re.IGNORECASE)


def infer_severity(message: str) -> Severity:
    """Severity of a plain-string correction, read from its wording."""
    if _ERROR_WORDS.search(message):
        return Severity.ERROR
    if _WARNING_WORDS.search(message):
        return Severity.WARNING
    return Severity.INFO


class SectionPayload(BaseModel):
    """Structured section placement."""

    code: str = Field(..., description="Section identifier")
    name: str = Field("", description="Section display name")


class LineItemPayload(BaseModel):
    """Payload model for one statement line."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(None, description="Stable item identifier")
    description: str = Field(..., description="Line description")
    code: Optional[Union[str, int]] = Field(None, description="Account code (1-4 digits)")
    amount: Decimal = Field(..., description="Signed amount")
    section: Optional[Union[SectionPayload, str]] = Field(None, description="Section placement")

    @model_validator(mode="after")
    def derive_code(self) -> "LineItemPayload":
        """Take a missing code from the leading digits of the section text."""
        if self.code is None or str(self.code).strip() == "":
            text = self.section.code if isinstance(self.section, SectionPayload) else (self.section or "")
            match = _LEADING_CODE.match(text)
            if match is None:
                raise ValueError(f"Line item '{self.description}' has no account code")
            self.code = match.group(1)
        if parse_code(self.code) is None:
            raise ValueError(f"Invalid account code: {self.code!r}")
        return self

    def to_domain(self) -> LineItem:
        if isinstance(self.section, SectionPayload):
            section: Union[str, SectionRef] = SectionRef(code=self.section.code, name=self.section.name)
        else:
            section = self.section or ""
        return LineItem(
            description=self.description,
            code=AccountCode(self.code),
            amount=self.amount,
            section=section,
            id=self.id or "",
        )


class SubtotalPayload(BaseModel):
    """Payload model for a stated subtotal."""

    description: str = Field(..., description="Subtotal label")
    amount: Decimal = Field(..., description="Stated amount")
    section: Optional[str] = Field(None, description="Section the subtotal sums")

    def to_domain(self) -> Subtotal:
        return Subtotal(description=self.description, amount=self.amount, section=self.section)


class CorrectionPayload(BaseModel):
    """Correction log entry with explicit severity."""

    message: str
    severity: Severity = Severity.INFO


class GeneratedStatementPayload(BaseModel):
    """Payload model for a whole generated statement."""

    model_config = ConfigDict(populate_by_name=True)

    line_items: List[LineItemPayload] = Field(default_factory=list, alias="lineItems")
    subtotals: List[SubtotalPayload] = Field(default_factory=list)
    total: Decimal = Field(Decimal("0"), description="Stated statement total")
    validations: List[str] = Field(default_factory=list)
    corrections: List[Union[CorrectionPayload, str]] = Field(default_factory=list)

    def to_domain(self) -> GeneratedStatement:
        """Convert to the domain model; plain-string corrections get a severity from their wording."""
        try:
            line_items = [item.to_domain() for item in self.line_items]
        except InvalidAccountCodeError as e:
            raise MalformedStatementError(e.message, details=e.details) from e

        corrections = []
        for entry in self.corrections:
            if isinstance(entry, str):
                corrections.append(Correction(message=entry, severity=infer_severity(entry)))
            else:
                corrections.append(Correction(message=entry.message, severity=entry.severity))

        return GeneratedStatement(
            line_items=line_items,
            subtotals=[subtotal.to_domain() for subtotal in self.subtotals],
            total=self.total,
            validations=list(self.validations),
            corrections=corrections,
        )


def parse_statement(data: Dict[str, Any]) -> GeneratedStatement:
    """
    Parse a generator payload into a GeneratedStatement.

    Raises:
        MalformedStatementError: If the payload does not describe a statement.
    """
    try:
        payload = GeneratedStatementPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedStatementError(
            "Malformed statement payload",
            details={"errors": [
                {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
                for err in e.errors()
            ]},
        ) from e
    return payload.to_domain()
