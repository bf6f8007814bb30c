"""
Statement builder for interactive edits.

Places items into sections, applies drag-and-drop moves through the
transition gate and recomputes derived subtotals and the total.
"""
from decimal import Decimal
from typing import Optional, Union

import structlog

from statement_engine.config import get_settings
from statement_engine.models.statement import (
    GeneratedStatement,
    SectionRef,
    StatementType,
    Subtotal,
    TransitionResult,
)
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts
from statement_engine.services.section_classifier import SectionClassifier
from statement_engine.services.transition_validator import TransitionValidator

logger = structlog.get_logger(__name__)


class StatementBuilder:
    """Keeps a statement's derived fields consistent while it is edited."""

    def __init__(self, chart: Optional[ChartOfAccounts] = None, language: Optional[str] = None):
        self.chart = chart or get_chart_of_accounts()
        self.language = language or get_settings().display_language
        self.classifier = SectionClassifier(self.chart)
        self.transitions = TransitionValidator(self.chart)

    def _section_ref(self, statement_type: StatementType, section_id: str) -> SectionRef:
        return SectionRef(
            code=section_id,
            name=self.chart.section_title(statement_type, section_id, self.language),
        )

    def assign_sections(
        self,
        statement: GeneratedStatement,
        statement_type: Union[str, StatementType],
    ) -> GeneratedStatement:
        """
        Give every item a structured section.

        Items already placed in a known section keep it; the rest go to the
        section their code belongs to.
        """
        statement_type = StatementType.coerce(statement_type)
        for item in statement.line_items:
            section_id = self.classifier.resolve_section(item, statement_type)
            item.section = self._section_ref(statement_type, section_id)
        return self.recompute_subtotals(statement, statement_type)

    def recompute_subtotals(
        self,
        statement: GeneratedStatement,
        statement_type: Union[str, StatementType],
    ) -> GeneratedStatement:
        """Rebuild one subtotal per non-empty section and the statement total."""
        statement_type = StatementType.coerce(statement_type)
        groups = self.classifier.group_by_section(statement.line_items, statement_type)

        statement.subtotals = [
            Subtotal(
                description=f"Total {self.chart.section_title(statement_type, section_id, self.language)}",
                amount=sum((item.amount for item in items), Decimal("0")),
                section=section_id,
            )
            for section_id, items in groups.items()
            if items
        ]
        statement.total = statement.line_items_total
        return statement

    def apply_move(
        self,
        statement: GeneratedStatement,
        item_id: str,
        to_section: str,
        statement_type: Union[str, StatementType],
    ) -> TransitionResult:
        """
        Move an item to another section if the transition gate allows it.

        Rejected moves leave the statement untouched.
        """
        statement_type = StatementType.coerce(statement_type)
        item = statement.find_item(item_id)
        if item is None:
            return TransitionResult(False, f"Unknown line item: {item_id}")

        from_section = self.classifier.resolve_section(item, statement_type)
        result = self.transitions.can_move(item, from_section, to_section, statement_type)
        if not result.is_valid:
            logger.info(
                "Move rejected",
                item=item_id,
                from_section=from_section,
                to_section=to_section,
                reason=result.reason,
            )
            return result

        item.section = self._section_ref(statement_type, to_section)
        self.recompute_subtotals(statement, statement_type)
        logger.info("Item moved", item=item_id, from_section=from_section, to_section=to_section)
        return result
