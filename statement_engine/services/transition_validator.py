"""
Transition validator for interactive re-classification.

Decides whether a line item may be dragged from one section to another. The
decision depends only on the item's account code, the two sections and the
statement type; no move history is kept.
"""
from typing import Dict, Optional, Union

import structlog

from statement_engine.models.account import AccountClassification, AccountType
from statement_engine.models.statement import LineItem, StatementType, TransitionResult
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts
from statement_engine.services.section_classifier import SectionClassifier

logger = structlog.get_logger(__name__)

ALLOWED = TransitionResult(is_valid=True)


class TransitionValidator:
    """
    State-machine gate for section moves.

    States are the section ids of the statement type plus "other". Moving an
    item to the section its code belongs to is always allowed.
    """

    def __init__(self, chart: Optional[ChartOfAccounts] = None):
        """
        Initialize validator.

        Args:
            chart: Chart of accounts; defaults to the configured profile.
        """
        self.chart = chart or get_chart_of_accounts()
        self.classifier = SectionClassifier(self.chart)

    def can_move(
        self,
        item: LineItem,
        from_section: str,
        to_section: str,
        statement_type: Union[str, StatementType],
    ) -> TransitionResult:
        """
        Validate moving an item between sections.

        Args:
            item: Item being dragged.
            from_section: Section the item leaves.
            to_section: Section the item is dropped on.
            statement_type: Statement being edited.

        Returns:
            TransitionResult; illegal moves carry the violated constraint.
        """
        statement_type = StatementType.coerce(statement_type)
        logger.debug(
            "Validating transition",
            item=item.id,
            from_section=from_section,
            to_section=to_section,
            statement_type=statement_type.value,
        )

        expected = self.classifier.classify(item.code, statement_type)
        if to_section == expected:
            return ALLOWED

        if not self.chart.is_known_section(statement_type, from_section):
            return TransitionResult(False, f"Invalid source section: {from_section}")
        if not self.chart.is_known_section(statement_type, to_section):
            return TransitionResult(False, f"Invalid target section: {to_section}")

        classification = self.chart.lookup(item.code)
        if classification is None:
            return ALLOWED

        if statement_type == StatementType.BALANCE_SHEET:
            return self._balance_sheet_transition(classification, to_section)
        if statement_type.is_income_like:
            return self._income_transition(classification, to_section, statement_type)
        # Cash flow activity classification is a judgment call; advisory only
        return ALLOWED

    def _balance_sheet_transition(
        self,
        classification: AccountClassification,
        to_section: str,
    ) -> TransitionResult:
        code = classification.code
        if classification.type in (AccountType.ASSET, AccountType.CONTRA_ASSET):
            if not to_section.startswith("assets_"):
                return TransitionResult(
                    False,
                    f"Asset accounts must remain in assets sections: account {code} cannot move to {to_section}",
                )
        elif classification.type == AccountType.LIABILITY:
            if not to_section.startswith("liabilities_"):
                return TransitionResult(
                    False,
                    f"Liability accounts must remain in liabilities sections: account {code} cannot move to {to_section}",
                )
        elif classification.type == AccountType.EQUITY:
            if to_section != "equity":
                return TransitionResult(
                    False,
                    f"Equity accounts must remain in equity section: account {code} cannot move to {to_section}",
                )
        return ALLOWED

    def _income_transition(
        self,
        classification: AccountClassification,
        to_section: str,
        statement_type: StatementType,
    ) -> TransitionResult:
        target = self.chart.section(statement_type, to_section)
        target_kind = target.kind if target else ""
        code = classification.code

        if classification.type == AccountType.REVENUE and to_section != "revenue":
            return TransitionResult(
                False,
                f"Revenue accounts must remain in the revenue section: account {code} cannot move to {to_section}",
            )
        if classification.type in (AccountType.EXPENSE, AccountType.MANUFACTURING) and target_kind != "expense":
            return TransitionResult(
                False,
                f"Expense accounts must be in cost of sales or expense sections, never {to_section}: account {code}",
            )
        return ALLOWED


_validator_instances: Dict[str, TransitionValidator] = {}


def get_transition_validator(chart: Optional[ChartOfAccounts] = None) -> TransitionValidator:
    """Get shared TransitionValidator for a chart profile."""
    chart = chart or get_chart_of_accounts()
    validator = _validator_instances.get(chart.profile)
    if validator is None or validator.chart is not chart:
        validator = TransitionValidator(chart)
        _validator_instances[chart.profile] = validator
    return validator


def can_move(
    item: LineItem,
    from_section: str,
    to_section: str,
    statement_type: Union[str, StatementType],
) -> TransitionResult:
    """Validate a section move under the configured chart profile."""
    return get_transition_validator().can_move(item, from_section, to_section, statement_type)
