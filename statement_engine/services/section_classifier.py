"""
Section classifier.

Maps an account code to the canonical section of a statement type using the
chart's ordered range table. Pure: the same (code, statement type) pair always
yields the same section.
"""
from typing import Dict, Iterable, List, Optional, Union

import structlog

from statement_engine.models.account import AccountCode
from statement_engine.models.statement import OTHER_SECTION, LineItem, StatementType
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts

logger = structlog.get_logger(__name__)


class SectionClassifier:
    """Classifies account codes and line items into statement sections."""

    def __init__(self, chart: Optional[ChartOfAccounts] = None):
        """
        Initialize classifier.

        Args:
            chart: Chart of accounts; defaults to the configured profile.
        """
        self.chart = chart or get_chart_of_accounts()

    def classify(self, code: Union[str, int], statement_type: Union[str, StatementType]) -> str:
        """
        Canonical section of an account code.

        First range (in table order) containing the padded code wins;
        codes outside every range land in "other".
        """
        padded = AccountCode(code)
        for section_id, code_range in self.chart.ranges_for(statement_type):
            if code_range.contains(padded):
                return section_id
        logger.debug(
            "Code outside section table",
            code=str(padded),
            statement_type=StatementType.coerce(statement_type).value,
        )
        return OTHER_SECTION

    def resolve_section(self, item: LineItem, statement_type: Union[str, StatementType]) -> str:
        """
        Section an item currently sits in.

        The item's own placement wins when it names a known section of the
        statement type (or "other"); otherwise the code decides.
        """
        placement = item.section_key
        if placement and self.chart.is_known_section(statement_type, placement):
            return placement
        return self.classify(item.code, statement_type)

    def group_by_section(
        self,
        items: Iterable[LineItem],
        statement_type: Union[str, StatementType],
    ) -> Dict[str, List[LineItem]]:
        """
        Group items by current section, in layout order.

        Every section of the layout gets a (possibly empty) list; "other" is
        added only when some item lands there.
        """
        groups: Dict[str, List[LineItem]] = {
            section.id: [] for section in self.chart.sections_for(statement_type)
        }
        for item in items:
            section_id = self.resolve_section(item, statement_type)
            groups.setdefault(section_id, []).append(item)
        return groups


_classifier_instances: Dict[str, SectionClassifier] = {}


def get_section_classifier(chart: Optional[ChartOfAccounts] = None) -> SectionClassifier:
    """Get shared SectionClassifier for a chart profile."""
    chart = chart or get_chart_of_accounts()
    if chart.profile not in _classifier_instances or _classifier_instances[chart.profile].chart is not chart:
        _classifier_instances[chart.profile] = SectionClassifier(chart)
    return _classifier_instances[chart.profile]


def classify(code: Union[str, int], statement_type: Union[str, StatementType]) -> str:
    """Canonical section of a code under the configured chart profile."""
    return get_section_classifier().classify(code, statement_type)
