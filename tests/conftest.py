"""
Pytest configuration and fixtures.
"""
from decimal import Decimal

import pytest

from statement_engine.config import get_settings
from statement_engine.models.statement import GeneratedStatement, LineItem, Subtotal
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Re-read settings for every test so env overrides don't leak."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def standard_chart() -> ChartOfAccounts:
    """NAS chart with revenue and expenses in 4000-5499."""
    return get_chart_of_accounts("nas_standard")


@pytest.fixture
def extended_chart() -> ChartOfAccounts:
    """NAS chart with revenue, expenses and manufacturing in 7000-9499."""
    return get_chart_of_accounts("nas_extended")


@pytest.fixture
def balance_sheet() -> GeneratedStatement:
    """Balanced balance sheet: net assets 1700 = liabilities 800 + equity 900."""
    return GeneratedStatement(
        line_items=[
            LineItem("Cash on hand", "0100", Decimal("1000")),
            LineItem("Trade receivables", "0300", Decimal("300")),
            LineItem("Fixed assets", "0900", Decimal("500")),
            LineItem("Accumulated depreciation", "1400", Decimal("-100")),
            LineItem("Trade payables", "2000", Decimal("800")),
            LineItem("Share capital", "3000", Decimal("900")),
        ],
        total=Decimal("3400"),
    )


@pytest.fixture
def income_statement() -> GeneratedStatement:
    """Income statement with net income 150."""
    return GeneratedStatement(
        line_items=[
            LineItem("Sales revenue", "4000", Decimal("1000")),
            LineItem("Cost of sales", "5000", Decimal("-600")),
            LineItem("Operating expenses", "5100", Decimal("-200")),
            LineItem("Income tax expense", "5300", Decimal("-50")),
        ],
        subtotals=[Subtotal("Total Revenue", Decimal("1000"))],
        total=Decimal("150"),
    )


@pytest.fixture
def cash_flow_statement() -> GeneratedStatement:
    """Cash flow statement with net operating cash flow 60."""
    return GeneratedStatement(
        line_items=[
            LineItem("Cash from customers", 4000, Decimal("100"), section="operating"),
            LineItem("Cash paid to suppliers", 5000, Decimal("-40"), section="operating"),
        ],
        total=Decimal("60"),
    )
