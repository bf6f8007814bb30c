"""
Localized account-name helpers.

Contra-account keyword detection works on item descriptions in English,
Russian and Uzbek. It is a fallback for codes the chart does not classify.
"""
from typing import Iterable, Optional

CONTRA_KEYWORDS = {
    "en": ("depreciation", "amortization", "amortisation", "allowance", "impairment", "reserve", "provision for"),
    "ru": ("износ", "амортизация", "резерв", "обесценение"),
    "uz": ("amortizatsiya", "eskirish", "rezerv", "qadrsizlanish"),
}


def is_contra_description(text: str, languages: Optional[Iterable[str]] = None) -> bool:
    """
    Check whether a description reads like a contra account.

    Args:
        text: Line item description or account name.
        languages: Restrict to these language keyword lists (default: all).
    """
    if not text:
        return False
    text_lower = text.lower()
    selected = languages or CONTRA_KEYWORDS.keys()
    return any(
        keyword in text_lower
        for language in selected
        for keyword in CONTRA_KEYWORDS.get(language, ())
    )
