"""
Chart-of-accounts data structures.

AccountCode, AccountCodeRange and AccountClassification are immutable and
shared read-only by every validator.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from statement_engine.exceptions import InvalidAccountCodeError

_CODE_PATTERN = re.compile(r"^\d{1,4}$")


class AccountCode(str):
    """
    A 4-character zero-padded numeric account code.

    Subclasses str so that lexicographic comparison, hashing and YAML keys
    behave exactly like the padded string.
    """

    __slots__ = ()

    def __new__(cls, raw: Union[str, int, "AccountCode"]) -> "AccountCode":
        if isinstance(raw, AccountCode):
            return raw
        if isinstance(raw, bool) or not isinstance(raw, (str, int)):
            raise InvalidAccountCodeError(raw)
        text = str(raw).strip()
        if not _CODE_PATTERN.match(text):
            raise InvalidAccountCodeError(raw)
        return super().__new__(cls, text.zfill(4))

    @classmethod
    def parse(cls, raw: Any) -> "AccountCode":
        """Parse raw ledger data into an AccountCode."""
        return cls(raw)

    @classmethod
    def is_valid(cls, raw: Any) -> bool:
        """Check whether raw ledger data is a usable account code."""
        try:
            cls(raw)
        except InvalidAccountCodeError:
            return False
        return True

    def __repr__(self) -> str:
        return f"AccountCode('{str(self)}')"


class AccountType(str, Enum):
    """Top-level account types."""
    ASSET = "asset"
    CONTRA_ASSET = "contra_asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"
    MANUFACTURING = "manufacturing"


class NormalBalance(str, Enum):
    """Side on which an account's balance normally sits."""
    DEBIT = "debit"
    CREDIT = "credit"


@dataclass(frozen=True)
class LocalizedName:
    """Account or section name in the profile's two languages."""
    primary: str
    alt: str
    primary_lang: str = "ru"
    alt_lang: str = "en"

    def get(self, language: str) -> str:
        """Name in the requested language, falling back to the other one."""
        if language == self.primary_lang:
            return self.primary or self.alt
        return self.alt or self.primary


@dataclass(frozen=True)
class AccountCodeRange:
    """Inclusive range of account codes mapped to a target key."""
    start: AccountCode
    end: AccountCode
    target: str = ""

    @classmethod
    def parse(cls, text: str, target: str = "") -> "AccountCodeRange":
        """
        Parse range text such as "0100-0199" or "3400".

        Args:
            text: Range text; a single code is a one-code range.
            target: Account group or section id the range maps to.
        """
        parts = [p.strip() for p in str(text).split("-")]
        if len(parts) == 1:
            code = AccountCode(parts[0])
            return cls(start=code, end=code, target=target)
        if len(parts) != 2:
            raise InvalidAccountCodeError(text)
        start, end = AccountCode(parts[0]), AccountCode(parts[1])
        if start > end:
            start, end = end, start
        return cls(start=start, end=end, target=target)

    def contains(self, code: Union[str, int]) -> bool:
        """Zero-padded string comparison against the range bounds."""
        padded = AccountCode(code)
        return self.start <= padded <= self.end

    def overlaps(self, other: "AccountCodeRange") -> bool:
        return self.start <= other.end and other.start <= self.end

    def __str__(self) -> str:
        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class AccountClassification:
    """Classification of one account code in the chart of accounts."""
    code: AccountCode
    name: LocalizedName
    type: AccountType
    category: str
    normal_balance: NormalBalance
    group: str = ""
    is_specific: bool = False

    @property
    def is_contra(self) -> bool:
        return self.type == AccountType.CONTRA_ASSET

    def display_name(self, language: str = "en") -> str:
        return self.name.get(language)

    def label(self, language: str = "en") -> str:
        """Code and name, as used in violation messages."""
        name = self.display_name(language)
        return f"{self.code} {name}" if name else str(self.code)


def is_in_range(code: Union[str, int], code_range: AccountCodeRange) -> bool:
    """Check range membership using zero-padded string comparison."""
    return code_range.contains(code)


def parse_code(raw: Any) -> Optional[AccountCode]:
    """Parse an account code, returning None for unusable input."""
    try:
        return AccountCode(raw)
    except InvalidAccountCodeError:
        return None
