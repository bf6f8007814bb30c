"""
Chart-of-accounts registry.

Loads a named NAS chart profile from YAML and provides lookup by account code,
range membership queries and the per-statement-type section tables.
"""
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import structlog
import yaml

from statement_engine.config import get_settings
from statement_engine.exceptions import (
    ChartConfigurationError,
    ChartProfileNotFoundError,
    InvalidAccountCodeError,
    UnsupportedStatementTypeError,
)
from statement_engine.models.account import (
    AccountClassification,
    AccountCode,
    AccountCodeRange,
    AccountType,
    LocalizedName,
    NormalBalance,
    is_in_range,
)
from statement_engine.models.rules import Rule
from statement_engine.models.statement import OTHER_SECTION, StatementType

logger = structlog.get_logger(__name__)

CHARTS_DIR = Path(__file__).parent.parent / "data" / "charts"


@dataclass(frozen=True)
class AccountGroup:
    """Classification template shared by every code in a range."""
    range: AccountCodeRange
    type: AccountType
    category: str
    normal_balance: NormalBalance
    name: LocalizedName


@dataclass(frozen=True)
class SectionDefinition:
    """A section of one statement type."""
    id: str
    title: LocalizedName
    kind: str  # asset, liability, equity, income, expense, activity
    aggregate: str
    ranges: Tuple[AccountCodeRange, ...]

    def contains(self, code: Union[str, int]) -> bool:
        return any(r.contains(code) for r in self.ranges)


@dataclass(frozen=True)
class StatementLayout:
    """Ordered sections and completeness requirements of a statement type."""
    statement_type: StatementType
    sections: Tuple[SectionDefinition, ...]
    required_sections: Tuple[str, ...]
    required_accounts: Tuple[AccountCode, ...]

    @property
    def section_ids(self) -> List[str]:
        return [s.id for s in self.sections]


class ChartOfAccounts:
    """
    Read-only registry for one chart-of-accounts profile.

    Account ranges map codes to {type, category, normal balance}; section
    tables map the same codes to statement sections differently for each
    statement type. Profiles are never merged.
    """

    def __init__(self, profile: str = "nas_standard", path: Optional[Path] = None):
        """
        Initialize registry.

        Args:
            profile: Profile name (file stem under data/charts).
            path: Explicit YAML path; overrides the profile lookup.
        """
        if path is None:
            path = CHARTS_DIR / f"{profile}.yaml"
            if not path.exists():
                raise ChartProfileNotFoundError(profile, self.available_profiles())

        self.profile = profile
        self.description = ""
        self.primary_lang = "ru"
        self.alt_lang = "en"
        self._groups: List[AccountGroup] = []
        self._accounts: Dict[AccountCode, LocalizedName] = {}
        self._sign_overrides: List[AccountCodeRange] = []
        self._layouts: Dict[StatementType, StatementLayout] = {}
        self._rules: List[Rule] = []

        self._load_chart(path)

    @staticmethod
    def available_profiles() -> List[str]:
        """Names of the profiles shipped with the engine."""
        return sorted(p.stem for p in CHARTS_DIR.glob("*.yaml"))

    def _load_chart(self, path: Path) -> None:
        """
        Load chart profile from YAML file.

        Args:
            path: Path to chart YAML file.
        """
        logger.info("Loading chart of accounts", path=str(path))

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        self.profile = data.get("profile", self.profile)
        self.description = data.get("description", "")
        languages = data.get("languages", {})
        self.primary_lang = languages.get("primary", self.primary_lang)
        self.alt_lang = languages.get("alt", self.alt_lang)

        try:
            for group_data in data.get("account_ranges", []):
                self._groups.append(self._parse_group(group_data))

            for code, names in (data.get("accounts") or {}).items():
                self._accounts[AccountCode(code)] = self._localized(names)

            self._sign_overrides = [
                AccountCodeRange.parse(text, target="sign_override")
                for text in data.get("sign_overrides") or []
            ]

            for type_key, layout_data in (data.get("statements") or {}).items():
                statement_type = StatementType.coerce(type_key)
                self._layouts[statement_type] = self._parse_layout(statement_type, layout_data)

            self._rules = [Rule.from_dict(rule) for rule in data.get("rules") or []]
        except (
            KeyError,
            TypeError,
            ValueError,
            InvalidAccountCodeError,
            UnsupportedStatementTypeError,
        ) as e:
            raise ChartConfigurationError(
                f"Malformed chart profile {path.name}: {e}",
                details={"path": str(path)},
            )

        self._groups.sort(key=lambda g: g.range.start)
        self._check_no_overlap([g.range for g in self._groups], "account ranges")
        for statement_type, layout in self._layouts.items():
            ranges = [r for section in layout.sections for r in section.ranges]
            self._check_no_overlap(ranges, f"{statement_type.value} sections")

        logger.info(
            "Chart of accounts loaded",
            profile=self.profile,
            account_groups=len(self._groups),
            accounts=len(self._accounts),
            statement_types=[t.value for t in self._layouts],
            rules=len(self._rules),
        )

    def _localized(self, names: Dict[str, str]) -> LocalizedName:
        return LocalizedName(
            primary=names.get("primary", ""),
            alt=names.get("alt", ""),
            primary_lang=self.primary_lang,
            alt_lang=self.alt_lang,
        )

    def _parse_group(self, data: Dict[str, Any]) -> AccountGroup:
        return AccountGroup(
            range=AccountCodeRange.parse(data["range"], target=data["type"]),
            type=AccountType(data["type"]),
            category=data.get("category", ""),
            normal_balance=NormalBalance(data["normal_balance"]),
            name=self._localized(data.get("name", {})),
        )

    def _parse_layout(self, statement_type: StatementType, data: Dict[str, Any]) -> StatementLayout:
        sections = []
        for section_data in data.get("sections", []):
            section_id = section_data["id"]
            sections.append(SectionDefinition(
                id=section_id,
                title=self._localized(section_data.get("title", {})),
                kind=section_data.get("kind", ""),
                aggregate=section_data.get("aggregate", section_id),
                ranges=tuple(
                    AccountCodeRange.parse(text, target=section_id)
                    for text in section_data.get("ranges", [])
                ),
            ))

        section_ids = {s.id for s in sections}
        required = tuple(data.get("required_sections", []))
        unknown = [s for s in required if s not in section_ids]
        if unknown:
            raise ChartConfigurationError(
                f"Required sections not defined for {statement_type.value}: {', '.join(unknown)}",
                details={"statement_type": statement_type.value, "unknown": unknown},
            )

        return StatementLayout(
            statement_type=statement_type,
            sections=tuple(sections),
            required_sections=required,
            required_accounts=tuple(AccountCode(c) for c in data.get("required_accounts", [])),
        )

    @staticmethod
    def _check_no_overlap(ranges: List[AccountCodeRange], scope: str) -> None:
        ordered = sorted(ranges, key=lambda r: (r.start, r.end))
        for previous, current in zip(ordered, ordered[1:]):
            if previous.overlaps(current):
                raise ChartConfigurationError(
                    f"Overlapping {scope}: {previous} ({previous.target}) and {current} ({current.target})",
                    details={"scope": scope, "ranges": [str(previous), str(current)]},
                )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def lookup(self, code: Union[str, int]) -> Optional[AccountClassification]:
        """
        Classify an account code.

        Args:
            code: Account code; padded to 4 digits.

        Returns:
            AccountClassification if the code falls in a known range,
            None otherwise (callers treat None as unclassified).
        """
        padded = AccountCode(code)
        group = self._group_for(padded)
        if group is None:
            return None

        specific_name = self._accounts.get(padded)
        return AccountClassification(
            code=padded,
            name=specific_name or group.name,
            type=group.type,
            category=group.category,
            normal_balance=group.normal_balance,
            group=str(group.range),
            is_specific=specific_name is not None,
        )

    def _group_for(self, code: AccountCode) -> Optional[AccountGroup]:
        for group in self._groups:
            if group.range.contains(code):
                return group
        return None

    def is_in_range(self, code: Union[str, int], code_range: AccountCodeRange) -> bool:
        """Check whether a code lies inside a range (zero-padded comparison)."""
        return is_in_range(code, code_range)

    def is_known_account(self, code: Union[str, int]) -> bool:
        """Check whether the code is a specific account listed in the chart."""
        return AccountCode(code) in self._accounts

    def account_name(self, code: Union[str, int], language: str = "en") -> str:
        """Localized account name, falling back to the code itself."""
        classification = self.lookup(code)
        if classification is None:
            return str(AccountCode(code))
        return classification.display_name(language) or str(classification.code)

    def has_sign_override(self, code: Union[str, int]) -> bool:
        """Check whether a liability/equity code may carry a negative balance."""
        return any(r.contains(code) for r in self._sign_overrides)

    @property
    def account_groups(self) -> List[AccountGroup]:
        return list(self._groups)

    # ------------------------------------------------------------------
    # Statement layouts
    # ------------------------------------------------------------------

    @property
    def statement_types(self) -> List[StatementType]:
        return list(self._layouts)

    def layout(self, statement_type: Union[str, StatementType]) -> StatementLayout:
        """Layout of a statement type; StatementType values and names accepted."""
        statement_type = StatementType.coerce(statement_type)
        layout = self._layouts.get(statement_type)
        if layout is None:
            raise ChartConfigurationError(
                f"Profile {self.profile} has no layout for {statement_type.value}",
                details={"profile": self.profile, "statement_type": statement_type.value},
            )
        return layout

    def ranges_for(self, statement_type: Union[str, StatementType]) -> List[Tuple[str, AccountCodeRange]]:
        """Ordered (section id, range) table of a statement type."""
        return [
            (section.id, code_range)
            for section in self.layout(statement_type).sections
            for code_range in section.ranges
        ]

    def sections_for(self, statement_type: Union[str, StatementType]) -> List[SectionDefinition]:
        return list(self.layout(statement_type).sections)

    def section(self, statement_type: Union[str, StatementType], section_id: str) -> Optional[SectionDefinition]:
        for section in self.layout(statement_type).sections:
            if section.id == section_id:
                return section
        return None

    def is_known_section(self, statement_type: Union[str, StatementType], section_id: str) -> bool:
        """Known sections of a statement type, plus the "other" sentinel."""
        return section_id == OTHER_SECTION or self.section(statement_type, section_id) is not None

    def section_title(
        self,
        statement_type: Union[str, StatementType],
        section_id: str,
        language: str = "en",
    ) -> str:
        """Display title of a section; the id itself when no title is configured."""
        section = self.section(statement_type, section_id)
        if section is None:
            return "Other" if section_id == OTHER_SECTION else section_id
        return section.title.get(language) or section_id

    def range_for_statement(self, statement_type: Union[str, StatementType]) -> AccountCodeRange:
        """Overall code span covered by a statement type's sections."""
        ranges = [r for _, r in self.ranges_for(statement_type)]
        if not ranges:
            raise ChartConfigurationError(
                f"Profile {self.profile} has no ranges for {StatementType.coerce(statement_type).value}",
            )
        return AccountCodeRange(
            start=min(r.start for r in ranges),
            end=max(r.end for r in ranges),
            target=StatementType.coerce(statement_type).value,
        )

    def rules_for(self, statement_type: Union[str, StatementType]) -> List[Rule]:
        statement_type = StatementType.coerce(statement_type)
        return [rule for rule in self._rules if rule.applies_to(statement_type)]


@lru_cache(maxsize=None)
def _load_chart(profile: str) -> ChartOfAccounts:
    return ChartOfAccounts(profile)


def get_chart_of_accounts(profile: Optional[str] = None) -> ChartOfAccounts:
    """Get cached ChartOfAccounts for a profile (default from settings)."""
    return _load_chart(profile or get_settings().chart_profile)
