"""
Continuous statement monitor.

Keeps at most one statement per statement type under observation and
re-validates it on a fixed interval, appending newly found corrections and an
audit line to the statement itself.

Features:
- One shared asyncio polling task per monitor session
- Error isolation (a failing statement type doesn't stop the pass)
- Status derived from correction severities only
"""
import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

import structlog

from statement_engine.config import get_settings
from statement_engine.exceptions import UnsupportedStatementTypeError
from statement_engine.models.statement import (
    Correction,
    GeneratedStatement,
    Severity,
    StatementType,
    Violation,
    ViolationCategory,
)
from statement_engine.services.chart_of_accounts import ChartOfAccounts, get_chart_of_accounts
from statement_engine.services.section_classifier import SectionClassifier
from statement_engine.services.transition_validator import TransitionValidator
from statement_engine.services.validators.sign_validator import SignValidator
from statement_engine.services.validators.statement_validator import StatementValidator

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MonitorStatus(str, Enum):
    """Traffic-light status of a monitored statement."""
    RED = "red"
    AMBER = "amber"
    GREEN = "green"


@dataclass
class MonitorEntry:
    """A statement under observation."""

    statement: GeneratedStatement
    statement_type: StatementType
    last_checked_at: datetime
    baseline_sections: Dict[str, str] = field(default_factory=dict)
    passes: int = 0


class StatementMonitor:
    """
    Per-session monitor of generated statements.

    Usage:
        async with StatementMonitor() as monitor:
            monitor.start_monitoring(statement, "balance-sheet")
            ...
    """

    def __init__(
        self,
        chart: Optional[ChartOfAccounts] = None,
        interval: Optional[float] = None,
        tolerance: Optional[Decimal] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize monitor.

        Args:
            chart: Chart of accounts; defaults to the configured profile.
            interval: Seconds between passes over a statement.
            tolerance: Equality tolerance for statement arithmetic.
            clock: Source of the current time.
        """
        settings = get_settings()
        self.chart = chart or get_chart_of_accounts()
        self.interval = interval if interval is not None else settings.monitor_interval_seconds
        self._clock = clock

        self.classifier = SectionClassifier(self.chart)
        self.sign_validator = SignValidator(self.chart)
        self.statement_validator = StatementValidator(self.chart, tolerance)
        self.transition_validator = TransitionValidator(self.chart)

        self._entries: Dict[StatementType, MonitorEntry] = {}
        self._task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "StatementMonitor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def start_monitoring(
        self,
        statement: GeneratedStatement,
        statement_type: Union[str, StatementType],
    ) -> MonitorEntry:
        """
        Register a statement, replacing any statement of the same type.

        The current placement of every item becomes the baseline against which
        later moves are checked.
        """
        statement_type = StatementType.coerce(statement_type)
        replaced = statement_type in self._entries

        entry = MonitorEntry(
            statement=statement,
            statement_type=statement_type,
            last_checked_at=self._clock(),
            baseline_sections={
                item.id: self.classifier.resolve_section(item, statement_type)
                for item in statement.line_items
            },
        )
        self._entries[statement_type] = entry
        self._ensure_task()

        logger.info(
            "Monitoring started",
            statement_type=statement_type.value,
            items=len(statement.line_items),
            replaced=replaced,
        )
        return entry

    def stop_monitoring(self, statement_type: Union[str, StatementType]) -> None:
        """Stop observing a statement type. Unknown types are ignored."""
        statement_type = StatementType.coerce(statement_type)
        if self._entries.pop(statement_type, None) is not None:
            logger.info("Monitoring stopped", statement_type=statement_type.value)
        if not self._entries:
            self._cancel_task()

    async def close(self) -> None:
        """Drop every entry and wait for the polling task to finish."""
        self._entries.clear()
        task = self._task
        self._cancel_task()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _ensure_task(self) -> None:
        if self._task is not None and not self._task.done():
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; passes run on demand only")
            return
        self._task = loop.create_task(self._poll())

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _poll(self) -> None:
        while self._entries:
            await asyncio.sleep(self.interval)
            self.check_statements()

    def check_statements(self, now: Optional[datetime] = None) -> List[StatementType]:
        """
        Run one pass over every entry whose interval has elapsed.

        Args:
            now: Time of the pass; defaults to the monitor clock.

        Returns:
            Statement types that were checked.
        """
        now = now or self._clock()
        due = timedelta(seconds=self.interval)
        checked = []

        for statement_type, entry in list(self._entries.items()):
            if now - entry.last_checked_at < due:
                continue
            self._run_pass(entry, now)
            checked.append(statement_type)
        return checked

    def validate_now(self, statement_type: Union[str, StatementType]) -> Optional[MonitorEntry]:
        """Force a pass over one statement regardless of the interval."""
        statement_type = StatementType.coerce(statement_type)
        entry = self._entries.get(statement_type)
        if entry is not None:
            self._run_pass(entry, self._clock())
        return entry

    def _run_pass(self, entry: MonitorEntry, now: datetime) -> None:
        log = logger.bind(statement_type=entry.statement_type.value)
        statement = entry.statement

        try:
            violations = self._collect_violations(entry)
        except Exception as e:
            log.exception("Monitor pass failed", error=str(e))
            violations = [Violation(
                message=f"Statement could not be validated: {e}",
                severity=Severity.ERROR,
                category=ViolationCategory.MALFORMED,
            )]

        logged = {(c.message, c.severity) for c in statement.corrections}
        added = 0
        for violation in violations:
            candidates = [Correction.from_violation(violation, recorded_at=now)]
            if violation.suggestion:
                candidates.append(Correction(
                    message=violation.suggestion,
                    severity=Severity.INFO,
                    category=violation.category,
                    recorded_at=now,
                ))
            for correction in candidates:
                key = (correction.message, correction.severity)
                if key in logged:
                    continue
                logged.add(key)
                statement.corrections.append(correction)
                added += 1

        entry.passes += 1
        statement.validations.append(
            f"[{now.isoformat()}] pass {entry.passes}: "
            f"{len(violations)} issue(s), {added} new correction(s)"
        )
        entry.last_checked_at = now

        log.info("Monitor pass complete", issues=len(violations), new_corrections=added)

    def _collect_violations(self, entry: MonitorEntry) -> List[Violation]:
        statement_type = entry.statement_type
        statement = entry.statement
        violations: List[Violation] = []

        for item in statement.line_items:
            violations.extend(self.sign_validator.check(item))

        violations.extend(self.statement_validator.check(statement, statement_type))

        for item in statement.line_items:
            baseline = entry.baseline_sections.get(item.id)
            current = self.classifier.resolve_section(item, statement_type)
            if baseline is None or baseline == current:
                continue
            result = self.transition_validator.can_move(item, baseline, current, statement_type)
            if not result.is_valid:
                violations.append(Violation(
                    message=result.reason or f"Illegal move of {item.id}",
                    severity=Severity.ERROR,
                    category=ViolationCategory.TRANSITION,
                    code=str(item.code),
                ))
        return violations

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_status(self, statement_type: Union[str, StatementType]) -> MonitorStatus:
        """
        Traffic-light status from the correction log.

        Red when nothing is monitored (unknown types included) or any error was
        logged, amber when any warning was logged, green otherwise.
        """
        try:
            entry = self._entries.get(StatementType.coerce(statement_type))
        except UnsupportedStatementTypeError:
            return MonitorStatus.RED
        if entry is None:
            return MonitorStatus.RED

        worst = max((c.severity.rank for c in entry.statement.corrections), default=Severity.INFO.rank)
        if worst >= Severity.ERROR.rank:
            return MonitorStatus.RED
        if worst >= Severity.WARNING.rank:
            return MonitorStatus.AMBER
        return MonitorStatus.GREEN

    def get_monitored_statement(self, statement_type: Union[str, StatementType]) -> Optional[GeneratedStatement]:
        entry = self._entries.get(StatementType.coerce(statement_type))
        return entry.statement if entry else None

    def is_monitoring(self, statement_type: Union[str, StatementType]) -> bool:
        return StatementType.coerce(statement_type) in self._entries

    def active_types(self) -> List[StatementType]:
        return list(self._entries)

    @property
    def is_polling(self) -> bool:
        return self._task is not None and not self._task.done()
