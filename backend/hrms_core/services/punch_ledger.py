"""Interpretation of a day's raw punch list as working, break and elapsed time.

Punches are paired positionally after sorting: (p0, p1) and (p2, p3) are worked
intervals and an odd count means the employee is still clocked in. A
``PunchLedger`` is parsed once per fetch of the attendance record and can then be
evaluated against any ``now``, so a live view can tick between fetches without
going back to the store.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import TYPE_CHECKING

from hrms_core.models.enums import AttendanceStatus
from hrms_core.services.clock import punch_timezone

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

DEFAULT_MAX_SHIFT = timedelta(hours=16)
PRESENT_THRESHOLD = timedelta(hours=8)
HALF_DAY_THRESHOLD = timedelta(hours=4)

_ZERO = timedelta(0)


# ---------------------------------------------------------------------------
# Parsing and formatting
# ---------------------------------------------------------------------------


def parse_clock_times(raw: str | Sequence[str] | None) -> list[str]:
    """Normalise the stored punch list.

    The feed stores either a list of ``HH:MM`` strings or its JSON text form.
    Undecodable text yields an empty list.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw or "[]")
        except ValueError:
            logger.debug("Ignoring undecodable clock_times %r", raw)
            return []
        if not isinstance(decoded, list):
            return []
        raw = decoded
    return [str(value) for value in raw if value is not None]


def parse_time_of_day(value: str) -> time | None:
    """Parse ``H:MM`` / ``HH:MM`` / ``HH:MM:SS``. Returns None when malformed."""
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None
    try:
        return time(*numbers)
    except ValueError:
        return None


def format_duration(delta: timedelta) -> str:
    """Format as zero-padded ``HH:MM:SS``, truncating to the whole second.

    Negative durations are shown as zero.
    """
    total_seconds = max(0, math.floor(delta.total_seconds()))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def derive_status(recorded: str | None, working: timedelta) -> str | None:
    """Grade the day from working time unless the feed already set a status.

    Only an empty or ``Absent`` status is re-graded; below the half-day threshold
    the recorded value is kept as is.
    """
    if recorded and recorded.strip().lower() != AttendanceStatus.ABSENT.lower():
        return recorded
    if working >= PRESENT_THRESHOLD:
        return AttendanceStatus.PRESENT.value
    if working >= HALF_DAY_THRESHOLD:
        return AttendanceStatus.HALF_DAY.value
    return recorded or None


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LiveAttendance:
    """Evaluation of a punch ledger at one instant."""

    has_record: bool
    is_ongoing: bool
    punches: tuple[datetime, ...] = ()
    in_time: datetime | None = None
    out_time: datetime | None = None
    total_time: timedelta = _ZERO
    working_time: timedelta = _ZERO
    break_time: timedelta = _ZERO
    status: str | None = None

    @property
    def total_hours(self) -> str:
        return format_duration(self.total_time)

    @property
    def login_hours(self) -> str:
        return format_duration(self.working_time)

    @property
    def break_hours(self) -> str:
        return format_duration(self.break_time)


@dataclass(frozen=True)
class PunchLedger:
    """Sorted punch instants for one employee-day."""

    reference_date: date
    punches: tuple[datetime, ...]

    @classmethod
    def from_clock_times(
        cls,
        clock_times: str | Sequence[str] | None,
        reference_date: date,
        tz: timezone | None = None,
    ) -> PunchLedger:
        """Anchor each time of day on ``reference_date`` in the time-clock offset."""
        tz = tz or punch_timezone()
        instants: list[datetime] = []
        for value in parse_clock_times(clock_times):
            parsed = parse_time_of_day(value)
            if parsed is None:
                logger.debug("Skipping unparseable punch %r on %s", value, reference_date)
                continue
            instants.append(datetime.combine(reference_date, parsed, tzinfo=tz))
        return cls(reference_date=reference_date, punches=tuple(sorted(instants)))

    @property
    def is_empty(self) -> bool:
        return not self.punches

    @property
    def is_clocked_in(self) -> bool:
        """An odd punch count means the last interval has no punch-out yet."""
        return len(self.punches) % 2 == 1

    def paired_working_time(self) -> timedelta:
        """Sum of the closed (in, out) intervals."""
        total = _ZERO
        for start, end in zip(self.punches[0::2], self.punches[1::2], strict=False):
            total += end - start
        return total

    def is_ongoing(self, now: datetime, max_shift: timedelta = DEFAULT_MAX_SHIFT) -> bool:
        """Clocked in, or both first and last punch within the shift ceiling.

        The second condition also holds briefly after a final punch-out, which
        keeps the live view up until the day settles.
        """
        if self.is_empty:
            return False
        first, last = self.punches[0], self.punches[-1]
        return self.is_clocked_in or (now - last < max_shift and now - first < max_shift)

    def evaluate(
        self,
        now: datetime,
        *,
        status: str | None = None,
        max_shift: timedelta = DEFAULT_MAX_SHIFT,
    ) -> LiveAttendance:
        """Compute elapsed, working and break time as of ``now``."""
        if self.is_empty:
            return LiveAttendance(has_record=False, is_ongoing=False, status=status or None)

        first, last = self.punches[0], self.punches[-1]
        if now.tzinfo is None:
            now = now.replace(tzinfo=first.tzinfo)

        ongoing = self.is_ongoing(now, max_shift)
        working = self.paired_working_time()
        if self.is_clocked_in:
            working += now - last

        out_time = now if ongoing else last
        total = out_time - first
        breaks = max(_ZERO, total - working)

        return LiveAttendance(
            has_record=True,
            is_ongoing=ongoing,
            punches=self.punches,
            in_time=first,
            out_time=out_time,
            total_time=total,
            working_time=working,
            break_time=breaks,
            status=derive_status(status, working),
        )


def compute_live_attendance(
    clock_times: str | Sequence[str] | None,
    reference_date: date,
    now: datetime,
    *,
    status: str | None = None,
    max_shift: timedelta = DEFAULT_MAX_SHIFT,
    tz: timezone | None = None,
) -> LiveAttendance:
    """One-shot parse and evaluate."""
    ledger = PunchLedger.from_clock_times(clock_times, reference_date, tz)
    return ledger.evaluate(now, status=status, max_shift=max_shift)
