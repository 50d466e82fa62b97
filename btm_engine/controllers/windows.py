"""Hour-of-day schedule windows and time-of-use period schedules."""

from collections.abc import Iterable, Sequence
from enum import Enum

from btm_engine.domain.models import TimeWindow


class TouPeriod(str, Enum):
    """Time-of-use tariff periods."""

    PEAK = "peak"
    STANDARD = "standard"
    OFF_PEAK = "off_peak"


def hour_in_window(hour: int, window: TimeWindow) -> bool:
    """Check whether an hour of day falls inside ``[start, end)``.

    Windows with ``start > end`` cross midnight, e.g. 22 -> 6 covers
    22, 23, 0, ..., 5.
    """
    if window.start <= window.end:
        return window.start <= hour < window.end
    return hour >= window.start or hour < window.end


def hour_in_windows(hour: int, windows: Iterable[TimeWindow]) -> bool:
    """Check whether any of the windows contains the hour."""
    return any(hour_in_window(hour, w) for w in windows)


def windows_from_hours(hours: Iterable[int]) -> tuple[TimeWindow, ...]:
    """Collapse a set of hours into contiguous windows.

    A run reaching midnight is joined with a run starting at hour 0 into a
    single wrapping window.
    """
    selected = sorted({h % 24 for h in hours})
    if not selected:
        return ()
    if len(selected) == 24:
        return (TimeWindow(start=0, end=24),)

    runs: list[list[int]] = []
    for hour in selected:
        if runs and hour == runs[-1][1]:
            runs[-1][1] = hour + 1
        else:
            runs.append([hour, hour + 1])

    if len(runs) > 1 and runs[0][0] == 0 and runs[-1][1] == 24:
        first = runs.pop(0)
        runs[-1][1] = first[1]

    return tuple(TimeWindow(start=start, end=end) for start, end in runs)


class TouSchedule:
    """Time-of-use period for each hour of the day."""

    def __init__(self, periods: Sequence[TouPeriod]) -> None:
        if len(periods) != 24:
            raise ValueError(f"TOU schedule needs 24 periods, got {len(periods)}")
        self.periods = tuple(periods)

    @classmethod
    def from_windows(
        cls,
        peak: Iterable[TimeWindow],
        standard: Iterable[TimeWindow],
    ) -> "TouSchedule":
        """Build a schedule where unlisted hours are off-peak."""
        peak = tuple(peak)
        standard = tuple(standard)
        periods = []
        for hour in range(24):
            if hour_in_windows(hour, peak):
                periods.append(TouPeriod.PEAK)
            elif hour_in_windows(hour, standard):
                periods.append(TouPeriod.STANDARD)
            else:
                periods.append(TouPeriod.OFF_PEAK)
        return cls(periods)

    def period_at(self, hour: int) -> TouPeriod:
        return self.periods[hour % 24]

    def hours_for(self, period: TouPeriod) -> list[int]:
        return [h for h, p in enumerate(self.periods) if p == period]

    def windows_for(self, period: TouPeriod) -> tuple[TimeWindow, ...]:
        """Windows covering every hour assigned to a period."""
        return windows_from_hours(self.hours_for(period))


# Low-season weekday schedule
DEFAULT_TOU_SCHEDULE = TouSchedule.from_windows(
    peak=[TimeWindow(start=7, end=10), TimeWindow(start=18, end=20)],
    standard=[
        TimeWindow(start=6, end=7),
        TimeWindow(start=10, end=18),
        TimeWindow(start=20, end=22),
    ],
)
