# session_stats.py
"""
Derived statistics not present in the raw feed:

- per-car gap trend: least-squares slope over the last distinct
  gap-to-car-ahead samples, updated on every timing message of a race;
- session bests: fastest sectors, theoretical lap and top speed across all
  cars, recomputed on every render pass and cleared at session phase
  boundaries.
"""
import collections
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Deque, Dict, Iterable, Optional, Sequence

import config
from messages import SessionStatus, Timing

logger = logging.getLogger("F1Dash.SessionStats")


def duration_to_ms(value: timedelta) -> int:
    """Whole milliseconds in ``value``, truncated toward zero."""
    micros = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    whole = abs(micros) // 1000
    return whole if micros >= 0 else -whole


def _div_toward_zero(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


def compute_trend_slope(samples: Sequence[int]) -> int:
    """
    Ordinary least-squares slope of sample value against its 1-based index.

    slope = (n*sum(i*y) - sum(i)*sum(y)) / (n*sum(i^2) - sum(i)^2), in
    integer arithmetic. Fewer than two samples have no trend.
    """
    count = len(samples)
    if count < 2:
        return 0

    sum_index = sum_value = sum_product = sum_index_sq = 0
    for index, value in enumerate(samples, 1):
        sum_index += index
        sum_value += value
        sum_product += index * value
        sum_index_sq += index * index

    numerator = count * sum_product - sum_index * sum_value
    denominator = count * sum_index_sq - sum_index * sum_index
    return _div_toward_zero(numerator, denominator)


class GapTrend:
    """Ring of the most recent distinct gap-to-car-ahead samples (ms) for one car."""

    def __init__(self, size: int = config.GAP_TREND_SIZE):
        self.samples: Deque[int] = collections.deque(maxlen=size)
        self.slope: int = 0

    def add_sample(self, gap_ms: int) -> bool:
        """Append ``gap_ms`` unless it repeats the last sample. Returns True if stored."""
        if self.samples and self.samples[-1] == gap_ms:
            return False
        self.samples.append(gap_ms)
        self.slope = compute_trend_slope(self.samples)
        return True

    def __repr__(self):
        return f"GapTrend(samples={list(self.samples)}, slope={self.slope})"


def update_gap_trends(trends: Dict[int, GapTrend], cars: Iterable[Timing]) -> None:
    """Feed every car's current gap to the car ahead into its trend ring."""
    for car in cars:
        gap_ms = duration_to_ms(car.time_diff_to_position_ahead)
        trend = trends.get(car.number)
        if trend is None:
            trend = GapTrend()
            trends[car.number] = trend
        trend.add_sample(gap_ms)


@dataclass
class SessionBests:
    sector1: timedelta = timedelta(0)
    sector2: timedelta = timedelta(0)
    sector3: timedelta = timedelta(0)
    theoretical_lap: timedelta = timedelta(0)
    speed_trap: int = 0
    previous_status: SessionStatus = SessionStatus.INACTIVE

    @property
    def sectors(self):
        return [self.sector1, self.sector2, self.sector3]

    def reset(self) -> None:
        self.sector1 = timedelta(0)
        self.sector2 = timedelta(0)
        self.sector3 = timedelta(0)
        self.theoretical_lap = timedelta(0)
        self.speed_trap = 0

    def update(self, status: Optional[SessionStatus], cars: Iterable[Timing]) -> None:
        """
        One render pass: fold the current car data into the bests, then apply
        the phase rule. Bests read zero for the whole of an Inactive phase and
        for the pass on which the session (re)enters Started.
        """
        bests = self.sectors
        for car in cars:
            for index, split in enumerate(car.sectors[:3]):
                if split.time > timedelta(0) and (bests[index] == timedelta(0) or split.time < bests[index]):
                    bests[index] = split.time
            if car.speed_trap > self.speed_trap:
                self.speed_trap = car.speed_trap
        self.sector1, self.sector2, self.sector3 = bests

        if all(best > timedelta(0) for best in bests):
            self.theoretical_lap = self.sector1 + self.sector2 + self.sector3

        if status is None:
            status = SessionStatus.INACTIVE

        if status == SessionStatus.STARTED:
            if self.previous_status != SessionStatus.STARTED:
                logger.debug("Session started, clearing session bests.")
                self.reset()
        elif status == SessionStatus.INACTIVE:
            self.reset()
        self.previous_status = status
