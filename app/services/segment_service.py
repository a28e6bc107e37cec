"""
Segment Grouper / Accrual Calculator

역할:
    - breakpoint 사이 구간마다 활성 과금 규칙(base/progressive) 결정
    - 같은 규칙이 연속되는 구간을 하나의 과금 세그먼트로 병합
    - 세그먼트 요금 = ceil(세그먼트 길이 / unit_minutes) * unit_price

Rationale:
    올림(ceil)은 반드시 같은 규칙이 이어지는 전체 구간에 대해 한 번만 적용해야 합니다.
    예) 야간 900분(60분 100엔) -> ceil(900/60) * 100 = 1500엔.
    자정 등 breakpoint마다 따로 올림하면 요금이 과다 청구됩니다.
"""

import logging
import math
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict

from app.models.tariff import ParkingSession, TariffRule
from app.services.breakpoint_builder import CapWindow
from app.services.calendar_service import CalendarResolver, SessionClock
from app.services.scope_matcher import select_metering_rule

logger = logging.getLogger(__name__)


class Segment(BaseModel):
    """[start_offset, end_offset) 구간과 그 구간의 활성 과금 규칙"""
    model_config = ConfigDict(frozen=True)

    start_offset: int
    end_offset: int
    rule: Optional[TariffRule]
    # 정액제(max만 있는 주차장)에서 최대 요금 창으로만 지불 가능한 구간
    cap_only: bool = False

    @property
    def length(self) -> int:
        return self.end_offset - self.start_offset


def resolve_intervals(
    rules: Sequence[TariffRule],
    breakpoints: Sequence[int],
    session: ParkingSession,
    calendar: CalendarResolver,
    windows: Sequence[CapWindow] = (),
) -> list[Segment]:
    """
    Resolve the active metering rule of every elementary interval.

    The rule is judged at the interval midpoint; progressive eligibility uses
    the elapsed time at the interval start. When the tariff has no metering
    rule at all (a flat-rate lot), intervals inside a cap window are marked
    ``cap_only``.
    """
    clock = SessionClock(session.start, session.duration_minutes, calendar)
    flat_rate = not any(rule.is_metering for rule in rules)
    intervals: list[Segment] = []
    for start, end in zip(breakpoints, breakpoints[1:]):
        rule = select_metering_rule(rules, clock.instant((start + end) / 2), start, calendar)
        cap_only = flat_rate and any(w.start <= start and end <= w.end for w in windows)
        intervals.append(Segment(start_offset=start, end_offset=end, rule=rule, cap_only=cap_only))
    return intervals


def group_segments(intervals: Sequence[Segment]) -> list[Segment]:
    """Merge consecutive intervals with an identical active rule."""
    grouped: list[Segment] = []
    for interval in intervals:
        last = grouped[-1] if grouped else None
        if last and last.rule == interval.rule and last.cap_only == interval.cap_only:
            grouped[-1] = last.model_copy(update={"end_offset": interval.end_offset})
        else:
            grouped.append(interval)
    return grouped


def segment_charge(segment: Segment) -> int:
    if segment.rule is None:
        return 0
    units = math.ceil(segment.length / segment.rule.unit_minutes)
    return units * segment.rule.unit_price


class AccrualCalculator:
    """
    elementary interval 목록 위에서 임의 구간 [b_i, b_j)의 미적용(uncapped) 요금 계산.

    span_charges(i)는 i에서 시작하는 구간을 한 칸씩 늘려가며 요금을 누적하므로
    DP가 필요로 할 때만 계산됩니다 (지연 계산).
    """

    def __init__(self, intervals: Sequence[Segment]):
        self.intervals = list(intervals)

    def span(self, i: int, j: int) -> list[Segment]:
        return group_segments(self.intervals[i:j])

    def span_charges(self, i: int):
        """
        Yield ``(j, charge)`` for every span ``[b_i, b_j)`` with ``j > i``.

        Stops at the first cap-only interval, which accrual cannot pay for.
        """
        closed = 0
        current: Optional[Segment] = None
        for j in range(i + 1, len(self.intervals) + 1):
            interval = self.intervals[j - 1]
            if interval.cap_only:
                return
            if current is not None and current.rule == interval.rule:
                current = current.model_copy(update={"end_offset": interval.end_offset})
            else:
                if current is not None:
                    closed += segment_charge(current)
                current = interval
            yield j, closed + segment_charge(current)

    def raw_total(self) -> Optional[int]:
        """Uncapped total of the whole session, ``None`` if accrual cannot cover it."""
        total = None
        for j, charge in self.span_charges(0):
            if j == len(self.intervals):
                total = charge
        return total

    def log_unrated(self) -> int:
        unrated = [s for s in group_segments(self.intervals) if s.rule is None and not s.cap_only]
        for segment in unrated:
            logger.warning({
                "message": "no applicable rate for segment; charged as 0",
                "startOffset": segment.start_offset,
                "endOffset": segment.end_offset,
            })
        return len(unrated)
