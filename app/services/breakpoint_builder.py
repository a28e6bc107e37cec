"""
Breakpoint Builder

역할:
    - 적용 규칙 집합이 바뀔 수 있는 모든 시점(세션 시작 기준 분 오프셋)을 수집
    - 최대 요금(max) 규칙의 창(window) 인스턴스를 세션 구간으로 잘라 생성

Rationale:
    인접한 두 breakpoint 사이(elementary interval)에서는 활성 규칙이 바뀌지 않도록
    시간대 경계, 누진 임계값, 최대 요금 창 경계, (요일 규칙이 있으면) 자정을 모두 포함합니다.
    창 인스턴스는 세션 경계에서 잘린 채로도 유효하며(비례 배분 없음) 전체 가격이 상한입니다.
"""

from datetime import date
from typing import Iterator, Sequence

from pydantic import BaseModel, ConfigDict

from app.models.tariff import MINUTES_PER_DAY, ParkingSession, RuleKind, TariffRule
from app.services.calendar_service import CalendarResolver, SessionClock


class CapWindow(BaseModel):
    """최대 요금 규칙의 창 인스턴스 [start, end) (세션 오프셋, 잘린 상태)"""
    model_config = ConfigDict(frozen=True)

    rule: TariffRule
    start: int
    end: int


def _clip(start: int, end: int, duration: int) -> tuple[int, int] | None:
    start, end = max(start, 0), min(end, duration)
    if start >= end:
        return None
    return start, end


def _unscoped_windows(rule: TariffRule, duration: int) -> Iterator[CapWindow]:
    # 세션 시작 기준으로 unit_minutes마다 반복
    for start in range(0, duration, rule.unit_minutes):
        yield CapWindow(rule=rule, start=start, end=min(start + rule.unit_minutes, duration))


def _calendar_window(rule: TariffRule, day: date, clock: SessionClock) -> tuple[int, int]:
    time_range = rule.scope.time_range
    if time_range is None:
        return clock.offset_at(day, 0), clock.offset_at(day, MINUTES_PER_DAY)
    start = clock.offset_at(day, time_range.start_minute)
    end = clock.offset_at(day, time_range.start_minute + time_range.length)
    return start, end


def _scoped_windows(rule: TariffRule, clock: SessionClock) -> Iterator[CapWindow]:
    day_types = rule.scope.day_types
    for day in clock.local_days():
        # 자정을 넘는 창은 시작한 날의 요일 구분으로 판정
        if day_types and clock.calendar.day_type(day) not in day_types:
            continue
        window_start, window_end = _calendar_window(rule, day, clock)
        # 창이 unit_minutes보다 길면 창 시작 기준으로 다시 나눔
        step = min(rule.unit_minutes, window_end - window_start)
        for start in range(window_start, window_end, step):
            clipped = _clip(start, min(start + step, window_end), clock.duration)
            if clipped:
                yield CapWindow(rule=rule, start=clipped[0], end=clipped[1])


def cap_windows(
    rules: Sequence[TariffRule],
    session: ParkingSession,
    calendar: CalendarResolver,
) -> list[CapWindow]:
    """All cap window instances overlapping the session, clipped to it."""
    clock = SessionClock(session.start, session.duration_minutes, calendar)
    windows: list[CapWindow] = []
    for rule in dict.fromkeys(r for r in rules if r.kind is RuleKind.MAX):
        if rule.scope.is_unscoped:
            windows.extend(_unscoped_windows(rule, session.duration_minutes))
        else:
            windows.extend(_scoped_windows(rule, clock))
    return windows


def build_breakpoints(
    rules: Sequence[TariffRule],
    session: ParkingSession,
    calendar: CalendarResolver,
    windows: Sequence[CapWindow] = (),
) -> list[int]:
    """
    Sorted, de-duplicated offsets in ``[0, duration]`` at which the set of
    applicable rules can change.
    """
    duration = session.duration_minutes
    clock = SessionClock(session.start, duration, calendar)
    days = clock.local_days()
    points = {0, duration}

    for rule in rules:
        if rule.scope.time_range is not None:
            time_range = rule.scope.time_range
            for day in days:
                points.add(clock.offset_at(day, time_range.start_minute))
                points.add(clock.offset_at(day, time_range.end_minute))
        if rule.kind is RuleKind.PROGRESSIVE:
            points.add(rule.apply_after)

    if any(rule.scope.day_types for rule in rules):
        for day in days:
            points.add(clock.offset_at(day, 0))

    for window in windows:
        points.update((window.start, window.end))

    return sorted(p for p in points if 0 <= p <= duration)
