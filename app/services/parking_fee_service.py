"""
주차 요금 계산 도메인 서비스 (Engine Facade)

역할:
    - 입력 검증 후 Breakpoint Builder -> Segment Grouper -> Accrual Calculator -> Cap Optimizer 순으로 실행
    - 최종 요금(total_fee)과 세그먼트별 내역(FeeBreakdown) 반환

Rationale:
    클라이언트 테스트 스크립트와 DB 저장 프로시저에 흩어져 있던 요금 계산을
    이 순수 함수 하나로 통합합니다. HTTP API, CLI 스크립트는 모두 이 함수를 호출만 합니다.
    I/O 없음(로깅 제외), 입력 변경 없음, 같은 입력에는 항상 같은 결과.

실행: pytest tests/services/test_parking_fee_service.py -v
"""

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence, Union

from app.models.tariff import (
    CapApplication,
    FeeBreakdown,
    ParkingSession,
    RuleKind,
    SegmentCharge,
    TariffRule,
)
from app.services.breakpoint_builder import build_breakpoints, cap_windows
from app.services.calendar_service import CalendarResolver
from app.services.cap_optimizer import CapOptimizer, PathStep
from app.services.segment_service import AccrualCalculator, resolve_intervals, segment_charge
from app.validate.tariff_validator import validate_fee_request

logger = logging.getLogger(__name__)

RawRule = Union[TariffRule, Mapping[str, Any]]


def compute_fee(
    rules: Sequence[RawRule],
    session_start: Union[str, datetime],
    duration_minutes: int,
    *,
    calendar: Optional[CalendarResolver] = None,
) -> FeeBreakdown:
    """
    Compute the minimum legally-correct fee for a parking interval.

    Parameters:
        rules: Tariff rules, either parsed ``TariffRule`` objects or raw rate dicts
            (``type``, ``minutes``, ``price``, ``time_range``, ``day_type``, ``apply_after``).
        session_start: Parking start, an aware datetime or ISO-8601 string with timezone.
        duration_minutes: Parking duration in minutes.
        calendar: Resolver for local time and day types; defaults to the configured
            tariff timezone and holiday calendar.

    Returns:
        FeeBreakdown: Total fee plus the segments and caps that produced it.

    Raises:
        InvalidTariffInputError: If any input fails validation.
        AmbiguousScopeError: If two equally specific rules of one kind overlap.
    """
    parsed, session = validate_fee_request(rules, session_start, duration_minutes)
    return _compute(parsed, session, calendar or CalendarResolver())


def _compute(rules: list[TariffRule], session: ParkingSession, calendar: CalendarResolver) -> FeeBreakdown:
    # 1. breakpoint 및 최대 요금 창
    windows = cap_windows(rules, session, calendar)
    breakpoints = build_breakpoints(rules, session, calendar, windows)

    # 2. elementary interval별 활성 규칙 (AmbiguousScopeError는 여기서 발생)
    intervals = resolve_intervals(rules, breakpoints, session, calendar, windows)
    accrual = AccrualCalculator(intervals)

    # 3. 최대 요금 조합 최적화
    total, path = CapOptimizer(breakpoints, accrual, windows).solve()

    segments, caps = _itemize(path, breakpoints, accrual)
    raw_fee = accrual.raw_total()

    # 4. 무료 주차 시간(conditional_free) 이내면 0엔
    grace = _grace_period(rules, session.duration_minutes)
    if grace is not None:
        logger.debug({"message": "grace period applied", "graceMinutes": grace.unit_minutes})
        total = 0

    logger.debug({
        "message": "parking fee computed",
        "durationMinutes": session.duration_minutes,
        "segments": len(segments),
        "capsApplied": len(caps),
        "rawFee": raw_fee,
        "totalFee": total,
    })
    return FeeBreakdown(
        total_fee=total,
        raw_fee=raw_fee,
        segments=segments,
        caps_applied=caps,
        unrated_segments=accrual.log_unrated(),
        grace_period_applied=grace is not None,
    )


def _grace_period(rules: Sequence[TariffRule], duration_minutes: int) -> Optional[TariffRule]:
    """총 주차 시간이 conditional_free 규칙의 minutes 이하이면 해당 규칙 반환"""
    for rule in rules:
        if rule.kind is RuleKind.CONDITIONAL_FREE and duration_minutes <= rule.unit_minutes:
            return rule
    return None


def _itemize(
    path: Sequence[PathStep],
    breakpoints: Sequence[int],
    accrual: AccrualCalculator,
) -> tuple[list[SegmentCharge], list[CapApplication]]:
    segments: list[SegmentCharge] = []
    caps: list[CapApplication] = []

    for step in path:
        span = accrual.span(step.start_index, step.end_index)
        capped = step.window is not None
        for segment in span:
            segments.append(SegmentCharge(
                start_offset=segment.start_offset,
                end_offset=segment.end_offset,
                rule=segment.rule,
                charge=segment_charge(segment),
                capped=capped,
                no_applicable_rate=segment.rule is None and not segment.cap_only,
            ))
        if capped:
            payable = not any(segment.cap_only for segment in span)
            caps.append(CapApplication(
                rule=step.window.rule,
                start_offset=breakpoints[step.start_index],
                end_offset=breakpoints[step.end_index],
                price=step.window.rule.unit_price,
                uncapped_charge=sum(segment_charge(s) for s in span) if payable else None,
            ))

    return segments, caps


class ParkingFeeService:
    """주차 요금 계산 도메인 서비스 (HTTP/CLI 진입점용 래퍼)"""

    def __init__(self, calendar: Optional[CalendarResolver] = None):
        self.calendar = calendar or CalendarResolver()

    def calculate(
        self,
        rates: Sequence[RawRule],
        parking_start: Union[str, datetime],
        duration_minutes: int,
    ) -> FeeBreakdown:
        """
        Calculate the fee for raw ``rates`` (the ``parking_spots.rates`` JSON shape).

        Returns:
            FeeBreakdown: See ``compute_fee``.
        """
        return compute_fee(rates, parking_start, duration_minutes, calendar=self.calendar)

    def calculate_total(
        self,
        rates: Sequence[RawRule],
        parking_start: Union[str, datetime],
        duration_minutes: int,
    ) -> int:
        return self.calculate(rates, parking_start, duration_minutes).total_fee
