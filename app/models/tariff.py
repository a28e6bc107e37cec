"""
주차 요금표(Tariff) 도메인 모델

역할:
    - parking_spots.rates(JSONB) 원본 규칙을 TariffRule로 파싱
    - 요금 엔진의 입력(ParkingSession)과 출력(FeeBreakdown) 정의

Rationale:
    엔진 입력 모델은 모두 frozen으로 두어, 동시 요청 간에 같은 규칙 리스트를
    공유해도 변경될 수 없도록 합니다. 규칙 동일성(identity)은 필드 값 기준입니다.

Examples:
    기본 요금:    {"type": "base", "minutes": 30, "price": 200}
    야간 기본:    {"type": "base", "minutes": 60, "price": 100, "time_range": "18:00～9:00"}
    누진 요금:    {"type": "progressive", "minutes": 30, "price": 250, "apply_after": 30}
    야간 최대:    {"type": "max", "minutes": 1440, "price": 300, "time_range": "18:00～9:00"}
    평일 주간:    {"type": "max", "minutes": 1440, "price": 400, "time_range": "9:00～18:00", "day_type": "月～金"}
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MINUTES_PER_DAY = 1440

# "18:00～9:00", "8:00〜20:00", "9:00~18:00", "9:00-18:00"
_TIME_RANGE_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*[～〜~\-]\s*(\d{1,2}):(\d{2})\s*$")


class RuleKind(str, Enum):
    BASE = "base"
    PROGRESSIVE = "progressive"
    MAX = "max"
    CONDITIONAL_FREE = "conditional_free"


METERING_KINDS = frozenset({RuleKind.BASE, RuleKind.PROGRESSIVE})


class DayType(str, Enum):
    """달력 날짜 분류 (Calendar Resolver 출력)"""
    WEEKDAY = "weekday"
    SATURDAY = "saturday"
    SUNDAY_OR_HOLIDAY = "sunday_or_holiday"


WEEKEND_OR_HOLIDAY = frozenset({DayType.SATURDAY, DayType.SUNDAY_OR_HOLIDAY})

# day_type 라벨 -> DayType 집합 (None = 전일 적용)
DAY_TYPE_LABELS: Dict[str, Optional[FrozenSet[DayType]]] = {
    "月～金": frozenset({DayType.WEEKDAY}),
    "月〜金": frozenset({DayType.WEEKDAY}),
    "平日": frozenset({DayType.WEEKDAY}),
    "土日祝": WEEKEND_OR_HOLIDAY,
    "土日": WEEKEND_OR_HOLIDAY,
    "休日": WEEKEND_OR_HOLIDAY,
    "土": frozenset({DayType.SATURDAY}),
    "日祝": frozenset({DayType.SUNDAY_OR_HOLIDAY}),
    "日": frozenset({DayType.SUNDAY_OR_HOLIDAY}),
    "全日": None,
}


def parse_day_type(label: str) -> Optional[FrozenSet[DayType]]:
    """
    Map a raw ``day_type`` label to the set of day types it covers.

    Raises:
        ValueError: If the label is not a known day type.
    """
    if not isinstance(label, str):
        raise ValueError(f"day_type must be a string: {label!r}")
    key = label.strip()
    if key not in DAY_TYPE_LABELS:
        raise ValueError(f"unknown day_type: {label!r}")
    return DAY_TYPE_LABELS[key]


class TimeRange(BaseModel):
    """하루 중 분(minute) 단위 시간대 [start, end)

    Rationale:
        end < start 이면 자정을 넘는 시간대(예: 18:00～9:00)입니다.
        start == end 는 하루 전체로 취급합니다.
    """
    model_config = ConfigDict(frozen=True)

    start_minute: int = Field(..., ge=0, lt=MINUTES_PER_DAY)
    end_minute: int = Field(..., ge=0, le=MINUTES_PER_DAY)

    @classmethod
    def parse(cls, raw: str) -> "TimeRange":
        """
        Parse an ``"HH:MM～HH:MM"`` string. ``24:00`` is accepted as an end time.

        Raises:
            ValueError: If the string is malformed or a time is out of range.
        """
        if not isinstance(raw, str):
            raise ValueError(f"time_range must be a string: {raw!r}")
        match = _TIME_RANGE_RE.match(raw)
        if not match:
            raise ValueError(f"malformed time_range: {raw!r}")
        sh, sm, eh, em = (int(g) for g in match.groups())
        if sm >= 60 or em >= 60 or sh > 23 or eh > 24 or (eh == 24 and em != 0):
            raise ValueError(f"time out of range in time_range: {raw!r}")
        return cls(start_minute=sh * 60 + sm, end_minute=eh * 60 + em)

    @property
    def crosses_midnight(self) -> bool:
        return self.end_minute < self.start_minute

    @property
    def length(self) -> int:
        if self.end_minute == self.start_minute:
            return MINUTES_PER_DAY
        if self.end_minute > self.start_minute:
            return self.end_minute - self.start_minute
        return self.end_minute + MINUTES_PER_DAY - self.start_minute

    def contains(self, minute_of_day: float) -> bool:
        if self.start_minute == self.end_minute:
            return True
        if self.crosses_midnight:
            return minute_of_day >= self.start_minute or minute_of_day < self.end_minute
        return self.start_minute <= minute_of_day < self.end_minute

    def label(self) -> str:
        return (
            f"{self.start_minute // 60}:{self.start_minute % 60:02d}～"
            f"{self.end_minute // 60}:{self.end_minute % 60:02d}"
        )


class Scope(BaseModel):
    """규칙 적용 범위. 시간대/요일 모두 없으면 무조건 적용."""
    model_config = ConfigDict(frozen=True)

    time_range: Optional[TimeRange] = None
    day_types: Optional[FrozenSet[DayType]] = None

    @property
    def is_unscoped(self) -> bool:
        return self.time_range is None and not self.day_types

    @property
    def specificity(self) -> int:
        # 시간대 지정이 요일 지정보다 구체적
        return (2 if self.time_range is not None else 0) + (1 if self.day_types else 0)


def _pop_first(data: Dict[str, Any], *keys: str) -> Any:
    """snake_case 키를 우선으로, 처음 존재하는 키의 값을 꺼냄"""
    found = None
    for key in keys:
        if key in data:
            value = data.pop(key)
            if found is None:
                found = value
    return found


class TariffRule(BaseModel):
    """요금표 내 개별 규칙

    Rationale:
        원본 JSON 키(type/minutes/price)를 alias로 받아 그대로 파싱합니다.
        - base:             minutes 마다 price (올림 과금)
        - progressive:      apply_after 분 경과 이후에만 활성화되는 과금
        - max:              minutes 길이 창(window) 안의 합계 상한
        - conditional_free: 총 주차 시간이 minutes 이하이면 무료
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: RuleKind = Field(..., alias="type")
    unit_minutes: int = Field(..., gt=0, alias="minutes")
    unit_price: int = Field(0, ge=0, alias="price")
    scope: Scope = Field(default_factory=Scope)
    apply_after: Optional[int] = Field(None, ge=0)

    @model_validator(mode="before")
    @classmethod
    def lift_scope_fields(cls, data: Any) -> Any:
        """원본 time_range/day_type 문자열을 Scope로 변환"""
        if not isinstance(data, dict) or "scope" in data:
            return data
        data = dict(data)
        time_range = _pop_first(data, "time_range", "timeRange")
        day_type = _pop_first(data, "day_type", "dayType")
        if "applyAfter" in data and "apply_after" not in data:
            data["apply_after"] = data.pop("applyAfter")
        data["scope"] = Scope(
            time_range=TimeRange.parse(time_range) if time_range not in (None, "") else None,
            day_types=parse_day_type(day_type) if day_type not in (None, "") else None,
        )
        return data

    @model_validator(mode="after")
    def validate_progressive(self):
        if self.kind is RuleKind.PROGRESSIVE and self.apply_after is None:
            raise ValueError("progressive rule requires apply_after")
        return self

    @property
    def is_metering(self) -> bool:
        return self.kind in METERING_KINDS

    @property
    def is_cap(self) -> bool:
        return self.kind is RuleKind.MAX


class ParkingSession(BaseModel):
    """요금 요청 1건의 주차 구간 (요청마다 생성 후 폐기)"""
    model_config = ConfigDict(frozen=True)

    start: datetime
    duration_minutes: int = Field(..., gt=0)

    @field_validator("start")
    @classmethod
    def require_aware_minute(cls, v: datetime) -> datetime:
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("parking_start must include timezone information")
        return v.replace(second=0, microsecond=0)


# ==================== Engine Output ====================

class SegmentCharge(BaseModel):
    """과금 세그먼트 1건 (세션 시작 기준 분 단위 오프셋)"""
    start_offset: int
    end_offset: int
    rule: Optional[TariffRule] = None
    charge: int = 0
    capped: bool = False
    no_applicable_rate: bool = False


class CapApplication(BaseModel):
    """최대 요금이 적용된 창(window) 1건"""
    rule: TariffRule
    start_offset: int
    end_offset: int
    price: int
    uncapped_charge: Optional[int] = None


class FeeBreakdown(BaseModel):
    """요금 계산 결과 (호출자에게는 읽기 전용)"""
    total_fee: int = Field(..., ge=0)
    raw_fee: Optional[int] = None
    segments: List[SegmentCharge] = Field(default_factory=list)
    caps_applied: List[CapApplication] = Field(default_factory=list)
    unrated_segments: int = 0
    grace_period_applied: bool = False
