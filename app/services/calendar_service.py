"""
달력 해석기 (Calendar Resolver)

역할:
    - 절대 시각 -> (요일 구분 DayType, 하루 중 분) 변환
    - 날짜 -> DayType 판정은 외부에서 주입 가능한 순수 함수로 분리

Rationale:
    공휴일 달력은 해마다 바뀌는 외부 데이터이므로 전역 상태로 두지 않고
    `date -> DayType` 함수로 주입받습니다. 기본 구현은 holidays 라이브러리의
    국가별 공휴일 달력을 사용하며, 날짜 단위로 캐시되어 동시 요청 간 공유해도 안전합니다.
"""

from datetime import date, datetime, time, timedelta, tzinfo
from functools import lru_cache
from typing import Callable, Optional, Tuple, Union
from zoneinfo import ZoneInfo

import holidays

from app.core.config import HOLIDAY_COUNTRY, TARIFF_TIMEZONE
from app.models.tariff import MINUTES_PER_DAY, DayType

DayTypeResolver = Callable[[date], DayType]


@lru_cache(maxsize=8)
def _country_holidays(country: str) -> holidays.HolidayBase:
    return holidays.country_holidays(country)


@lru_cache(maxsize=4096)
def resolve_day_type(day: date, country: str = HOLIDAY_COUNTRY) -> DayType:
    """
    Classify a calendar date as weekday, Saturday, or Sunday/holiday.

    A public holiday that falls on a Saturday is classified as a holiday.
    """
    if day.weekday() == 6 or day in _country_holidays(country):
        return DayType.SUNDAY_OR_HOLIDAY
    if day.weekday() == 5:
        return DayType.SATURDAY
    return DayType.WEEKDAY


class CalendarResolver:
    """절대 시각을 요금표 로컬 시각 기준으로 해석"""

    def __init__(
        self,
        day_type_of: Optional[DayTypeResolver] = None,
        tz: Union[str, tzinfo] = TARIFF_TIMEZONE,
    ):
        self._day_type_of = day_type_of or resolve_day_type
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    def localize(self, instant: datetime) -> datetime:
        return instant.astimezone(self.tz)

    def day_type(self, day: date) -> DayType:
        return self._day_type_of(day)

    def resolve(self, instant: datetime) -> Tuple[DayType, float]:
        """(day type, minute of day) of an absolute instant."""
        local = self.localize(instant)
        minute_of_day = local.hour * 60 + local.minute + local.second / 60
        return self.day_type(local.date()), minute_of_day

    def at(self, day: date, minute_of_day: int) -> datetime:
        """Absolute instant of a local wall-clock minute (1440 = next midnight)."""
        extra_days, minute = divmod(minute_of_day, MINUTES_PER_DAY)
        wall = datetime.combine(day + timedelta(days=extra_days), time(minute // 60, minute % 60))
        return wall.replace(tzinfo=self.tz)


class SessionClock:
    """세션 시작 기준 오프셋(분) <-> 절대/로컬 시각 변환"""

    def __init__(self, start: datetime, duration_minutes: int, calendar: CalendarResolver):
        self.start = start
        self.duration = duration_minutes
        self.calendar = calendar

    def instant(self, offset: float) -> datetime:
        return self.start + timedelta(minutes=offset)

    def offset_of(self, instant: datetime) -> int:
        return round((instant - self.start).total_seconds() / 60)

    def local_days(self) -> list[date]:
        """
        Local calendar days the session touches, plus the day before its start so
        that windows opened on the previous evening are seen as well.
        """
        first = self.calendar.localize(self.start).date() - timedelta(days=1)
        last = self.calendar.localize(self.instant(self.duration)).date()
        return [first + timedelta(days=i) for i in range((last - first).days + 1)]

    def offset_at(self, day: date, minute_of_day: int) -> int:
        return self.offset_of(self.calendar.at(day, minute_of_day))
