"""
Calendar Resolver 단위 테스트

실행: pytest tests/services/test_calendar_service.py -v
"""
import pytest
from datetime import date, datetime, timezone

from app.models.tariff import DayType
from app.services.calendar_service import CalendarResolver, SessionClock, resolve_day_type


class TestResolveDayType:
    """날짜 -> DayType (일본 공휴일 달력)"""

    @pytest.mark.parametrize("day, expected", [
        (date(2025, 10, 17), DayType.WEEKDAY),            # 금요일
        (date(2025, 10, 18), DayType.SATURDAY),
        (date(2025, 10, 19), DayType.SUNDAY_OR_HOLIDAY),
        (date(2025, 11, 3), DayType.SUNDAY_OR_HOLIDAY),   # 문화의 날 (월요일)
        (date(2026, 1, 1), DayType.SUNDAY_OR_HOLIDAY),    # 설날 (목요일)
    ])
    def test_day_types(self, day, expected):
        assert resolve_day_type(day) == expected


class TestCalendarResolver:
    """절대 시각 -> 로컬 (DayType, 분)"""

    def test_resolve_converts_to_tariff_timezone(self, calendar):
        instant = datetime(2025, 10, 17, 13, 0, tzinfo=timezone.utc)  # 22:00 JST
        assert calendar.resolve(instant) == (DayType.WEEKDAY, 22 * 60)

    def test_at_accepts_next_midnight(self, calendar):
        midnight = calendar.at(date(2025, 10, 17), 1440)
        assert midnight == datetime(2025, 10, 18, 0, 0, tzinfo=calendar.tz)

    def test_injected_day_type_resolver(self):
        calendar = CalendarResolver(day_type_of=lambda d: DayType.SATURDAY, tz="Asia/Tokyo")
        assert calendar.day_type(date(2025, 10, 20)) == DayType.SATURDAY


class TestSessionClock:
    """세션 오프셋(분) 변환"""

    def test_offsets_round_trip_local_wall_clock(self, calendar):
        start = datetime(2025, 10, 17, 22, 0, tzinfo=calendar.tz)
        clock = SessionClock(start, 760, calendar)

        assert clock.offset_at(date(2025, 10, 18), 8 * 60) == 600
        assert clock.offset_at(date(2025, 10, 17), 20 * 60) == -120

    def test_local_days_include_previous_day(self, calendar):
        start = datetime(2025, 10, 17, 22, 0, tzinfo=calendar.tz)
        clock = SessionClock(start, 760, calendar)
        assert clock.local_days() == [date(2025, 10, 16), date(2025, 10, 17), date(2025, 10, 18)]
