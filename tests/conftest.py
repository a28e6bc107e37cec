import pytest
from datetime import date

from app.core.limiter import limiter
from app.models.tariff import DayType
from app.services.calendar_service import CalendarResolver, resolve_day_type
from app.services.parking_fee_service import ParkingFeeService

TOKYO = "Asia/Tokyo"


@pytest.fixture(autouse=True)
def reset_limiter():
    """각 테스트 전에 limiter storage를 리셋"""
    limiter.reset()
    yield


@pytest.fixture
def calendar():
    """Asia/Tokyo 기준, 일본 공휴일 달력을 사용하는 CalendarResolver"""
    return CalendarResolver(tz=TOKYO)


@pytest.fixture
def holiday_calendar():
    """
    지정한 날짜를 공휴일로 취급하는 CalendarResolver 팩토리.

    Rationale:
        공휴일 판정은 외부 달력 데이터에 의존하므로, 요일 구분 로직 테스트는
        주입된 달력으로 결정적으로 검증합니다.
    """
    def _make(*holiday_dates: date) -> CalendarResolver:
        def day_type_of(day: date) -> DayType:
            if day in holiday_dates:
                return DayType.SUNDAY_OR_HOLIDAY
            return resolve_day_type(day)
        return CalendarResolver(day_type_of=day_type_of, tz=TOKYO)
    return _make


@pytest.fixture
def svc(calendar):
    """Pytest fixture that provides a ParkingFeeService bound to the Tokyo calendar."""
    return ParkingFeeService(calendar=calendar)


@pytest.fixture
def all_day_max_rates():
    """주간/야간 기본 요금 + 야간 최대 + 종일 최대가 겹치는 요금표"""
    return [
        {"type": "base", "minutes": 40, "price": 200, "time_range": "8:00～20:00"},
        {"type": "base", "minutes": 60, "price": 100, "time_range": "20:00～8:00"},
        {"type": "max", "minutes": 1440, "price": 300, "time_range": "20:00～8:00"},
        {"type": "max", "minutes": 1440, "price": 900},
    ]


@pytest.fixture
def segmentation_rates():
    """야간(60분 100엔) / 주간(30분 100엔) 시간대별 기본 요금표"""
    return [
        {"type": "base", "minutes": 60, "price": 100, "time_range": "18:00～9:00"},
        {"type": "base", "minutes": 30, "price": 100, "time_range": "9:00～18:00"},
    ]
