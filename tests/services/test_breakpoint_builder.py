"""
Breakpoint Builder 단위 테스트

실행: pytest tests/services/test_breakpoint_builder.py -v
"""
from app.models.tariff import ParkingSession, TariffRule
from app.services.breakpoint_builder import build_breakpoints, cap_windows
from app.validate.tariff_validator import parse_parking_start


def session(start: str, minutes: int) -> ParkingSession:
    return ParkingSession(start=parse_parking_start(start), duration_minutes=minutes)


def rules(*raw) -> list[TariffRule]:
    return [TariffRule.model_validate(r) for r in raw]


class TestBuildBreakpoints:
    """breakpoint 수집"""

    def test_time_range_boundaries(self, calendar, segmentation_rates):
        parsed = rules(*segmentation_rates)
        s = session("2025-10-17T18:00:00+09:00", 960)
        assert build_breakpoints(parsed, s, calendar) == [0, 900, 960]

    def test_progressive_threshold(self, calendar):
        parsed = rules(
            {"type": "base", "minutes": 30, "price": 0},
            {"type": "progressive", "minutes": 30, "price": 250, "apply_after": 30},
        )
        assert build_breakpoints(parsed, session("2025-10-20T10:00:00+09:00", 120), calendar) == [0, 30, 120]

    def test_threshold_beyond_session_is_dropped(self, calendar):
        parsed = rules({"type": "progressive", "minutes": 30, "price": 250, "apply_after": 300})
        assert build_breakpoints(parsed, session("2025-10-20T10:00:00+09:00", 120), calendar) == [0, 120]

    def test_midnights_added_for_day_type_rules(self, calendar):
        parsed = rules({"type": "base", "minutes": 60, "price": 100, "day_type": "月～金"})
        s = session("2025-10-17T23:00:00+09:00", 120)
        assert build_breakpoints(parsed, s, calendar) == [0, 60, 120]

    def test_cap_window_edges(self, calendar):
        parsed = rules(
            {"type": "base", "minutes": 60, "price": 100},
            {"type": "max", "minutes": 1440, "price": 1000},
        )
        s = session("2025-10-20T10:00:00+09:00", 3000)
        windows = cap_windows(parsed, s, calendar)
        assert build_breakpoints(parsed, s, calendar, windows) == [0, 1440, 2880, 3000]


class TestCapWindows:
    """최대 요금 창 인스턴스"""

    def test_unscoped_windows_repeat_from_session_start(self, calendar):
        parsed = rules({"type": "max", "minutes": 1440, "price": 1000})
        windows = cap_windows(parsed, session("2025-10-20T10:00:00+09:00", 3000), calendar)
        assert [(w.start, w.end) for w in windows] == [(0, 1440), (1440, 2880), (2880, 3000)]

    def test_overnight_window_clipped_to_session(self, calendar, all_day_max_rates):
        parsed = rules(*all_day_max_rates)
        windows = cap_windows(parsed, session("2025-10-17T22:00:00+09:00", 300), calendar)

        night = [w for w in windows if w.rule.scope.time_range is not None]
        assert [(w.start, w.end) for w in night] == [(0, 300)]

    def test_day_type_selects_window_by_start_day(self, calendar):
        parsed = rules(
            {"type": "max", "minutes": 1440, "price": 400, "time_range": "9:00～18:00", "day_type": "月～金"},
            {"type": "max", "minutes": 1440, "price": 500, "time_range": "9:00～18:00", "day_type": "土日祝"},
        )
        # 금 18:00 ~ 토 10:30
        windows = cap_windows(parsed, session("2025-10-17T18:00:00+09:00", 990), calendar)
        assert [(w.rule.unit_price, w.start, w.end) for w in windows] == [(500, 900, 990)]

    def test_short_unit_splits_calendar_window(self, calendar):
        parsed = rules({"type": "max", "minutes": 60, "price": 150, "time_range": "9:00～12:00"})
        windows = cap_windows(parsed, session("2025-10-20T09:00:00+09:00", 180), calendar)
        assert [(w.start, w.end) for w in windows] == [(0, 60), (60, 120), (120, 180)]

    def test_full_day_range_windows_follow_midnights(self, calendar):
        parsed = rules({"type": "max", "minutes": 1440, "price": 500, "time_range": "0:00～24:00"})
        # 월 10:00 ~ 수 12:00
        windows = cap_windows(parsed, session("2025-10-20T10:00:00+09:00", 3000), calendar)
        assert [(w.start, w.end) for w in windows] == [(0, 840), (840, 2280), (2280, 3000)]
