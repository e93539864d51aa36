# tests/test_calendar_check.py
from datetime import date
from unittest.mock import patch

from services.holiday_calendar import HolidayCalendar


def test_national_holiday():
    """jpholidayで祝日判定できること"""
    calendar = HolidayCalendar()
    # 2026-01-01は元日
    is_holiday, reason = calendar.is_holiday(date(2026, 1, 1))
    assert is_holiday is True
    assert "元日" in reason


def test_workday():
    """平日が祝日でないこと"""
    calendar = HolidayCalendar()
    # 2026-02-24は火曜日（平日・祝日でない）
    is_holiday, reason = calendar.is_holiday(date(2026, 2, 24))
    assert is_holiday is False
    assert reason == ""


def test_weekend():
    """土日が休日判定されること"""
    calendar = HolidayCalendar()
    assert calendar.is_holiday(date(2026, 2, 21)) == (True, "土曜日")
    assert calendar.is_holiday(date(2026, 2, 22)) == (True, "日曜日")


def test_configured_holiday():
    """設定ファイルで指定した日が休日になること"""
    calendar = HolidayCalendar(holidays=["2026-02-24"])
    assert calendar.is_holiday(date(2026, 2, 24)) == (True, "指定休日")


def test_national_holidays_disabled():
    calendar = HolidayCalendar(use_national_holidays=False)
    assert calendar.is_holiday(date(2026, 1, 1)) == (False, "")


def test_cache_works():
    """同一日の判定結果がキャッシュされること"""
    calendar = HolidayCalendar()
    d = date(2026, 2, 24)
    with patch("services.holiday_calendar.jpholiday.is_holiday_name", return_value=None) as lookup:
        result1 = calendar.is_holiday(d)
        result2 = calendar.is_holiday(d)
    assert result1 == result2
    lookup.assert_called_once_with(d)
