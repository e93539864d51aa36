from datetime import date

import jpholiday


class HolidayCalendar:
    """土日・設定した休日・祝日(jpholiday)による休日判定"""

    def __init__(self, holidays: list = None, use_national_holidays: bool = True):
        self._holidays = {self._to_date(d) for d in (holidays or [])}
        self._use_national_holidays = use_national_holidays
        self._cache: dict[date, tuple[bool, str]] = {}

    @staticmethod
    def _to_date(value) -> date:
        if isinstance(value, date):
            return value
        return date.fromisoformat(str(value))

    def is_holiday(self, target_date: date = None) -> tuple[bool, str]:
        """指定日が休日かどうかを判定する"""
        if target_date is None:
            target_date = date.today()

        if target_date in self._cache:
            return self._cache[target_date]

        result = (False, "")
        if target_date.weekday() >= 5:
            result = (True, "土曜日" if target_date.weekday() == 5 else "日曜日")
        elif target_date in self._holidays:
            result = (True, "指定休日")
        elif self._use_national_holidays:
            holiday_name = jpholiday.is_holiday_name(target_date)
            if holiday_name:
                result = (True, holiday_name)

        self._cache[target_date] = result
        return result
