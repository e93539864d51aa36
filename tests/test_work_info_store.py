from unittest.mock import MagicMock

import pytest

from services.work_info_store import (
    MonthlyWorkHours,
    WorkInfoStore,
    compute_min_clock_out,
)


@pytest.mark.parametrize(
    "clock_in, expected",
    [
        ("09:15", "18:15"),
        ("22:00", "07:00"),
        ("00:00", "09:00"),
        ("15:00", "00:00"),
        ("8:05", "17:05"),
    ],
)
def test_compute_min_clock_out(clock_in, expected):
    """最低退勤時刻は出勤+9時間（24時で折り返し）"""
    assert compute_min_clock_out(clock_in) == expected


@pytest.mark.parametrize("clock_in", ["09:15(修)", "--:--", "9時15分", ""])
def test_compute_min_clock_out_unparseable(clock_in):
    """時刻として読めない表記はNone"""
    assert compute_min_clock_out(clock_in) is None


def test_update_with_unparseable_clock_in():
    store = WorkInfoStore()
    info = store.update("09:15(修)", None)
    assert info.clocked_in is True
    assert info.clock_in_time == "09:15(修)"
    assert info.min_clock_out_time is None


def test_update_clocked_in():
    store = WorkInfoStore()
    info = store.update("09:15", None)
    assert info.clocked_in is True
    assert info.clock_in_time == "09:15"
    assert info.clock_out_time is None
    assert info.min_clock_out_time == "18:15"
    assert info.last_updated is not None
    assert store.work_info is info


def test_update_not_clocked_in_ignores_clock_out():
    """出勤時刻がNoneなら退勤時刻に関係なく未出勤"""
    store = WorkInfoStore()
    info = store.update(None, "18:00")
    assert info.clocked_in is False
    assert info.clock_in_time is None
    assert info.clock_out_time is None
    assert info.min_clock_out_time is None


def test_subscribers_receive_updates():
    store = WorkInfoStore()
    listener = MagicMock()
    store.subscribe(listener)

    info = store.update("09:00", None)
    listener.assert_called_once_with(info)

    store.clear()
    listener.assert_called_with(None)
    assert listener.call_count == 2


def test_unsubscribe():
    store = WorkInfoStore()
    listener = MagicMock()
    unsubscribe = store.subscribe(listener)
    unsubscribe()
    store.update("09:00", None)
    listener.assert_not_called()


def test_failing_listener_does_not_block_others():
    """購読者の例外が他の購読者に影響しないこと"""
    store = WorkInfoStore()
    broken = MagicMock(side_effect=RuntimeError("boom"))
    healthy = MagicMock()
    store.subscribe(broken)
    store.subscribe(healthy)

    store.update("09:00", None)
    healthy.assert_called_once()


def test_clear_drops_both_caches():
    store = WorkInfoStore()
    store.update("09:00", None)
    store.set_monthly(MonthlyWorkHours(worked_time="100:00"))
    store.clear()
    assert store.work_info is None
    assert store.monthly is None


def test_invalidate_monthly_keeps_work_info():
    store = WorkInfoStore()
    store.update("09:00", None)
    store.set_monthly(MonthlyWorkHours())
    store.invalidate_monthly()
    assert store.monthly is None
    assert store.work_info is not None


def test_to_dict():
    info = WorkInfoStore().update("10:30", "19:45")
    data = info.to_dict()
    assert data["clocked_in"] is True
    assert data["min_clock_out_time"] == "19:30"
    assert MonthlyWorkHours().to_dict()["worked_time"] == "--:--"
