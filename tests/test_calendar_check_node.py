from unittest.mock import MagicMock

from graph.nodes.calendar_check_node import calendar_check_node
from graph.state import make_initial_state


def _make_state(today="2026-02-24"):
    state = make_initial_state("startup")
    state.update(today=today, auto_clock_in=True)
    return state


def test_holiday_skips():
    calendar_service = MagicMock()
    calendar_service.is_holiday.return_value = (True, "建国記念の日")

    result = calendar_check_node(_make_state("2026-02-11"), calendar_service=calendar_service)

    assert result["is_holiday"] is True
    assert result["holiday_reason"] == "建国記念の日"
    assert result["action_taken"] == "skipped"
    assert result["skip_reason"] == "建国記念の日"


def test_workday_passes_through():
    calendar_service = MagicMock()
    calendar_service.is_holiday.return_value = (False, "")

    result = calendar_check_node(_make_state(), calendar_service=calendar_service)

    assert result == {"is_holiday": False, "holiday_reason": None}
    called_date = calendar_service.is_holiday.call_args.args[0]
    assert called_date.isoformat() == "2026-02-24"
