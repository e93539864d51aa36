# tests/test_time_gate.py
from datetime import datetime
from unittest.mock import patch

from graph.nodes.time_gate_node import time_gate_node
from graph.state import make_initial_state

SETTINGS = {"auto_clock_in": {"min_hour": 6}}


def _mock_time(hour, minute=0):
    return datetime(2026, 2, 24, hour, minute, 0)


def test_before_min_hour_skipped():
    """06:00前 → スキップ"""
    with patch("graph.nodes.time_gate_node._now", return_value=_mock_time(5, 59)):
        result = time_gate_node(make_initial_state("startup"), settings=SETTINGS)
    assert result["action_taken"] == "skipped"
    assert result["skip_reason"] == "06:00前"


def test_at_min_hour_clock_in():
    """06:00ちょうど → 出勤打刻"""
    with patch("graph.nodes.time_gate_node._now", return_value=_mock_time(6, 0)):
        result = time_gate_node(make_initial_state("startup"), settings=SETTINGS)
    assert result["action_taken"] == "clock_in"


def test_midnight_skipped():
    """日付変更直後（00:00）→ スキップ"""
    with patch("graph.nodes.time_gate_node._now", return_value=_mock_time(0, 0)):
        result = time_gate_node(make_initial_state("daily_reset"), settings=SETTINGS)
    assert result["action_taken"] == "skipped"


def test_custom_min_hour():
    with patch("graph.nodes.time_gate_node._now", return_value=_mock_time(7, 30)):
        result = time_gate_node(
            make_initial_state("startup"), settings={"auto_clock_in": {"min_hour": 8}}
        )
    assert result["skip_reason"] == "08:00前"


def test_default_settings():
    with patch("graph.nodes.time_gate_node._now", return_value=_mock_time(9, 0)):
        result = time_gate_node(make_initial_state("startup"))
    assert result["action_taken"] == "clock_in"
