import pytest
from unittest.mock import AsyncMock

from graph.nodes.stamp_node import stamp_node
from graph.state import make_initial_state
from services.stamper_interface import ActionResult


def _make_state(**overrides):
    base = make_initial_state("startup")
    base.update(auto_clock_in=True, action_taken="clock_in")
    base.update(overrides)
    return base


@pytest.mark.asyncio
async def test_stamp_clock_in_success():
    """出勤打刻が成功した場合の状態更新"""
    clock_service = AsyncMock()
    clock_service.handle_clock_in.return_value = ActionResult(
        success=True, message="出勤完了！（09:12）"
    )

    result = await stamp_node(_make_state(), clock_service=clock_service)

    assert result["action_taken"] == "clock_in"
    assert result["message"] == "出勤完了！（09:12）"
    clock_service.fetch_monthly_work_hours.assert_awaited_once()


@pytest.mark.asyncio
async def test_stamp_failure():
    """打刻失敗時のエラー状態"""
    clock_service = AsyncMock()
    clock_service.handle_clock_in.return_value = ActionResult(
        success=False, message="他の処理が実行中です。"
    )

    result = await stamp_node(_make_state(), clock_service=clock_service)

    assert result["action_taken"] == "error"
    assert result["message"] == "他の処理が実行中です。"
