# graph/nodes/calendar_check_node.py
import logging
from datetime import date

from graph.state import DailyRoutineState

logger = logging.getLogger(__name__)


def calendar_check_node(
    state: DailyRoutineState,
    calendar_service=None,
) -> dict:
    """今日が自動出勤の対象日かをカレンダーで確認するノード"""
    today = date.fromisoformat(state["today"])
    is_holiday, reason = calendar_service.is_holiday(today)

    if is_holiday:
        logger.info("休日のため自動出勤をスキップします（%s）", reason)
        return {
            "is_holiday": True,
            "holiday_reason": reason,
            "action_taken": "skipped",
            "skip_reason": reason,
        }

    return {"is_holiday": False, "holiday_reason": None}
