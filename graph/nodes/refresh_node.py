# graph/nodes/refresh_node.py
import logging

from graph.state import TRIGGER_DAILY_RESET, DailyRoutineState

logger = logging.getLogger(__name__)


async def refresh_node(state: DailyRoutineState, clock_service=None) -> dict:
    """日次リセット時はキャッシュを破棄し、勤務情報・月次情報を取り直すノード"""
    if state["trigger"] == TRIGGER_DAILY_RESET:
        logger.info("Executing daily reset...")
        clock_service.reset_caches()

    if not clock_service.is_configured():
        logger.info("認証情報が未設定のため取得をスキップします")
        return {"auto_clock_in": False, "action_taken": "skipped", "skip_reason": "未設定"}

    info = await clock_service.fetch_work_info()
    await clock_service.fetch_monthly_work_hours()

    if not clock_service.is_auto_clock_in():
        return {"auto_clock_in": False}
    if info is not None and info.clocked_in:
        logger.info("出勤済みのため自動出勤は不要です（%s）", info.clock_in_time)
        return {"auto_clock_in": False, "action_taken": "skipped", "skip_reason": "出勤済み"}
    return {"auto_clock_in": True}
