import logging

from graph.state import DailyRoutineState

logger = logging.getLogger(__name__)


async def stamp_node(state: DailyRoutineState, clock_service=None) -> dict:
    """自動出勤を実行し、月次情報を取り直すノード"""
    logger.info("Auto clock-in triggered by %s.", state["trigger"])
    result = await clock_service.handle_clock_in()
    await clock_service.fetch_monthly_work_hours()

    if result.success:
        return {"action_taken": "clock_in", "message": result.message}
    return {"action_taken": "error", "message": result.message}
