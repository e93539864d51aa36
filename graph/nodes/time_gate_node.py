# graph/nodes/time_gate_node.py
import logging
from datetime import datetime

from graph.state import DailyRoutineState

logger = logging.getLogger(__name__)

DEFAULT_MIN_HOUR = 6


def _now() -> datetime:
    """テスト時にモック可能な現在時刻取得"""
    return datetime.now()


def time_gate_node(state: DailyRoutineState, settings: dict = None) -> dict:
    """自動出勤してよい時刻かを判定するノード"""
    if settings is None:
        settings = {"auto_clock_in": {"min_hour": DEFAULT_MIN_HOUR}}

    min_hour = settings["auto_clock_in"]["min_hour"]
    now = _now()

    # 深夜〜早朝は打刻しない
    if now.hour < min_hour:
        reason = f"{min_hour:02d}:00前"
        logger.info("%sのため自動出勤をスキップします（現在 %s）", reason, now.strftime("%H:%M"))
        return {"action_taken": "skipped", "skip_reason": reason}

    return {"action_taken": "clock_in"}
