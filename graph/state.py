from datetime import date
from typing import Optional, TypedDict

TRIGGER_STARTUP = "startup"
TRIGGER_DAILY_RESET = "daily_reset"


class DailyRoutineState(TypedDict):
    today: str                      # YYYY-MM-DD
    trigger: str                    # "startup" / "daily_reset"
    auto_clock_in: bool             # AUTO_CLOCK_IN設定
    is_holiday: bool                # 土日・祝日・指定休日
    holiday_reason: Optional[str]   # 理由
    action_taken: Optional[str]     # "clock_in" / "skipped" / "error"
    skip_reason: Optional[str]      # 自動出勤を見送った理由
    message: Optional[str]          # 打刻結果メッセージ


def make_initial_state(trigger: str, today: date = None) -> DailyRoutineState:
    today = today or date.today()
    return {
        "today": today.isoformat(),
        "trigger": trigger,
        "auto_clock_in": False,
        "is_holiday": False,
        "holiday_reason": None,
        "action_taken": None,
        "skip_reason": None,
        "message": None,
    }
