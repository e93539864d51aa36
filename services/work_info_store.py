import logging
import re
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)

WORK_MINUTES_PER_DAY = 9 * 60
MINUTES_PER_DAY = 24 * 60
UNKNOWN_TIME = "--:--"

_HHMM = re.compile(r"(\d{1,2}):(\d{2})")


@dataclass
class WorkInfo:
    clocked_in: bool
    clock_in_time: Optional[str] = None
    clock_out_time: Optional[str] = None
    min_clock_out_time: Optional[str] = None
    last_updated: Optional[datetime] = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MonthlyWorkHours:
    worked_time: str = UNKNOWN_TIME
    required_time: str = UNKNOWN_TIME
    diff_time: str = UNKNOWN_TIME
    daily_diff_time: str = UNKNOWN_TIME

    def to_dict(self) -> dict:
        return asdict(self)


def compute_min_clock_out(clock_in_time: str) -> Optional[str]:
    """出勤時刻+9時間（24時で折り返し）をHH:MMで返す。読めない表記ならNone"""
    match = _HHMM.fullmatch(clock_in_time.strip())
    if match is None:
        logger.warning("出勤時刻を解釈できません: %r", clock_in_time)
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    total = (hours * 60 + minutes + WORK_MINUTES_PER_DAY) % MINUTES_PER_DAY
    return f"{total // 60:02d}:{total % 60:02d}"


Listener = Callable[[Optional[WorkInfo]], None]


def _now() -> datetime:
    return datetime.now()


class WorkInfoStore:
    """勤務情報・月次労働時間のキャッシュ（プロセスに1つ）"""

    def __init__(self):
        self._work_info: Optional[WorkInfo] = None
        self._monthly: Optional[MonthlyWorkHours] = None
        self._listeners: list[Listener] = []

    @property
    def work_info(self) -> Optional[WorkInfo]:
        return self._work_info

    @property
    def monthly(self) -> Optional[MonthlyWorkHours]:
        return self._monthly

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """勤務情報の変更通知を購読する。戻り値で購読解除"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._work_info)
            except Exception:
                logger.exception("勤務情報の変更通知でエラー")

    def update(self, clock_in_time: Optional[str], clock_out_time: Optional[str]) -> WorkInfo:
        """打刻時刻からスナップショットを作り直す"""
        if not clock_in_time:
            self._work_info = WorkInfo(clocked_in=False, last_updated=_now())
        else:
            self._work_info = WorkInfo(
                clocked_in=True,
                clock_in_time=clock_in_time,
                clock_out_time=clock_out_time,
                min_clock_out_time=compute_min_clock_out(clock_in_time),
                last_updated=_now(),
            )
        self._emit()
        return self._work_info

    def set_monthly(self, monthly: Optional[MonthlyWorkHours]) -> None:
        self._monthly = monthly

    def invalidate_monthly(self) -> None:
        self._monthly = None

    def clear(self) -> None:
        """日次リセット: 両キャッシュを破棄"""
        self._work_info = None
        self._monthly = None
        self._emit()
