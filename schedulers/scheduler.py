# schedulers/scheduler.py
import logging
import time
from datetime import date, datetime, timedelta
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

FETCH_JOB_ID = "work_info_fetch"
DAILY_RESET_JOB_ID = "daily_reset"
RESUME_CHECK_JOB_ID = "resume_check"
RESUME_PROBE_JOB_ID = "resume_probe"


def _now() -> datetime:
    """テスト時にモック可能"""
    return datetime.now()


def _today_str() -> str:
    """テスト時にモック可能"""
    return date.today().isoformat()


def next_reset_time(now: datetime, buffer_seconds: float = 1) -> datetime:
    """次の0時0分0秒 + バッファ"""
    midnight = datetime.combine(now.date() + timedelta(days=1), datetime.min.time())
    return midnight + timedelta(seconds=buffer_seconds)


class AttendanceScheduler:
    """APSchedulerによる定期取得・日次リセット管理"""

    def __init__(
        self,
        fetch_func: Callable[[], Awaitable],
        daily_func: Callable[[], Awaitable],
        interval_minutes: int = 30,
        reset_buffer_seconds: float = 1,
        resume_delay_seconds: float = 5,
        resume_probe_seconds: float = 60,
        scheduler=None,
    ):
        self._fetch_func = fetch_func
        self._daily_func = daily_func
        self._interval = interval_minutes
        self._reset_buffer = reset_buffer_seconds
        self._resume_delay = resume_delay_seconds
        self._resume_probe = resume_probe_seconds
        self._scheduler = scheduler or AsyncIOScheduler()
        self._last_checked_date: Optional[str] = None
        self._last_probe: Optional[float] = None

    @property
    def last_checked_date(self) -> Optional[str]:
        return self._last_checked_date

    def start(self):
        """スケジューラ開始"""
        self._last_checked_date = _today_str()
        self.restart_periodic_fetch()
        self.schedule_next_reset()
        self._scheduler.add_job(
            self._probe_resume,
            trigger=IntervalTrigger(seconds=self._resume_probe),
            id=RESUME_PROBE_JOB_ID,
            replace_existing=True,
        )
        self._scheduler.start()

    def stop(self):
        """スケジューラ停止"""
        self._scheduler.shutdown(wait=False)

    def restart_periodic_fetch(self):
        """定期取得ジョブを（再）登録する。実行中の取得とは重ねない"""
        self._scheduler.add_job(
            self._fetch_func,
            trigger=IntervalTrigger(minutes=self._interval),
            id=FETCH_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

    def schedule_next_reset(self):
        run_date = next_reset_time(_now(), self._reset_buffer)
        logger.info("Next daily reset scheduled at %s", run_date.strftime("%Y-%m-%d %H:%M:%S"))
        self._scheduler.add_job(
            self.check_daily_reset,
            trigger=DateTrigger(run_date=run_date),
            id=DAILY_RESET_JOB_ID,
            replace_existing=True,
        )

    async def check_daily_reset(self) -> bool:
        """日付が変わっていれば日次処理を実行する。実行したらTrue"""
        today = _today_str()
        try:
            if self._last_checked_date == today:
                return False
            logger.info("Date changed detected: %s -> %s", self._last_checked_date, today)
            self._last_checked_date = today
            await self._daily_func()
            return True
        finally:
            self.schedule_next_reset()

    def notify_resume(self):
        """スリープ復帰時に呼ぶ。ネットワーク安定待ちの後に日付を確認する"""
        logger.info("System resumed. Checking for daily reset...")
        self._scheduler.add_job(
            self.check_daily_reset,
            trigger=DateTrigger(run_date=_now() + timedelta(seconds=self._resume_delay)),
            id=RESUME_CHECK_JOB_ID,
            replace_existing=True,
        )

    def _probe_resume(self):
        # 実行間隔が大きく空いたらスリープしていたとみなす
        now = time.time()
        if self._last_probe is not None and now - self._last_probe > self._resume_probe * 2:
            self.notify_resume()
        self._last_probe = now
