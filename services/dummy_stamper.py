import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from services.man_hour import allocate_minutes, compute_work_minutes
from services.stamper_interface import ActionResult, SessionInterface
from services.work_info_store import MonthlyWorkHours

logger = logging.getLogger(__name__)


def _now_hhmm() -> str:
    return datetime.now().strftime("%H:%M")


@dataclass
class DummyPortal:
    """ブラウザを使わない仮想ポータル（オフライン動作・テスト用）"""

    clock_in_time: Optional[str] = None
    clock_out_time: Optional[str] = None
    task_labels: list = field(default_factory=list)
    monthly: MonthlyWorkHours = field(default_factory=MonthlyWorkHours)
    latency: float = 0.0
    open_sessions: int = 0
    max_concurrent_sessions: int = 0
    sessions_opened: int = 0
    last_allocation: list = field(default_factory=list)


class DummySession(SessionInterface):
    """ダミー打刻（ログ出力のみ）。DummyPortalの状態を読み書きする"""

    def __init__(self, portal: DummyPortal = None):
        self._portal = portal or DummyPortal()
        self._opened = False

    async def _tick(self) -> None:
        await asyncio.sleep(self._portal.latency)

    async def open(self, headless: bool = True, persistent: bool = True) -> None:
        portal = self._portal
        portal.open_sessions += 1
        portal.sessions_opened += 1
        portal.max_concurrent_sessions = max(portal.max_concurrent_sessions, portal.open_sessions)
        self._opened = True
        await self._tick()

    async def authenticate(self) -> None:
        await self._tick()

    async def read_clock_in_time(self) -> Optional[str]:
        return self._portal.clock_in_time

    async def read_clock_out_time(self) -> Optional[str]:
        return self._portal.clock_out_time

    async def clock_in(self) -> ActionResult:
        if self._portal.clock_in_time:
            return ActionResult(success=False, message=f"既に出勤済みです（{self._portal.clock_in_time}）")
        await self._tick()
        self._portal.clock_in_time = _now_hhmm()
        logger.info("[DummySession] 出勤打刻（シミュレーション）: %s", self._portal.clock_in_time)
        return ActionResult(success=True, message=f"出勤完了！（{self._portal.clock_in_time}）")

    async def clock_out(self, force_reclick: bool = False, auto_fill_hours: bool = False) -> ActionResult:
        portal = self._portal
        if not portal.clock_in_time:
            return ActionResult(success=False, message="まだ出勤していません")
        if portal.clock_out_time and not force_reclick:
            return ActionResult(success=False, message=f"既に退勤済みです（{portal.clock_out_time}）")
        await self._tick()
        portal.clock_out_time = _now_hhmm()
        logger.info("[DummySession] 退勤打刻（シミュレーション）: %s", portal.clock_out_time)
        if not auto_fill_hours:
            return ActionResult(success=True, message=f"退勤完了 ({portal.clock_out_time})")

        total = compute_work_minutes(portal.clock_in_time, portal.clock_out_time)
        portal.last_allocation = allocate_minutes(total, len(portal.task_labels))
        task_msg = f"\n内訳: {', '.join(portal.task_labels)}" if portal.task_labels else ""
        return ActionResult(
            success=True, message=f"退勤完了＆工数入力済 ({portal.clock_out_time}){task_msg}"
        )

    async def get_monthly_work_hours(self) -> MonthlyWorkHours:
        await self._tick()
        return self._portal.monthly

    async def close(self) -> None:
        if self._opened:
            self._portal.open_sessions -= 1
            self._opened = False
