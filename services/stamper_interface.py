from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional


@dataclass
class ActionResult:
    success: bool
    message: str


class SessionInterface(ABC):
    """勤怠ポータルへのブラウザセッションの抽象インターフェース"""

    @abstractmethod
    async def open(self, headless: bool = True, persistent: bool = True) -> None:
        """ブラウザコンテキストを確保"""
        ...

    @abstractmethod
    async def authenticate(self) -> None:
        """ログイン（ログイン済みなら何もしない）"""
        ...

    @abstractmethod
    async def read_clock_in_time(self) -> Optional[str]:
        """出勤時刻 HH:MM（未打刻ならNone）"""
        ...

    @abstractmethod
    async def read_clock_out_time(self) -> Optional[str]:
        """退勤時刻 HH:MM（未打刻ならNone）"""
        ...

    @abstractmethod
    async def clock_in(self) -> ActionResult:
        """出勤打刻"""
        ...

    @abstractmethod
    async def clock_out(
        self, force_reclick: bool = False, auto_fill_hours: bool = False
    ) -> ActionResult:
        """退勤打刻（必要なら工数入力）"""
        ...

    @abstractmethod
    async def get_monthly_work_hours(self):
        """月次労働時間を取得"""
        ...

    @abstractmethod
    async def close(self) -> None:
        """リソース解放"""
        ...


@asynccontextmanager
async def session_scope(
    session: SessionInterface, headless: bool = True, persistent: bool = True
):
    """open〜closeをひとまとめにする。どの経路で抜けても必ずcloseする"""
    try:
        await session.open(headless=headless, persistent=persistent)
        yield session
    finally:
        await session.close()
