import asyncio
import enum
from contextlib import asynccontextmanager


class FlightState(enum.Enum):
    IDLE = "idle"
    BUSY = "busy"


class SingleFlight:
    """ブラウザを操作する処理を同時に1つだけ実行させる"""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._state = FlightState.IDLE

    @property
    def state(self) -> FlightState:
        return self._state

    def is_busy(self) -> bool:
        return self._state is FlightState.BUSY

    @asynccontextmanager
    async def claim(self):
        """IDLEならBUSYにしてTrueを返す。実行中ならFalse（待たない）"""
        # 判定からacquireまでの間に中断点は無い（未ロックのacquireは即時完了）
        if self._state is FlightState.BUSY or self._lock.locked():
            yield False
            return
        await self._lock.acquire()
        self._state = FlightState.BUSY
        try:
            yield True
        finally:
            self._state = FlightState.IDLE
            self._lock.release()
