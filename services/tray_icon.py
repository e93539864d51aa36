import logging
from typing import Callable, Optional

from services.work_info_store import WorkInfo

logger = logging.getLogger(__name__)

ICON_NORMAL = "icon.png"
ICON_RED = "icon_red.png"


def icon_name_for(work_info: Optional[WorkInfo]) -> str:
    """未出勤または退勤済みなら赤アイコン"""
    if work_info is None or not work_info.clock_in_time or work_info.clock_out_time:
        return ICON_RED
    return ICON_NORMAL


class TrayIconUpdater:
    """WorkInfoStoreの変更を購読してトレイアイコンを切り替える"""

    def __init__(self, set_icon: Callable[[str], None]):
        self._set_icon = set_icon
        self.current: Optional[str] = None

    def __call__(self, work_info: Optional[WorkInfo]) -> None:
        name = icon_name_for(work_info)
        if name == self.current:
            return
        self.current = name
        logger.debug("トレイアイコン更新: %s", name)
        self._set_icon(name)
