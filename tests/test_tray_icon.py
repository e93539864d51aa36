from unittest.mock import MagicMock

from services.tray_icon import ICON_NORMAL, ICON_RED, TrayIconUpdater, icon_name_for
from services.work_info_store import WorkInfoStore


def test_icon_for_states():
    """出勤中のみ通常アイコン、それ以外は赤"""
    store = WorkInfoStore()
    assert icon_name_for(None) == ICON_RED
    assert icon_name_for(store.update(None, None)) == ICON_RED
    assert icon_name_for(store.update("09:00", None)) == ICON_NORMAL
    assert icon_name_for(store.update("09:00", "18:00")) == ICON_RED


def test_updater_follows_store():
    store = WorkInfoStore()
    set_icon = MagicMock()
    updater = TrayIconUpdater(set_icon)
    store.subscribe(updater)

    store.update("09:00", None)
    store.update("09:00", None)
    store.update("09:00", "18:00")
    store.clear()

    assert [c.args[0] for c in set_icon.call_args_list] == [ICON_NORMAL, ICON_RED]
    assert updater.current == ICON_RED
