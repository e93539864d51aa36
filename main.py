"""ozo:extended 勤怠エージェント - エントリーポイント"""
import asyncio
import logging
import os
import signal

from dotenv import load_dotenv

from graph.graph import DailyRoutine, build_graph
from graph.state import TRIGGER_DAILY_RESET, TRIGGER_STARTUP
from schedulers.scheduler import AttendanceScheduler
from services.clock_service import ClockService
from services.config_loader import load_config, resolve_data_dir
from services.coordinator import SingleFlight
from services.credential_store import CredentialStore
from services.holiday_calendar import HolidayCalendar
from services.logger import setup_logging
from services.notifier import ConsoleNotifier, PopupAwareNotifier, SlackNotifier
from services.tray_icon import TrayIconUpdater
from services.work_info_store import WorkInfoStore

logger = logging.getLogger("ozo_agent")


def create_session_factory(config: dict):
    """設定に応じてセッション生成関数を返す"""
    if config["browser"]["session"] == "dummy":
        from services.dummy_stamper import DummyPortal, DummySession

        portal = DummyPortal()
        return lambda credentials: DummySession(portal)

    from services.attendance_browser import AttendanceBrowser

    return lambda credentials: AttendanceBrowser(credentials, config)


def create_notifier(config: dict, is_popup_visible=None):
    notify_config = config["notify"]
    slack_config = notify_config["slack"]
    slack_token = os.getenv("SLACK_BOT_TOKEN", "")
    slack_channel = os.getenv("SLACK_NOTIFY_CHANNEL", slack_config.get("notify_channel", ""))
    if slack_config["enabled"] and slack_token:
        inner = SlackNotifier(token=slack_token, channel=slack_channel, title=notify_config["title"])
    else:
        inner = ConsoleNotifier(title=notify_config["title"])
    return PopupAwareNotifier(inner, is_popup_visible)


def create_services(config: dict):
    """設定に基づいてサービスインスタンスを生成"""
    data_dir = resolve_data_dir(config)
    store = WorkInfoStore()
    credential_store = CredentialStore(data_dir / "config.json")
    clock_service = ClockService(
        store=store,
        coordinator=SingleFlight(),
        credential_store=credential_store,
        session_factory=create_session_factory(config),
        notifier=create_notifier(config),
        config=config,
    )
    calendar_config = config["calendar"]
    calendar_service = HolidayCalendar(
        holidays=calendar_config["holidays"],
        use_national_holidays=calendar_config["use_national_holidays"],
    )
    return store, clock_service, calendar_service


async def run(config: dict):
    store, clock_service, calendar_service = create_services(config)

    tray = TrayIconUpdater(set_icon=lambda name: logger.info("トレイアイコン: %s", name))
    store.subscribe(tray)

    routine = DailyRoutine(build_graph(clock_service, calendar_service, config))

    async def daily_job():
        await routine.run(TRIGGER_DAILY_RESET)

    sched_config = config["scheduler"]
    scheduler = AttendanceScheduler(
        fetch_func=clock_service.fetch_work_info,
        daily_func=daily_job,
        interval_minutes=sched_config["fetch_interval_minutes"],
        reset_buffer_seconds=sched_config["daily_reset_buffer_seconds"],
        resume_delay_seconds=sched_config["resume_check_delay_seconds"],
        resume_probe_seconds=sched_config["resume_probe_seconds"],
    )
    # 設定保存後は定期取得をやり直す
    clock_service.on_config_saved = scheduler.restart_periodic_fetch
    scheduler.start()
    logger.info("%d分間隔で勤務情報の取得を開始します", sched_config["fetch_interval_minutes"])

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown(signum, frame):
        loop.call_soon_threadsafe(stop_event.set)

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    if clock_service.is_configured():
        await routine.run(TRIGGER_STARTUP)
    else:
        logger.info("認証情報が未設定です: %s", resolve_data_dir(config) / "config.json")

    logger.info("Ctrl+Cで停止します")
    await stop_event.wait()

    logger.info("停止中...")
    scheduler.stop()
    logger.info("停止しました")


def main():
    """メイン起動処理"""
    load_dotenv()
    config = load_config(os.getenv("OZO_CONFIG", "config.yaml"))
    setup_logging(config)
    asyncio.run(run(config))


if __name__ == "__main__":
    main()
