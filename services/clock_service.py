"""出勤・退勤・勤務情報取得

UI層から呼ばれる操作の窓口。ブラウザを開く操作はすべてSingleFlightで直列化し、
実行中に来た要求は待たずに「実行中」結果（取得系はキャッシュ）を返す。
"""
import logging
from typing import Awaitable, Callable, Optional

from services.coordinator import SingleFlight
from services.credential_store import Credentials, CredentialStore
from services.errors import ConfigError, SessionError
from services.network import is_online
from services.stamper_interface import ActionResult, SessionInterface, session_scope
from services.work_info_store import MonthlyWorkHours, WorkInfo, WorkInfoStore

logger = logging.getLogger(__name__)

BUSY_NOTICE = "他の処理が実行中です。しばらくお待ちください。"
BUSY_MESSAGE = "他の処理が実行中です。"
OFFLINE_NOTICE = "ネットワークに接続されていません。"
OFFLINE_MESSAGE = "ネットワークに接続されていません。インターネット接続を確認してください。"

SessionFactory = Callable[[Credentials], SessionInterface]
SessionAction = Callable[[SessionInterface], Awaitable[ActionResult]]


class ClockService:
    def __init__(
        self,
        store: WorkInfoStore,
        coordinator: SingleFlight,
        credential_store: CredentialStore,
        session_factory: SessionFactory,
        notifier,
        config: dict,
        network_check: Callable[[], Awaitable[bool]] = None,
        on_config_saved: Callable[[], None] = None,
    ):
        self._store = store
        self._coordinator = coordinator
        self._credential_store = credential_store
        self._session_factory = session_factory
        self._notifier = notifier
        self._config = config
        self._network_check = network_check or self._default_network_check
        self.on_config_saved = on_config_saved
        self._last_fetch_error: Optional[str] = None

    async def _default_network_check(self) -> bool:
        return await is_online(
            self._config["portal"]["login_url"],
            timeout=self._config["network"]["check_timeout_seconds"],
        )

    def is_configured(self) -> bool:
        return self._credential_store.is_configured()

    def is_auto_clock_in(self) -> bool:
        return self._credential_store.is_auto_clock_in()

    def is_processing(self) -> bool:
        return self._coordinator.is_busy()

    # --- 打刻 -------------------------------------------------------------

    async def handle_clock_in(self) -> ActionResult:
        """出勤処理"""

        async def action(session: SessionInterface) -> ActionResult:
            return await session.clock_in()

        return await self._run_foreground("出勤処理", action)

    async def handle_clock_out(self, auto_man_hour: Optional[bool] = None) -> ActionResult:
        """退勤処理（auto_man_hourがNoneなら設定のAUTO_MAN_HOURに従う）"""
        if auto_man_hour is None:
            auto_man_hour = self._credential_store.is_auto_man_hour()

        async def action(session: SessionInterface) -> ActionResult:
            # 退勤済みでも再クリックして退勤時刻を更新する
            return await session.clock_out(force_reclick=True, auto_fill_hours=auto_man_hour)

        label = "退勤・工数自動入力処理" if auto_man_hour else "退勤・工数入力処理"
        return await self._run_foreground(label, action, invalidate_monthly=True)

    async def _run_foreground(
        self, label: str, action: SessionAction, invalidate_monthly: bool = False
    ) -> ActionResult:
        async with self._coordinator.claim() as acquired:
            if not acquired:
                self._notifier.send(BUSY_NOTICE)
                return ActionResult(success=False, message=BUSY_MESSAGE)

            if not await self._network_check():
                self._notifier.send(OFFLINE_NOTICE)
                return ActionResult(success=False, message=OFFLINE_MESSAGE)

            try:
                credentials = self._credential_store.credentials()
            except ConfigError as e:
                self._notifier.send(str(e))
                return ActionResult(success=False, message=str(e))

            self._notifier.send(f"{label}を開始します...")
            session = self._session_factory(credentials)
            failed = False
            try:
                async with session_scope(session, headless=self._credential_store.is_headless()):
                    await session.authenticate()
                    result = await action(session)
                    await self._refresh_from_session(session, invalidate_monthly)
            except SessionError as e:
                logger.error("%sエラー: %s", label, e)
                result = ActionResult(success=False, message=f"{label}に失敗しました: {e}")
                failed = True
            except Exception as e:
                logger.exception("%sエラー", label)
                result = ActionResult(success=False, message=f"{label}に失敗しました: {e}")
                failed = True

            if result.success:
                logger.info(result.message)
            if failed:
                self._notifier.send_error(result.message)
            else:
                self._notifier.send(result.message)
            return result

    async def _refresh_from_session(self, session: SessionInterface, invalidate_monthly: bool) -> None:
        try:
            clock_in_time = await session.read_clock_in_time()
            clock_out_time = await session.read_clock_out_time()
            self._store.update(clock_in_time, clock_out_time)
        except Exception:
            logger.exception("Info update failed")
        if invalidate_monthly:
            self._store.invalidate_monthly()

    # --- 取得 -------------------------------------------------------------

    async def fetch_work_info(self) -> Optional[WorkInfo]:
        """ポータルから打刻状況を取得してキャッシュを更新する"""
        async with self._coordinator.claim() as acquired:
            if not acquired:
                return self._store.work_info
            if not self.is_configured():
                return None
            try:
                credentials = self._credential_store.credentials()
                session = self._session_factory(credentials)
                async with session_scope(session, headless=self._credential_store.is_headless()):
                    await session.authenticate()
                    clock_in_time = await session.read_clock_in_time()
                    clock_out_time = await session.read_clock_out_time()
                info = self._store.update(clock_in_time, clock_out_time)
            except Exception as e:
                logger.error("Background fetch error: %s", e)
                self._last_fetch_error = str(e)
                return None

            self._last_fetch_error = None
            return info

    async def get_work_info(self) -> dict:
        """キャッシュがあれば即返し、無ければ取得する"""
        info = self._store.work_info
        error = None
        if info is None:
            info = await self.fetch_work_info()
            if info is None:
                error = self._last_fetch_error

        result = info.to_dict() if info is not None else {}
        if error:
            result["error"] = error
        result["is_processing"] = self._coordinator.is_busy()
        return result

    async def fetch_monthly_work_hours(self) -> Optional[MonthlyWorkHours]:
        """月次労働時間を取得"""
        async with self._coordinator.claim() as acquired:
            if not acquired:
                return self._store.monthly
            if not self.is_configured():
                return None
            try:
                credentials = self._credential_store.credentials()
                session = self._session_factory(credentials)
                async with session_scope(session, headless=self._credential_store.is_headless()):
                    await session.authenticate()
                    monthly = await session.get_monthly_work_hours()
            except Exception as e:
                logger.error("月次情報取得エラー: %s", e)
                return None

            self._store.set_monthly(monthly)
            return monthly

    async def get_monthly_work_hours(self) -> Optional[MonthlyWorkHours]:
        if self._store.monthly is not None:
            return self._store.monthly
        if self._coordinator.is_busy():
            return None
        return await self.fetch_monthly_work_hours()

    def reset_caches(self) -> None:
        self._store.clear()

    # --- 設定 -------------------------------------------------------------

    def load_config(self) -> dict:
        return self._credential_store.load()

    def save_config(self, config: dict) -> ActionResult:
        result = self._credential_store.save(config)
        if result.success and self.on_config_saved:
            self.on_config_saved()
        return result

    async def test_login(self, user_id: str, password: str) -> ActionResult:
        """入力された認証情報でログインできるかを確認する（キャッシュは更新しない）"""
        if not user_id or not password:
            return ActionResult(success=False, message="メールアドレスとパスワードを入力してください。")

        async with self._coordinator.claim() as acquired:
            if not acquired:
                return ActionResult(success=False, message=BUSY_MESSAGE)
            if not await self._network_check():
                return ActionResult(success=False, message=OFFLINE_MESSAGE)

            session = self._session_factory(Credentials(user_id=user_id, password=password))
            try:
                async with session_scope(
                    session, headless=self._credential_store.is_headless(), persistent=False
                ):
                    await session.authenticate()
            except SessionError as e:
                logger.warning("Login test failed: %s", e)
                return ActionResult(success=False, message=str(e))
            except Exception as e:
                logger.exception("Login test error")
                return ActionResult(success=False, message=f"ログインテストエラー: {e}")

            return ActionResult(success=True, message="ログイン成功！認証情報は正しいです。")
