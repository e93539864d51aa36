import enum
import logging
import re
from pathlib import Path
from typing import Optional

from playwright.async_api import async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from services.config_loader import resolve_data_dir
from services.credential_store import Credentials
from services.errors import AuthError, LaunchError, SessionError
from services.man_hour import ManHourFiller
from services.stamper_interface import ActionResult, SessionInterface
from services.work_info_store import UNKNOWN_TIME, MonthlyWorkHours

logger = logging.getLogger(__name__)

EMPTY_CELL_VALUES = {"", "-", "−", "&nbsp;"}

INSTALL_HINT = (
    "ブラウザがインストールされていません。\n\n"
    "コマンドプロンプトで以下を実行してください：\n"
    "playwright install chromium\n\n"
    "実行後、アプリを再起動してください。"
)


class SessionState(enum.Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    AUTHENTICATED = "authenticated"
    CLOSED = "closed"


def normalize_cell_text(text: Optional[str]) -> Optional[str]:
    """打刻セルの文字列から空白を除去し、未打刻表示ならNoneを返す"""
    if text is None:
        return None
    trimmed = re.sub(r"\s+", "", text)
    if trimmed in EMPTY_CELL_VALUES:
        return None
    return trimmed


class AttendanceBrowser(SessionInterface):
    """PlaywrightでOZO (ManageOZO3) にアクセスし打刻する"""

    def __init__(self, credentials: Credentials, config: dict):
        self._credentials = credentials
        self._portal = config["portal"]
        self._config = config
        self._browser_config = config["browser"]
        self._selectors = self._browser_config["selectors"]
        self._timeouts = self._browser_config["timeouts"]
        self._profile_dir = resolve_data_dir(config) / self._browser_config["profile_dir_name"]
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None
        self.state = SessionState.UNOPENED

    async def open(self, headless: bool = True, persistent: bool = True) -> None:
        """ブラウザを起動（Edge + Persistent Context）"""
        if self.state is not SessionState.UNOPENED:
            raise SessionError(f"セッションは既に{self.state.value}です")

        options = {
            "headless": headless,
            "viewport": self._browser_config["viewport"],
            "user_agent": self._browser_config["user_agent"],
            "locale": self._browser_config["locale"],
        }
        channel = self._browser_config.get("channel") or None
        slow_mo = self._browser_config["slow_mo_ms"]

        try:
            self._playwright = await async_playwright().start()
            if persistent:
                Path(self._profile_dir).mkdir(parents=True, exist_ok=True)
                logger.info("Launching browser with user data: %s", self._profile_dir)
                self._context = await self._playwright.chromium.launch_persistent_context(
                    str(self._profile_dir), channel=channel, slow_mo=slow_mo, **options
                )
                pages = self._context.pages
                self._page = pages[0] if pages else await self._context.new_page()
            else:
                self._browser = await self._playwright.chromium.launch(
                    headless=headless, channel=channel, slow_mo=slow_mo
                )
                self._context = await self._browser.new_context(
                    viewport=options["viewport"],
                    user_agent=options["user_agent"],
                    locale=options["locale"],
                )
                self._page = await self._context.new_page()
        except PlaywrightError as e:
            logger.error("ブラウザ起動エラー: %s", e)
            await self.close()
            if "Executable doesn't exist" in str(e) or "browserType.launch" in str(e):
                raise LaunchError(INSTALL_HINT) from e
            raise LaunchError(f"ブラウザを起動できませんでした: {e}") from e

        self.state = SessionState.OPEN

    def _require_page(self):
        if self.state not in (SessionState.OPEN, SessionState.AUTHENTICATED) or self._page is None:
            raise SessionError("ブラウザセッションが開かれていません")
        return self._page

    async def authenticate(self) -> None:
        """ログイン処理（ログイン済みなら即座に戻る）"""
        page = self._require_page()
        sel = self._selectors

        logger.info("ログインページを開きます...")
        await page.goto(self._portal["login_url"])
        await page.wait_for_load_state("networkidle")

        # ポータルのドメインにいて、ID入力欄が無ければログイン済み
        if self._portal["portal_domain"] in page.url:
            if not await page.is_visible(sel["user_field"]):
                logger.info("既にログイン済みです")
                self.state = SessionState.AUTHENTICATED
                return

        if self._portal["login_domain"] not in page.url:
            logger.info("Current URL: %s", page.url)

        # Step 1: USER_ID
        if not await page.is_visible(sel["password_field"]):
            if self._portal["login_domain"] in page.url:
                await self._wait_required(
                    sel["user_field"],
                    self._timeouts["user_field_ms"],
                    "ユーザーID入力欄が表示されませんでした。",
                )
            if await page.is_visible(sel["user_field"]):
                logger.info("USER_IDを入力します...")
                await page.fill(sel["user_field"], self._credentials.user_id)
                await page.click(sel["next_button"])
                await page.wait_for_load_state("networkidle")
                if await page.is_visible(sel["username_error"]):
                    raise AuthError("アカウントが見つかりません。")

        if self._is_on_portal(page):
            logger.info("ログインシーケンス完了")
            self.state = SessionState.AUTHENTICATED
            return

        # Step 2: PASSWORD
        await self._wait_required(
            sel["password_field"],
            self._timeouts["password_field_ms"],
            "パスワード入力画面が表示されませんでした。メールアドレスを確認してください。",
        )
        logger.info("PASSWORDを入力します...")
        await page.fill(sel["password_field"], self._credentials.password)
        await page.click(sel["next_button"])
        await page.wait_for_load_state("networkidle")
        if await page.is_visible(sel["password_error"]):
            raise AuthError("パスワードが正しくありません。")

        # Step 3: 「サインインの状態を維持しますか?」（出ない場合もある）
        try:
            confirm = await page.wait_for_selector(
                sel["next_button"], state="visible", timeout=self._timeouts["optional_ms"]
            )
            if confirm:
                logger.info("維持確認ボタンを押します...")
                await confirm.click()
                await page.wait_for_load_state("networkidle")
        except PlaywrightTimeoutError:
            pass

        if not self._is_on_portal(page):
            raise AuthError("ログインに失敗しました。認証情報を確認してください。")

        logger.info("ログインシーケンス完了")
        self.state = SessionState.AUTHENTICATED

    def _is_on_portal(self, page) -> bool:
        url = page.url
        return self._portal["portal_domain"] in url and self._portal["login_domain"] not in url

    async def _wait_required(self, selector: str, timeout_ms: int, message: str) -> None:
        try:
            await self._page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise AuthError(message) from e

    async def _read_cell(self, selector: str) -> Optional[str]:
        cell = await self._require_page().query_selector(selector)
        if cell is None:
            return None
        return normalize_cell_text(await cell.text_content())

    async def read_clock_in_time(self) -> Optional[str]:
        return await self._read_cell(self._selectors["clock_in_cell"])

    async def read_clock_out_time(self) -> Optional[str]:
        return await self._read_cell(self._selectors["clock_out_cell"])

    async def clock_in(self) -> ActionResult:
        """出勤打刻"""
        page = self._require_page()
        logger.info("出勤処理を実行します...")

        clock_in_time = await self.read_clock_in_time()
        if clock_in_time:
            logger.info("既に出勤済みです（%s）", clock_in_time)
            return ActionResult(success=False, message=f"既に出勤済みです（{clock_in_time}）")

        logger.info("出勤ボタンをクリックします...")
        try:
            await page.click(self._selectors["clock_in_button"])
            await page.wait_for_load_state("networkidle")
            await page.wait_for_timeout(1000)
        except PlaywrightError as e:
            logger.warning("Click/Navigation error: %s", e)

        new_clock_in_time = await self.read_clock_in_time()
        if new_clock_in_time:
            logger.info("出勤完了！（%s）", new_clock_in_time)
            return ActionResult(success=True, message=f"出勤完了！（{new_clock_in_time}）")
        logger.warning("出勤処理に失敗した可能性があります")
        return ActionResult(success=False, message="出勤処理に失敗した可能性があります")

    async def clock_out(self, force_reclick: bool = False, auto_fill_hours: bool = False) -> ActionResult:
        """退勤打刻"""
        page = self._require_page()
        logger.info("退勤処理を実行します... Force:%s, AutoMH:%s", force_reclick, auto_fill_hours)

        if not await self.read_clock_in_time():
            logger.info("まだ出勤していません")
            return ActionResult(success=False, message="まだ出勤していません")

        clock_out_time = await self.read_clock_out_time()
        if clock_out_time:
            logger.info("既に退勤済みです（%s）", clock_out_time)
            if not force_reclick:
                return ActionResult(success=False, message=f"既に退勤済みです（{clock_out_time}）")
            logger.info("設定により、退勤ボタンを強制クリックします。")

        async def accept_dialog(dialog):
            logger.info("Dialog detected: %s", dialog.message)
            try:
                await dialog.accept()
            except PlaywrightError as e:
                logger.error("Dialog accept error: %s", e)

        page.on("dialog", accept_dialog)
        logger.info("退勤ボタンをクリックします...")
        try:
            await page.click(self._selectors["clock_out_button"])
            await page.wait_for_timeout(3000)
        except PlaywrightError as e:
            logger.warning("Click error: %s", e)
        finally:
            page.remove_listener("dialog", accept_dialog)

        try:
            await page.wait_for_load_state("domcontentloaded", timeout=self._timeouts["settle_ms"])
            await page.wait_for_load_state("networkidle", timeout=self._timeouts["settle_ms"])
        except PlaywrightTimeoutError:
            logger.info("Page load wait timeout, continuing...")

        new_clock_out_time = await self.read_clock_out_time()
        if not new_clock_out_time:
            logger.warning("退勤処理に失敗した可能性があります")
            return ActionResult(success=False, message="退勤処理に失敗した可能性があります")

        logger.info("退勤完了！（%s）", new_clock_out_time)
        if not auto_fill_hours:
            return ActionResult(success=True, message=f"退勤完了 ({new_clock_out_time})")

        try:
            updated_in = await self.read_clock_in_time()
            updated_out = await self.read_clock_out_time()
            logger.info("工数計算用時刻: %s - %s", updated_in, updated_out)
            labels = await ManHourFiller(page, self._config).fill(updated_in, updated_out)
        except Exception as e:
            logger.exception("工数入力失敗")
            return ActionResult(
                success=True, message=f"退勤完了 ({new_clock_out_time}) ※工数入力失敗: {e}"
            )

        task_msg = f"\n内訳: {', '.join(labels)}" if labels else ""
        return ActionResult(
            success=True, message=f"退勤完了＆工数入力済 ({new_clock_out_time}){task_msg}"
        )

    async def get_monthly_work_hours(self) -> MonthlyWorkHours:
        """月次労働時間情報を取得"""
        page = self._require_page()
        logger.info("月次労働時間情報を取得します...")
        await page.goto(self._portal["monthly_url"])
        await page.wait_for_load_state("networkidle")

        async def text_of(selector: str) -> str:
            el = await page.query_selector(selector)
            if el is None:
                return UNKNOWN_TIME
            return ((await el.text_content()) or "").strip() or UNKNOWN_TIME

        monthly = MonthlyWorkHours(
            worked_time=await text_of(self._selectors["monthly_worked"]),
            required_time=await text_of(self._selectors["monthly_required"]),
            diff_time=await text_of(self._selectors["monthly_diff"]),
            daily_diff_time=await text_of(self._selectors["monthly_daily_diff"]),
        )
        logger.info(
            "月次: 実働=%s, 必要=%s, 差分=%s, 日別過不足=%s",
            monthly.worked_time, monthly.required_time,
            monthly.diff_time, monthly.daily_diff_time,
        )
        return monthly

    async def close(self) -> None:
        """ブラウザを閉じる"""
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        except PlaywrightError as e:
            logger.warning("ブラウザ終了時のエラー: %s", e)
        finally:
            self._context = None
            self._browser = None
            self._page = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
            self.state = SessionState.CLOSED
