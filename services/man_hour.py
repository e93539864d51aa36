"""工数自動入力

出勤〜退勤の実働時間（休憩を除く）を、工数入力画面に並んでいる行へ均等に配分する。
割り切れない分は先頭行に寄せる。
"""
import logging
import re

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60
DEFAULT_BREAK_MINUTES = 60


def to_minutes(time_str: str) -> int:
    """HH:MM形式を0時からの分数に変換"""
    h, m = map(int, time_str.split(":"))
    return h * 60 + m


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def compute_work_minutes(
    clock_in_time: str, clock_out_time: str, break_minutes: int = DEFAULT_BREAK_MINUTES
) -> int:
    """実働分数。退勤が出勤より前なら日付を跨いだとみなす"""
    diff = to_minutes(clock_out_time) - to_minutes(clock_in_time)
    if diff < 0:
        diff += MINUTES_PER_DAY
    if diff > break_minutes:
        diff -= break_minutes
    return max(diff, 0)


def allocate_minutes(total: int, row_count: int) -> list[int]:
    """totalをrow_count行に配分する（余りは先頭行）"""
    if row_count <= 0:
        return []
    base, remainder = divmod(total, row_count)
    allocation = [base] * row_count
    allocation[0] += remainder
    return allocation


def _normalize_label(text: str, max_length: int) -> str:
    text = re.sub(r"\s+", " ", text).strip()
    if len(text) > max_length:
        text = text[:max_length] + "..."
    return text


class ManHourFiller:
    """工数入力画面への書き込み"""

    def __init__(self, page, config: dict):
        self._page = page
        self._url = config["portal"]["man_hour_url"]
        browser_config = config["browser"]
        self._selectors = browser_config["selectors"]
        self._timeouts = browser_config["timeouts"]
        self._break_minutes = config["man_hour"]["break_minutes"]
        self._label_max_length = config["man_hour"]["label_max_length"]
        prefix = re.escape(self._selectors["man_hour_row_prefix"])
        self._row_pattern = re.compile(rf"{prefix}\d+")

    async def fill(self, clock_in_time: str, clock_out_time: str) -> list[str]:
        """工数を入力して登録し、入力した行のラベル一覧を返す"""
        total = compute_work_minutes(clock_in_time, clock_out_time, self._break_minutes)
        logger.info("工数入力を開始します... %s - %s (%d分)", clock_in_time, clock_out_time, total)

        await self._page.goto(self._url)
        await self._page.wait_for_load_state("networkidle")
        await self._copy_previous_day()

        rows = await self._find_rows()
        logger.info("入力対象行数: %d", len(rows))
        if not rows:
            logger.info("入力行がありません。")
            return []

        labels = []
        for index, (row, minutes) in enumerate(zip(rows, allocate_minutes(total, len(rows)))):
            label = await self._fill_row(index, row, format_minutes(minutes))
            if label:
                labels.append(label)

        await self._submit()
        return labels

    async def _copy_previous_day(self) -> None:
        selector = self._selectors["copy_previous_button"]
        try:
            await self._page.wait_for_selector(selector, timeout=self._timeouts["copy_button_ms"])
            await self._page.click(selector)
            await self._page.wait_for_timeout(2000)
        except PlaywrightError:
            logger.info("前日コピーボタンが押せませんでした。そのまま入力します。")

    async def _find_rows(self) -> list:
        prefix = self._selectors["man_hour_row_prefix"]
        candidates = await self._page.query_selector_all(f'[id^="{prefix}"]')
        rows = []
        for row in candidates:
            row_id = await row.get_attribute("id")
            if row_id and self._row_pattern.fullmatch(row_id) and await row.is_visible():
                rows.append(row)
        return rows

    async def _fill_row(self, index: int, row, time_str: str):
        input_handle = await row.query_selector("input")
        if input_handle is None:
            logger.warning("%d行目に入力欄がありません", index + 1)
            return None

        await input_handle.click()
        await self._page.keyboard.press("Control+A")
        await self._page.keyboard.press("Backspace")
        await input_handle.fill(time_str)
        logger.debug("Filled %s: %s", await row.get_attribute("id"), time_str)

        try:
            return await self._row_label(index, row)
        except PlaywrightError as e:
            logger.error("タスク名取得失敗: %s", e)
            return None

    async def _row_label(self, index: int, row):
        selector = self._selectors["project_input"].format(index=index + 1)
        project_input = await self._page.query_selector(selector)
        if project_input is not None:
            text = await project_input.get_attribute("value")
        else:
            text = await row.evaluate("el => { const tr = el.closest('tr'); return tr ? tr.innerText : ''; }")
        if not text:
            return None
        return _normalize_label(text, self._label_max_length) or None

    async def _submit(self) -> None:
        logger.info("登録ボタンをクリック...")
        await self._page.click(self._selectors["register_button"])
        await self._page.wait_for_timeout(2000)
        try:
            await self._page.wait_for_load_state("networkidle", timeout=self._timeouts["register_ms"])
        except PlaywrightTimeoutError:
            logger.info("登録後の待機がタイムアウトしました。続行します。")
        logger.info("工数登録完了")
