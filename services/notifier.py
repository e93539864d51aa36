import logging
import sys
from typing import Callable

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """コンソール出力による通知（フォールバック用）"""

    def __init__(self, title: str = "ozo:extended"):
        self._title = title

    def send(self, message: str) -> bool:
        print(f"[{self._title}] {message}", file=sys.stdout)
        return True

    def send_error(self, error: str) -> bool:
        print(f"[{self._title}] {error}", file=sys.stderr)
        return True


class SlackNotifier:
    """Slack APIによる通知サービス"""

    def __init__(self, token: str, channel: str, title: str = "ozo:extended"):
        self._channel = channel
        self._title = title
        self._client = None
        self._fallback = ConsoleNotifier(title)

        if token:
            self._client = WebClient(token=token)

    def send(self, message: str) -> bool:
        """メッセージ送信（クライアント未設定時はコンソール）"""
        if self._client is None:
            return self._fallback.send(message)

        try:
            self._client.chat_postMessage(channel=self._channel, text=f"[{self._title}] {message}")
            return True
        except SlackApiError as e:
            logger.error("Slack通知に失敗しました: %s", e)
            return False

    def send_error(self, error: str) -> bool:
        return self.send(f"❌ {error}")


class PopupAwareNotifier:
    """ポップアップ表示中は通知を抑止するラッパー"""

    def __init__(self, inner, is_popup_visible: Callable[[], bool] = None):
        self._inner = inner
        self._is_popup_visible = is_popup_visible or (lambda: False)

    def send(self, message: str) -> bool:
        if self._is_popup_visible():
            return False
        return self._inner.send(message)

    def send_error(self, error: str) -> bool:
        if self._is_popup_visible():
            return False
        return self._inner.send_error(error)
