import json
import logging
from dataclasses import dataclass
from pathlib import Path

from services.errors import ConfigError
from services.stamper_interface import ActionResult

logger = logging.getLogger(__name__)

DEFAULT_ACCOUNT_CONFIG = {
    "USER_ID": "",
    "PASSWORD": "",
    "HEADLESS_MODE": True,
    "AUTO_LAUNCH": True,
    "AUTO_CLOCK_IN": False,
    "AUTO_MAN_HOUR": False,
}


@dataclass
class Credentials:
    user_id: str
    password: str


class CredentialStore:
    """config.json（認証情報と動作フラグ）の読み書き"""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict:
        """設定を読み込む（読めない場合はデフォルト）"""
        try:
            if self._path.exists():
                with open(self._path, "r", encoding="utf-8") as f:
                    config = json.load(f)
                return {**DEFAULT_ACCOUNT_CONFIG, **config}
        except (OSError, json.JSONDecodeError) as e:
            logger.error("設定の読み込みに失敗しました: %s", e)
        return dict(DEFAULT_ACCOUNT_CONFIG)

    def save(self, config: dict) -> ActionResult:
        """設定を丸ごと上書き保存する"""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as f:
                json.dump(config, f, ensure_ascii=False, indent=2)
            return ActionResult(success=True, message="設定を保存しました。")
        except (OSError, TypeError) as e:
            logger.error("設定の保存に失敗しました: %s", e)
            return ActionResult(success=False, message=f"設定の保存に失敗しました: {e}")

    def credentials(self) -> Credentials:
        config = self.load()
        if not self._has_credentials(config):
            raise ConfigError("認証情報が設定されていません。")
        return Credentials(user_id=config["USER_ID"], password=config["PASSWORD"])

    @staticmethod
    def _has_credentials(config: dict) -> bool:
        user_id = config.get("USER_ID") or ""
        password = config.get("PASSWORD") or ""
        return bool(user_id.strip() and password.strip())

    def is_configured(self) -> bool:
        return self._has_credentials(self.load())

    def _flag(self, key: str) -> bool:
        value = self.load().get(key)
        if value is None:
            return DEFAULT_ACCOUNT_CONFIG[key]
        return bool(value)

    def is_headless(self) -> bool:
        return self._flag("HEADLESS_MODE")

    def is_auto_launch(self) -> bool:
        return self._flag("AUTO_LAUNCH")

    def is_auto_clock_in(self) -> bool:
        return self._flag("AUTO_CLOCK_IN")

    def is_auto_man_hour(self) -> bool:
        return self._flag("AUTO_MAN_HOUR")
