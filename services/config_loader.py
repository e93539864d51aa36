import copy
import os
from pathlib import Path

import yaml

DEFAULT_CONFIG = {
    "app": {
        "data_dir": "~/.ozo-extended",
    },
    "scheduler": {
        "fetch_interval_minutes": 30,
        "daily_reset_buffer_seconds": 1,
        "resume_check_delay_seconds": 5,
        "resume_probe_seconds": 60,
    },
    "auto_clock_in": {
        "min_hour": 6,
    },
    "calendar": {
        "use_national_holidays": True,
        "holidays": [],
    },
    "portal": {
        "login_url": "https://manage.ozo-cloud.jp/ozo/default.cfm?version=fixer",
        "man_hour_url": (
            "https://manage.ozo-cloud.jp/ozo/default.cfm?version=fixer"
            "&app_cd=388&fuseaction=kos&today_open=1"
        ),
        "monthly_url": (
            "https://manage.ozo-cloud.jp/ozo/default.cfm?version=fixer"
            "&app_cd=329&fuseaction=knt"
        ),
        "portal_domain": "manage.ozo-cloud.jp",
        "login_domain": "login.microsoftonline.com",
    },
    "browser": {
        "session": "playwright",
        "channel": "msedge",
        "profile_dir_name": "ozo_edge_session",
        "user_agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0"
        ),
        "locale": "ja-JP",
        "slow_mo_ms": 100,
        "viewport": {"width": 1280, "height": 800},
        "timeouts": {
            "optional_ms": 5000,
            "user_field_ms": 30000,
            "password_field_ms": 10000,
            "settle_ms": 10000,
            "copy_button_ms": 10000,
            "register_ms": 15000,
        },
        "selectors": {
            "user_field": "#i0116",
            "password_field": "#i0118",
            "next_button": "#idSIButton9",
            "username_error": "#usernameError",
            "password_error": "#passwordError",
            "clock_in_button": "#btn03",
            "clock_out_button": "#btn04",
            "clock_in_cell": "table.BaseDesign tbody tr:nth-child(3) td:nth-child(3)",
            "clock_out_cell": "table.BaseDesign tbody tr:nth-child(3) td:nth-child(4)",
            "copy_previous_button": "#a_sub_copy_select",
            "man_hour_row_prefix": "div_sub_editlist_WORK_TIME_row",
            "project_input": "#div_project_{index} > input:nth-child(4)",
            "register_button": "#div_sub_buttons_regist",
            "monthly_worked": "td.flex-roudou",
            "monthly_required": ".flex-prescribed.kinmu-tooltip",
            "monthly_diff": "td.flex-prescribed-overless.kinmu-tooltip",
            "monthly_daily_diff": (
                "#frmSearch > table:nth-child(36) > tbody > tr:nth-child(2) > td"
                " > table:nth-child(1) > tbody > tr:nth-child(3) > td:nth-child(22)"
            ),
        },
    },
    "man_hour": {
        "break_minutes": 60,
        "label_max_length": 50,
    },
    "network": {
        "check_timeout_seconds": 5,
    },
    "notify": {
        "title": "ozo:extended",
        "slack": {
            "enabled": False,
            "notify_channel": "",
        },
    },
    "logging": {
        "level": "INFO",
        "file_name": "app.log",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """ベース設定にオーバーライドをマージする"""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(path: str = "config.yaml") -> dict:
    """YAML設定ファイルをロードし、デフォルト設定とマージして返す"""
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
        return _deep_merge(DEFAULT_CONFIG, user_config)
    return copy.deepcopy(DEFAULT_CONFIG)


def resolve_data_dir(config: dict) -> Path:
    """データディレクトリを決定（環境変数OZO_DATA_DIRを優先）"""
    raw = os.getenv("OZO_DATA_DIR") or config["app"]["data_dir"]
    return Path(raw).expanduser()
