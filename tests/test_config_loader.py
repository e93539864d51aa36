import os
import tempfile
from pathlib import Path
from unittest.mock import patch

from services.config_loader import DEFAULT_CONFIG, load_config, resolve_data_dir


def test_load_config_defaults():
    """ファイルの値がデフォルトを上書きすること"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write("scheduler:\n  fetch_interval_minutes: 10\n")
        f.flush()
        config = load_config(f.name)
    os.unlink(f.name)
    assert config["scheduler"]["fetch_interval_minutes"] == 10
    assert config["scheduler"]["resume_check_delay_seconds"] == 5


def test_load_config_nested():
    """ネストされた設定が部分的にマージされること"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(
            "browser:\n"
            "  channel: chrome\n"
            "  selectors:\n"
            "    clock_in_button: '#in'\n"
        )
        f.flush()
        config = load_config(f.name)
    os.unlink(f.name)
    assert config["browser"]["channel"] == "chrome"
    assert config["browser"]["selectors"]["clock_in_button"] == "#in"
    assert config["browser"]["selectors"]["clock_out_button"] == "#btn04"


def test_load_config_file_not_found():
    """存在しないファイルの場合デフォルト設定を返すこと"""
    config = load_config("nonexistent.yaml")
    assert config["scheduler"]["fetch_interval_minutes"] == 30
    assert config["auto_clock_in"]["min_hour"] == 6
    assert config["man_hour"]["break_minutes"] == 60


def test_load_config_does_not_share_defaults():
    """返した設定を書き換えてもデフォルトが変わらないこと"""
    config = load_config("nonexistent.yaml")
    config["calendar"]["holidays"].append("2026-05-01")
    assert DEFAULT_CONFIG["calendar"]["holidays"] == []


def test_resolve_data_dir_env_override():
    """OZO_DATA_DIRが設定値より優先されること"""
    config = load_config("nonexistent.yaml")
    with patch.dict(os.environ, {"OZO_DATA_DIR": "/tmp/ozo-test"}):
        assert resolve_data_dir(config) == Path("/tmp/ozo-test")


def test_resolve_data_dir_expands_home():
    config = {"app": {"data_dir": "~/.ozo-extended"}}
    with patch.dict(os.environ):
        os.environ.pop("OZO_DATA_DIR", None)
        result = resolve_data_dir(config)
    assert "~" not in str(result)
