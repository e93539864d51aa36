import logging
import sys
from pathlib import Path

from services.config_loader import resolve_data_dir

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(config: dict) -> logging.Logger:
    """コンソール(INFO)とファイル(DEBUG)へのログ出力を設定する"""
    log_config = config["logging"]
    root = logging.getLogger()
    if root.handlers:
        return root

    root.setLevel(logging.DEBUG)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_config["level"])
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    log_path = resolve_data_dir(config) / log_config["file_name"]
    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError as e:
        root.warning("ログファイルを作成できません %s: %s", log_path, e)

    return root
