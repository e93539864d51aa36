import os
from unittest.mock import patch

from main import create_notifier, create_services, create_session_factory
from services.attendance_browser import AttendanceBrowser
from services.config_loader import load_config
from services.credential_store import Credentials
from services.dummy_stamper import DummySession
from services.notifier import ConsoleNotifier, PopupAwareNotifier, SlackNotifier


def _config(**browser):
    config = load_config("nonexistent.yaml")
    config["browser"].update(browser)
    return config


def test_dummy_sessions_share_portal():
    factory = create_session_factory(_config(session="dummy"))
    first = factory(Credentials("u", "p"))
    second = factory(Credentials("u", "p"))
    assert isinstance(first, DummySession)
    assert first._portal is second._portal


def test_browser_session_factory():
    factory = create_session_factory(_config())
    assert isinstance(factory(Credentials("u", "p")), AttendanceBrowser)


def test_notifier_defaults_to_console():
    with patch.dict(os.environ, {"SLACK_BOT_TOKEN": ""}):
        notifier = create_notifier(_config())
    assert isinstance(notifier, PopupAwareNotifier)
    assert isinstance(notifier._inner, ConsoleNotifier)


def test_notifier_uses_slack_when_enabled():
    config = _config()
    config["notify"]["slack"]["enabled"] = True
    with patch.dict(os.environ, {"SLACK_BOT_TOKEN": "xoxb-test"}), \
            patch("services.notifier.WebClient"):
        notifier = create_notifier(config)
    assert isinstance(notifier._inner, SlackNotifier)


def test_create_services_uses_data_dir(tmp_path):
    with patch.dict(os.environ, {"OZO_DATA_DIR": str(tmp_path)}):
        store, clock_service, calendar_service = create_services(_config(session="dummy"))
    assert store.work_info is None
    assert clock_service.is_configured() is False
    assert calendar_service.is_holiday is not None
