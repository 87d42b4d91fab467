"""UI settings, access logging and user preferences."""

from __future__ import annotations

import pytest

from crm_panel.models import UISettings
from crm_panel.services.personalization import ACCESS_LOGS_KEY, UI_SETTINGS_KEY, UIPersonalizationService
from crm_panel.storage import MemoryStore


@pytest.fixture
def service(store: MemoryStore) -> UIPersonalizationService:
    """Personalization service with a small access log window."""
    return UIPersonalizationService(store, access_log_limit=3)


def test_settings_default_then_persist(service: UIPersonalizationService, store: MemoryStore) -> None:
    assert service.get_ui_settings().theme == "light"

    saved = service.save_ui_settings(UISettings(theme="dark", dark_mode=True, custom_settings={"density": 2}))

    loaded = service.get_ui_settings()
    assert loaded.theme == "dark"
    assert loaded.custom_settings == {"density": 2}
    assert loaded.last_updated == saved.last_updated
    assert store.contains(UI_SETTINGS_KEY)


def test_unreadable_settings_fall_back_to_defaults(service: UIPersonalizationService, store: MemoryStore) -> None:
    store.set_raw(UI_SETTINGS_KEY, '{"sidebar_width": -1}')
    settings = service.get_ui_settings()
    assert settings.sidebar_width == 240
    assert settings.theme == "light"


def test_access_log_keeps_newest_entries(service: UIPersonalizationService) -> None:
    for index in range(5):
        service.log_access(f"view-{index}", details="dashboard")

    logs = service.get_access_logs()
    assert [entry.action for entry in logs] == ["view-2", "view-3", "view-4"]

    service.clear_access_logs()
    assert service.get_access_logs() == []


def test_corrupt_access_log_starts_over(service: UIPersonalizationService, store: MemoryStore) -> None:
    store.set_raw(ACCESS_LOGS_KEY, "not json")
    assert service.get_access_logs() == []
    service.log_access("login")
    assert [entry.action for entry in service.get_access_logs()] == ["login"]


def test_user_preferences(service: UIPersonalizationService, store: MemoryStore) -> None:
    assert service.get_user_preference("page_size", 25) == 25

    service.set_user_preference("page_size", 50)
    service.set_user_preference("columns", ["name", "email"])

    assert service.get_user_preference("page_size") == 50
    assert service.get_user_preference("columns") == ["name", "email"]
    assert "user_pref_page_size" in store.keys()

    assert service.remove_user_preference("page_size") is True
    assert service.remove_user_preference("page_size") is False
    assert service.get_user_preference("page_size", 25) == 25


def test_clear_all_preferences_leaves_other_keys(service: UIPersonalizationService, store: MemoryStore) -> None:
    service.set_user_preference("a", 1)
    service.set_user_preference("b", {"nested": True})
    service.save_ui_settings(UISettings())

    assert service.clear_all_user_preferences() == 2
    assert store.keys() == [UI_SETTINGS_KEY]


def test_unreadable_preference_returns_default(service: UIPersonalizationService, store: MemoryStore) -> None:
    store.set_raw("user_pref_broken", "{oops")
    assert service.get_user_preference("broken", "fallback") == "fallback"


@pytest.mark.parametrize("name", ["dashboard:layout", "recent searches"])
def test_preference_names_may_contain_any_characters(service: UIPersonalizationService, store: MemoryStore, name: str) -> None:
    service.set_user_preference(name, {"cols": 3})

    assert service.get_user_preference(name) == {"cols": 3}
    assert f"user_pref_{name}" in store.keys()
    assert service.clear_all_user_preferences() == 1
