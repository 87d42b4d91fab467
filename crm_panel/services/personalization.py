"""UI settings, access logging and free-form user preferences."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError

from ..models.common import utcnow
from ..models.settings import AccessLog, UISettings
from ..storage import KeyValueStore

logger = logging.getLogger(__name__)

UI_SETTINGS_KEY = "ui_settings"
ACCESS_LOGS_KEY = "access_logs"
USER_PREFERENCE_PREFIX = "user_pref_"

_SETTINGS_ADAPTER = TypeAdapter(UISettings)
_ACCESS_LOG_ADAPTER = TypeAdapter(List[AccessLog])
_PREFERENCE_ADAPTER = TypeAdapter(Any)


class UIPersonalizationService:
    def __init__(self, store: KeyValueStore, *, access_log_limit: int = 1000) -> None:
        self._store = store
        self._access_log_limit = access_log_limit

    # ------------------------------------------------------------------
    # UI settings
    # ------------------------------------------------------------------

    def get_ui_settings(self) -> UISettings:
        try:
            settings = self._store.get_item(UI_SETTINGS_KEY, _SETTINGS_ADAPTER)
        except ValidationError:
            logger.warning("Stored UI settings are unreadable; using defaults.")
            return UISettings()
        return settings if settings is not None else UISettings()

    def save_ui_settings(self, settings: UISettings) -> UISettings:
        settings.last_updated = utcnow()
        self._store.set_item(UI_SETTINGS_KEY, settings, _SETTINGS_ADAPTER)
        return settings

    # ------------------------------------------------------------------
    # Access log
    # ------------------------------------------------------------------

    def get_access_logs(self) -> List[AccessLog]:
        try:
            logs = self._store.get_item(ACCESS_LOGS_KEY, _ACCESS_LOG_ADAPTER)
        except ValidationError:
            logger.warning("Stored access log is unreadable; starting a new one.")
            return []
        return logs or []

    def log_access(self, action: str, details: str = "") -> AccessLog:
        """Append an access entry, keeping only the newest ``access_log_limit`` entries."""
        entry = AccessLog(action=action, details=details)
        logs = self.get_access_logs()
        logs.append(entry)
        if len(logs) > self._access_log_limit:
            logs = logs[-self._access_log_limit :]
        self._store.set_item(ACCESS_LOGS_KEY, logs, _ACCESS_LOG_ADAPTER)
        return entry

    def clear_access_logs(self) -> None:
        self._store.remove(ACCESS_LOGS_KEY)

    # ------------------------------------------------------------------
    # User preferences
    # ------------------------------------------------------------------

    @staticmethod
    def _preference_key(key: str) -> str:
        return f"{USER_PREFERENCE_PREFIX}{key}"

    def get_user_preference(self, key: str, default: Optional[Any] = None) -> Any:
        try:
            value = self._store.get_item(self._preference_key(key), _PREFERENCE_ADAPTER)
        except ValidationError:
            logger.warning("User preference '%s' is unreadable; using the default.", key)
            return default
        return default if value is None else value

    def set_user_preference(self, key: str, value: Any) -> None:
        self._store.set_item(self._preference_key(key), value, _PREFERENCE_ADAPTER)

    def remove_user_preference(self, key: str) -> bool:
        return self._store.remove(self._preference_key(key))

    def clear_all_user_preferences(self) -> int:
        keys = [key for key in self._store.keys() if key.startswith(USER_PREFERENCE_PREFIX)]
        for key in keys:
            self._store.remove(key)
        return len(keys)
