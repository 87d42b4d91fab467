from datetime import datetime
from typing import Any, Dict

from pydantic import Field

from .common import CRMBaseModel, _create_id, utcnow


class UISettings(CRMBaseModel):
    theme: str = "light"
    dark_mode: bool = False
    primary_color: str = "blue"
    language: str = "en"
    compact_mode: bool = False
    show_sidebar: bool = True
    sidebar_width: int = Field(default=240, gt=0)
    custom_settings: Dict[str, Any] = Field(default_factory=dict)
    last_updated: datetime = Field(default_factory=utcnow)


class AccessLog(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    timestamp: datetime = Field(default_factory=utcnow)
    action: str = ""
    details: str = ""
    user_agent: str = ""
    ip_address: str = ""
    url: str = ""
