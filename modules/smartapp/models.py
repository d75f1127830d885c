"""
Pydantic модели входящих lifecycle событий SmartThings.

Поля соответствуют JSON платформы (camelCase), в Python доступны в snake_case.
Неизвестные поля допускаются: платформа добавляет их без предупреждения.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _PlatformModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class DeviceConfig(_PlatformModel):
    device_id: str = Field(alias="deviceId")
    component_id: str = Field(default="main", alias="componentId")


class DeviceSelection(_PlatformModel):
    value_type: Optional[str] = Field(default=None, alias="valueType")
    device_config: Optional[DeviceConfig] = Field(default=None, alias="deviceConfig")


class InstalledApp(_PlatformModel):
    installed_app_id: str = Field(alias="installedAppId")
    location_id: Optional[str] = Field(default=None, alias="locationId")
    # setting id -> список выбранных значений
    config: Dict[str, List[DeviceSelection]] = Field(default_factory=dict)


class ConfigurationData(_PlatformModel):
    installed_app_id: Optional[str] = Field(default=None, alias="installedAppId")
    phase: str
    page_id: Optional[str] = Field(default=None, alias="pageId")
    previous_page_id: Optional[str] = Field(default=None, alias="previousPageId")
    # На фазе INITIALIZE настроек ещё нет
    config: Dict[str, Any] = Field(default_factory=dict)


class ConfirmationData(_PlatformModel):
    app_id: Optional[str] = Field(default=None, alias="appId")
    confirmation_url: str = Field(alias="confirmationUrl")


class InstallData(_PlatformModel):
    auth_token: str = Field(alias="authToken")
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")
    installed_app: InstalledApp = Field(alias="installedApp")


class UpdateData(InstallData):
    pass


class DeviceEvent(_PlatformModel):
    subscription_name: Optional[str] = Field(default=None, alias="subscriptionName")
    device_id: Optional[str] = Field(default=None, alias="deviceId")
    component_id: str = Field(default="main", alias="componentId")
    capability: Optional[str] = None
    attribute: Optional[str] = None
    value: Any = None


class Event(_PlatformModel):
    event_type: Optional[str] = Field(default=None, alias="eventType")
    device_event: Optional[DeviceEvent] = Field(default=None, alias="deviceEvent")


class EventData(_PlatformModel):
    auth_token: str = Field(alias="authToken")
    installed_app: Optional[InstalledApp] = Field(default=None, alias="installedApp")
    events: List[Event] = Field(default_factory=list)


class UninstallData(_PlatformModel):
    installed_app: Optional[InstalledApp] = Field(default=None, alias="installedApp")


class LifecycleEvent(_PlatformModel):
    """
    Конверт входящего события lifecycle.

    Payload фазы (configurationData, installData, ...) остаётся в extra полях
    и валидируется обработчиком своей фазы: диспетчер читает только payload,
    соответствующий `lifecycle`. Значение `lifecycle` не ограничивается
    перечислением, неизвестные фазы обрабатывает диспетчер.
    """

    lifecycle: Any = None
    # служебные поля конверта диспетчер не читает, тип не проверяется
    execution_id: Any = Field(default=None, alias="executionId")
    locale: Any = None
    version: Any = None

    def payload(self, key: str) -> Any:
        """Сырой payload по ключу JSON (например, "installData") или None."""
        return (self.model_extra or {}).get(key)


# Ключ payload и модель для каждой фазы
PHASE_PAYLOADS = {
    "CONFIGURATION": ("configurationData", ConfigurationData),
    "CONFIGURE": ("configurationData", ConfigurationData),
    "CONFIRMATION": ("confirmationData", ConfirmationData),
    "INSTALL": ("installData", InstallData),
    "UPDATE": ("updateData", UpdateData),
    "EVENT": ("eventData", EventData),
    "UNINSTALL": ("uninstallData", UninstallData),
}
