"""
Ошибки SmartApp.

Иерархия:
    SmartAppError
    ├── InvalidLifecycleEvent      — payload не соответствует фазе lifecycle
    ├── ConfigurationError
    │   ├── UnsupportedPhase       — фаза конфигурации не INITIALIZE/PAGE
    │   └── UnknownPage            — запрошена несуществующая страница
    ├── MissingDeviceSelection     — в конфигурации нет выбранного устройства "switch"
    └── ApiCallFailed              — исходящий вызов SmartThings API не удался
"""

from typing import Optional


class SmartAppError(Exception):
    """Базовая ошибка SmartApp."""


class InvalidLifecycleEvent(SmartAppError):
    """Событие lifecycle не содержит payload, нужный для его фазы."""


class ConfigurationError(SmartAppError):
    """Некорректный запрос конфигурации."""


class UnsupportedPhase(ConfigurationError):
    """Фаза конфигурации не поддерживается."""

    def __init__(self, phase: object):
        self.phase = phase
        super().__init__(f"Unsupported config phase: {phase}")


class UnknownPage(ConfigurationError):
    """Страница конфигурации не существует."""

    def __init__(self, page_id: object):
        self.page_id = page_id
        super().__init__(f"Unsupported page name: {page_id}")


class MissingDeviceSelection(SmartAppError):
    """В конфигурации установленного приложения не выбрано устройство."""

    def __init__(self, installed_app_id: str, setting_id: str = "switch"):
        self.installed_app_id = installed_app_id
        self.setting_id = setting_id
        super().__init__(
            f"Installed app {installed_app_id} has no device selected for setting '{setting_id}'"
        )


class ApiCallFailed(SmartAppError):
    """
    Исходящий вызов SmartThings API завершился ошибкой.

    status=None означает транспортную ошибку (сеть, таймаут, битый ответ).
    """

    def __init__(self, method: str, url: str, status: Optional[int] = None, detail: str = ""):
        self.method = method
        self.url = url
        self.status = status
        self.detail = detail
        where = f"HTTP {status}" if status is not None else "transport error"
        super().__init__(f"SmartThings API {method} {url} failed: {where}: {detail}")
