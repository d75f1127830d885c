"""
Управление подписками установленного приложения.

Подписка одна на установку: изменение атрибута switch выбранного
устройства на "on". Подписки хранит платформа, локально они не сохраняются.

UPDATE выполняется как delete-then-create. Компенсации нет: если удаление
прошло, а создание упало, у установки нет подписок до следующего UPDATE.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .api_client import ApiResult, SmartThingsAPIClient
from .config_pages import SWITCH_SETTING_ID
from .errors import MissingDeviceSelection
from .models import InstalledApp


SUBSCRIPTION_NAME = "switch_on_subscription"


@dataclass(frozen=True)
class SubscriptionSpec:
    """Параметры подписки, выведенные из конфигурации установки."""
    installed_app_id: str
    device_id: str
    component_id: str
    capability: str = "switch"
    attribute: str = "switch"
    value: str = "on"
    name: str = SUBSCRIPTION_NAME
    state_change_only: bool = True

    @classmethod
    def from_installed_app(cls, installed_app: InstalledApp) -> "SubscriptionSpec":
        """
        Берёт первое устройство из настройки "switch".

        Raises:
            MissingDeviceSelection: настройка отсутствует, пуста или без deviceConfig
        """
        selections = installed_app.config.get(SWITCH_SETTING_ID) or []
        device_config = selections[0].device_config if selections else None
        if device_config is None:
            raise MissingDeviceSelection(installed_app.installed_app_id, SWITCH_SETTING_ID)

        return cls(
            installed_app_id=installed_app.installed_app_id,
            device_id=device_config.device_id,
            component_id=device_config.component_id,
        )

    def to_request(self) -> Dict[str, Any]:
        return {
            "sourceType": "DEVICE",
            "device": {
                "componentId": self.component_id,
                "deviceId": self.device_id,
                "capability": self.capability,
                "attribute": self.attribute,
                "stateChangeOnly": self.state_change_only,
                "subscriptionName": self.name,
                "value": self.value,
            },
        }


def subscriptions_path(installed_app_id: str) -> str:
    return f"/installedapps/{installed_app_id}/subscriptions"


class SubscriptionManager:
    """Создание и удаление подписок через SmartThings API."""

    def __init__(self, api_client: SmartThingsAPIClient):
        self.api_client = api_client

    async def create_subscription(self, installed_app: InstalledApp, auth_token: str) -> ApiResult:
        """
        Создать подписку на включение выбранного переключателя.

        Raises:
            MissingDeviceSelection: устройство не выбрано (исходящих вызовов нет)
        """
        spec = SubscriptionSpec.from_installed_app(installed_app)
        return await self.api_client.call(
            "POST",
            subscriptions_path(spec.installed_app_id),
            auth_token,
            body=spec.to_request(),
            success_log="subscription created",
        )

    async def delete_subscriptions(self, installed_app_id: str, auth_token: str) -> ApiResult:
        """Удалить все подписки установки."""
        return await self.api_client.call(
            "DELETE",
            subscriptions_path(installed_app_id),
            auth_token,
            success_log="subscriptions deleted",
        )

    async def replace_subscriptions(
        self, installed_app: InstalledApp, auth_token: str
    ) -> Tuple[ApiResult, ApiResult]:
        """
        Пересоздать подписку: удаление завершается до начала создания.

        Создание выполняется и после неудачного удаления.

        Returns:
            (результат удаления, результат создания)

        Raises:
            MissingDeviceSelection: устройство не выбрано (после удаления)
        """
        deleted = await self.delete_subscriptions(installed_app.installed_app_id, auth_token)
        created = await self.create_subscription(installed_app, auth_token)
        return deleted, created
