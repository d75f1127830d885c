"""
SmartappModule — встроенный модуль SmartApp lifecycle.

Собирает зависимости диспетчера (API клиент, менеджер подписок,
выключение хоста) и регистрирует сервис `smartapp.handle_lifecycle`,
который вызывает HTTP-слой.
"""

from typing import Any

from core.runtime_module import RuntimeModule
from .api_client import SmartThingsAPIClient
from .lifecycle import LifecycleDispatcher, LifecycleResponse
from .power import create_power_controller
from .subscriptions import SubscriptionManager


class SmartappModule(RuntimeModule):
    """
    Модуль SmartApp.

    Не хранит состояния между запросами: каждый вызов
    smartapp.handle_lifecycle — независимая обработка события.
    """

    def __init__(self, runtime: Any):
        super().__init__(runtime)
        self.dispatcher: LifecycleDispatcher | None = None

    @property
    def name(self) -> str:
        """Уникальное имя модуля."""
        return "smartapp"

    async def register(self) -> None:
        """
        Регистрация модуля в CoreRuntime.

        Создаёт диспетчер и регистрирует сервис smartapp.handle_lifecycle.
        """
        settings = self.runtime.config
        api_client = SmartThingsAPIClient(self.runtime, settings.api_base_url, module_name=self.name)
        self.dispatcher = LifecycleDispatcher(
            self.runtime,
            settings,
            api_client,
            SubscriptionManager(api_client),
            create_power_controller(self.runtime),
            module_name=self.name,
        )
        await self.runtime.service_registry.register("smartapp.handle_lifecycle", self._handle_lifecycle)

    async def stop(self) -> None:
        """Снимает сервис smartapp.handle_lifecycle."""
        await self.runtime.service_registry.unregister("smartapp.handle_lifecycle")

    async def _handle_lifecycle(self, event: Any) -> LifecycleResponse:
        """
        Сервис smartapp.handle_lifecycle.

        Args:
            event: декодированное JSON тело входящего запроса
        """
        return await self.dispatcher.dispatch(event)
