"""
CoreRuntime - главный класс SmartApp Connector.

Объединяет компоненты:
- Config (неизменяемые настройки процесса)
- ServiceRegistry
- ModuleManager (logger, smartapp, api)

Между HTTP-запросами runtime не хранит доменного состояния:
всё долговременное состояние хранит платформа SmartThings.
"""

from typing import Any, Optional

from core.config import Config
from core.logger_helper import info as log_info
from core.module_manager import ModuleManager
from core.service_registry import ServiceRegistry


class CoreRuntime:
    """
    Главный класс runtime.

    Координирует работу модулей.
    Предоставляет единую точку доступа к сервисам и конфигурации.
    """

    def __init__(self, config: Config, power_controller: Optional[Any] = None):
        """
        Инициализация CoreRuntime.

        Args:
            config: неизменяемая конфигурация процесса
            power_controller: реализация выключения хоста (None - выбирается по config)
        """
        self.config = config
        self.power_controller = power_controller
        self.service_registry = ServiceRegistry()
        self.module_manager = ModuleManager(self)
        self._running = False

    @property
    def is_running(self) -> bool:
        """Запущен ли runtime."""
        return self._running

    async def start(self) -> None:
        """
        Запустить runtime.

        - регистрирует встроенные модули (если ещё не зарегистрированы)
        - запускает модули в порядке регистрации
        """
        if self._running:
            return

        await self.module_manager.register_builtin_modules(self)
        try:
            await self.module_manager.start_all()
        except Exception:
            # stop() вызывается даже при частичном старте
            await self.module_manager.stop_all()
            raise

        self._running = True
        await log_info(
            self,
            "Runtime started",
            component="runtime",
            modules=",".join(self.module_manager.list_modules()),
        )

    async def stop(self) -> None:
        """Остановить runtime: останавливает все модули."""
        if not self._running:
            return

        await log_info(self, "Runtime stopping", component="runtime")
        await self.module_manager.stop_all()
        self._running = False

    async def shutdown(self) -> None:
        """
        Полное завершение работы runtime.

        - останавливает модули
        - очищает реестры
        """
        await self.stop()
        self.module_manager.clear()
        await self.service_registry.clear()
