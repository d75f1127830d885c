"""
ApiModule — встроенный модуль HTTP endpoint.

Создаёт FastAPI приложение с webhook роутером и запускает uvicorn
в event loop runtime. Сигналы остановки обрабатывает main.py,
uvicorn их не перехватывает.
"""

from typing import Any
import asyncio
import contextlib

from fastapi import FastAPI
import uvicorn

from core.runtime_module import RuntimeModule
from .router import create_webhook_router


class _EmbeddedServer(uvicorn.Server):
    """uvicorn.Server без собственной обработки сигналов."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield


class ApiModule(RuntimeModule):
    """
    Модуль HTTP endpoint.

    Маршруты регистрируются в register(), сервер стартует в start().
    """

    # Сколько ждать готовности uvicorn при старте (секунды)
    STARTUP_TIMEOUT = 10.0

    @property
    def name(self) -> str:
        """Уникальное имя модуля."""
        return "api"

    def __init__(self, runtime: Any):
        """Инициализация модуля."""
        super().__init__(runtime)
        self.app: FastAPI | None = None
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task | None = None

    async def register(self) -> None:
        """
        Регистрация модуля в CoreRuntime.

        Создаёт FastAPI приложение и подключает webhook роутер.
        """
        self.app = FastAPI(
            title="SmartApp Connector",
            version="0.1.0",
            openapi_url="/openapi.json"
        )
        self.app.include_router(create_webhook_router(self.runtime))

    async def start(self) -> None:
        """
        Запуск модуля.

        Запускает uvicorn и ждёт, пока сервер начнёт принимать соединения.

        Raises:
            RuntimeError: если сервер не смог стартовать (например, порт занят)
        """
        if self.app is None:
            return

        cfg = self.runtime.config
        config = uvicorn.Config(self.app, host=cfg.host, port=cfg.port, log_level="info")
        self._server = _EmbeddedServer(config)
        self._task = asyncio.create_task(self._serve())

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.STARTUP_TIMEOUT
        while not self._server.started:
            if self._task.done():
                # Пробрасываем ошибку запуска
                self._task.result()
                raise RuntimeError("uvicorn exited during startup")
            if loop.time() > deadline:
                raise RuntimeError(f"uvicorn did not start within {self.STARTUP_TIMEOUT}s")
            await asyncio.sleep(0.05)

        await self.runtime.service_registry.call(
            "logger.log",
            level="info",
            message=f"SmartThings SmartApp Connector listening on port {cfg.port}",
            module="api",
        )

    async def _serve(self) -> None:
        try:
            await self._server.serve()
        except SystemExit as e:
            # uvicorn вызывает sys.exit(1) при ошибке привязки порта
            raise RuntimeError(
                f"uvicorn exited during startup (port {self.runtime.config.port} may be in use)"
            ) from e

    async def stop(self) -> None:
        """
        Остановка модуля.

        Останавливает HTTP сервер.
        """
        if self._server is not None:
            self._server.should_exit = True
        if self._task is not None and not self._task.done():
            try:
                await asyncio.wait_for(self._task, timeout=5)
            except asyncio.TimeoutError:
                self._task.cancel()
        self._task = None
        self._server = None
