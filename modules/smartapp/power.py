"""
Выключение локального хоста.

PowerController — внедряемая возможность с одним методом power_off().
Вызов fire-and-forget: диспетчер не ждёт завершения команды
и не подтверждает результат платформе.
"""

import asyncio
import shlex
from abc import ABC, abstractmethod
from typing import Any, Set

from .log import log


class PowerController(ABC):
    """Выключение хоста."""

    @abstractmethod
    def power_off(self) -> None:
        """Инициировать выключение. Не блокирует и не возвращает результат."""
        pass


class _LoggingController(PowerController):
    def __init__(self, runtime: Any, module_name: str = "smartapp"):
        self.runtime = runtime
        self.module_name = module_name
        # Ссылки на фоновые задачи, иначе их может собрать GC
        self._tasks: Set[asyncio.Task] = set()

    def _spawn(self, coro: Any) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _log(self, level: str, message: str, **context: Any) -> None:
        await log(self.runtime, self.module_name, level, message, **context)


class ShellPowerController(_LoggingController):
    """
    Выполняет команду выключения (по умолчанию `sudo shutdown -h now`).

    Команда запускается в фоновой задаче текущего event loop;
    stdout/stderr и код возврата логируются по завершении.
    """

    def __init__(self, runtime: Any, command: str, module_name: str = "smartapp"):
        super().__init__(runtime, module_name)
        self.argv = shlex.split(command)

    def power_off(self) -> None:
        self._spawn(self._run())

    async def _run(self) -> None:
        try:
            process = await asyncio.create_subprocess_exec(
                *self.argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            await self._log("error", f"Shutdown error: {e}", command=" ".join(self.argv))
            return

        if process.returncode != 0:
            await self._log(
                "error",
                f"Shutdown command exited with code {process.returncode}",
                command=" ".join(self.argv),
            )
        if stderr:
            await self._log("error", f"Shutdown stderr: {stderr.decode(errors='replace').strip()}")
        await self._log("info", f"Shutdown stdout: {stdout.decode(errors='replace').strip()}")


class NoopPowerController(_LoggingController):
    """Dry-run: только логирует запрос на выключение."""

    def power_off(self) -> None:
        self._spawn(self._log("warning", "Power off requested, but power off is disabled (dry-run)"))


def create_power_controller(runtime: Any) -> PowerController:
    """
    Выбрать реализацию по конфигурации runtime.

    Явно переданный runtime.power_controller имеет приоритет (тесты, встраивание).
    """
    controller = getattr(runtime, "power_controller", None)
    if controller is not None:
        return controller
    config = runtime.config
    if not config.power_off_enabled:
        return NoopPowerController(runtime)
    return ShellPowerController(runtime, config.power_off_command)
