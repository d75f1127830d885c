"""
Точка входа SmartApp Connector.

Загружает конфигурацию из окружения (и .env), запускает runtime
и ждёт сигнала остановки.
"""

import asyncio
import signal
import sys

from dotenv import load_dotenv

from core.config import Config
from core.runtime import CoreRuntime


async def main() -> None:
    """Главная функция запуска."""

    # .env не перекрывает уже заданные переменные окружения
    load_dotenv()
    try:
        config = Config.from_env()
    except ValueError as e:
        print(f"[Runtime] Некорректная конфигурация: {e}", file=sys.stderr)
        raise SystemExit(2)

    runtime = CoreRuntime(config)

    shutdown_event = asyncio.Event()

    def signal_handler():
        """Обработчик сигналов остановки."""
        print("\n[Runtime] Получен сигнал остановки...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, signal_handler)

    try:
        print("[Runtime] Запуск SmartApp Connector...")
        await runtime.start()
        await shutdown_event.wait()
    finally:
        print("[Runtime] Остановка SmartApp Connector...")
        try:
            await asyncio.wait_for(
                runtime.shutdown(),
                timeout=config.shutdown_timeout
            )
            print("[Runtime] SmartApp Connector остановлен")
        except asyncio.TimeoutError:
            print("[Runtime] Таймаут при остановке Runtime")


def run() -> None:
    """Точка входа console script."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
