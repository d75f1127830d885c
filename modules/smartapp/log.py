"""
Логирование компонентов smartapp через сервис logger.log.

Ошибка логирования не прерывает обработку события.
"""

from typing import Any


async def log(runtime: Any, module_name: str, level: str, message: str, **context: Any) -> None:
    try:
        await runtime.service_registry.call(
            "logger.log",
            level=level,
            message=message,
            module=module_name,
            **context
        )
    except Exception:
        pass
