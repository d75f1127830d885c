"""
Logger Helper - простой wrapper для логирования в core компонентах.

ВАЖНО: Этот helper ТОЛЬКО для core компонентов (runtime, module_manager).
Модули в modules/* логируют напрямую через публичный сервис:
    await runtime.service_registry.call("logger.log", level="info", message="...", module="...")

LoggerModule регистрируется первым (BUILTIN_MODULES), поэтому fallback
на stderr нужен только до его регистрации и после остановки runtime.

Реальная логика логирования находится в modules/logger/module.py.
"""

import sys
from typing import Optional, Any


async def log(runtime: Optional[Any], level: str, message: str, **context: Any) -> None:
    """
    Записать лог сообщение через LoggerModule.

    Args:
        runtime: экземпляр CoreRuntime (если None - используется stderr)
        level: уровень логирования (debug, info, warning, error)
        message: сообщение
        **context: дополнительный контекст
    """
    level = (level or "info").lower()
    if level not in ("debug", "info", "warning", "error"):
        level = "info"

    if runtime is not None:
        try:
            await runtime.service_registry.call(
                "logger.log",
                level=level,
                message=message,
                **context
            )
            return
        except Exception:
            # logger.log ещё не зарегистрирован (или уже снят) - fallback на stderr
            pass

    log_message = f"[{level.upper()}] {message}"
    if context:
        log_message += f" {context}"
    print(log_message, file=sys.stderr)


async def info(runtime: Optional[Any], message: str, **context: Any) -> None:
    """Логировать info сообщение."""
    await log(runtime, "info", message, **context)


async def error(runtime: Optional[Any], message: str, **context: Any) -> None:
    """Логировать error сообщение."""
    await log(runtime, "error", message, **context)
