"""
Конфигурация SmartApp Connector.

Неизменяемый набор настроек, создаётся один раз при старте процесса
и передаётся в обработчики явно.
"""

import os
from dataclasses import dataclass


DEFAULT_API_BASE_URL = "https://api.smartthings.com"
DEFAULT_POWER_OFF_COMMAND = "sudo shutdown -h now"


@dataclass(frozen=True)
class Config:
    """Конфигурация SmartApp Connector."""
    # Метаданные приложения (отдаются платформе на фазе INITIALIZE)
    app_name: str = ""
    app_description: str = ""
    app_id: str = ""

    # HTTP сервер
    host: str = "0.0.0.0"
    port: int = 5166

    # SmartThings REST API
    api_base_url: str = DEFAULT_API_BASE_URL

    # Выключение хоста
    # Если power_off_enabled=False, команда не выполняется, только логируется
    power_off_command: str = DEFAULT_POWER_OFF_COMMAND
    power_off_enabled: bool = True

    # Тайм-аут для shutdown runtime (секунды)
    shutdown_timeout: int = 10

    # Logging
    # "text" | "json"
    log_format: str = "text"

    def validate(self) -> None:
        """
        Валидировать конфигурацию.

        Raises:
            ValueError: если конфигурация невалидна
        """
        if not isinstance(self.app_id, str) or not self.app_id:
            raise ValueError("app_id must be non-empty string (APP_ID)")

        if not isinstance(self.port, int) or self.port <= 0 or self.port > 65535:
            raise ValueError(
                f"port must be integer between 1 and 65535, got: {self.port}"
            )

        if not self.api_base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"api_base_url must start with http:// or https://, got: {self.api_base_url!r}"
            )

        if self.power_off_enabled and not self.power_off_command.strip():
            raise ValueError("power_off_command must be non-empty when power off is enabled")

        if not isinstance(self.shutdown_timeout, int) or self.shutdown_timeout <= 0:
            raise ValueError(
                f"shutdown_timeout must be positive integer, got: {self.shutdown_timeout}"
            )

        if self.log_format not in ("text", "json"):
            raise ValueError("log_format must be 'text' or 'json'")

    @classmethod
    def from_env(cls) -> "Config":
        """
        Создать конфигурацию из переменных окружения.

        Raises:
            ValueError: если конфигурация невалидна
        """
        config = cls(
            app_name=os.getenv("APP_NAME", ""),
            app_description=os.getenv("APP_DESCRIPTION", ""),
            app_id=os.getenv("APP_ID", ""),
            host=os.getenv("SMARTAPP_HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5166")),
            api_base_url=os.getenv("SMARTAPP_API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
            power_off_command=os.getenv("SMARTAPP_POWER_OFF_COMMAND", DEFAULT_POWER_OFF_COMMAND),
            power_off_enabled=os.getenv("SMARTAPP_POWER_OFF_ENABLED", "true").lower() == "true",
            shutdown_timeout=int(os.getenv("SMARTAPP_SHUTDOWN_TIMEOUT", "10")),
            log_format=(os.getenv("SMARTAPP_LOG_FORMAT") or os.getenv("LOG_FORMAT") or "text").lower(),
        )
        config.validate()
        return config
