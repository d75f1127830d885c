"""
Клиент SmartThings REST API.

Обеспечивает:
- Заголовки авторизации (Bearer token из входящего события, не хранится)
- JSON кодирование тела запроса
- Классификацию ответа: ApiResult с ok=True/False вместо исключений

Ошибки HTTP, транспорта и декодирования тела не пробрасываются вызывающему коду:
они логируются и возвращаются как ApiResult(ok=False).
Retry не выполняется, тайм-ауты — значения aiohttp по умолчанию.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import asyncio
import json

import aiohttp

from .errors import ApiCallFailed
from .log import log


@dataclass(frozen=True)
class ApiResult:
    """
    Результат исходящего вызова.

    ok=True  — HTTP 2xx, data содержит разобранный JSON (или {} для пустого тела)
    ok=False — HTTP не 2xx или недекодируемое тело (status задан),
               транспортная ошибка (status=None)
    """
    ok: bool
    method: str
    url: str
    status: Optional[int] = None
    data: Any = None
    error: str = ""

    @classmethod
    def success(cls, method: str, url: str, status: int, data: Any) -> "ApiResult":
        return cls(ok=True, method=method, url=url, status=status, data=data)

    @classmethod
    def failure(cls, method: str, url: str, status: Optional[int], error: str) -> "ApiResult":
        return cls(ok=False, method=method, url=url, status=status, error=error)

    def as_error(self) -> Optional[ApiCallFailed]:
        """ApiCallFailed для неуспешного результата, None для успешного."""
        if self.ok:
            return None
        return ApiCallFailed(self.method, self.url, self.status, self.error)


@dataclass(frozen=True)
class DeviceCommand:
    """Команда устройству. Создаётся на каждое действие, не хранится."""
    device_id: str
    command: str
    capability: str = "switch"
    component: str = "main"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "commands": [
                {
                    "component": self.component,
                    "capability": self.capability,
                    "command": self.command,
                },
            ],
        }


class SmartThingsAPIClient:
    """Клиент для работы со SmartThings REST API."""

    def __init__(
        self,
        runtime: Any,
        base_url: str,
        module_name: str = "smartapp",
        session_factory: Optional[Callable[[], Any]] = None,
    ):
        """
        Args:
            runtime: экземпляр Runtime для доступа к logger.log
            base_url: базовый URL API (например, https://api.smartthings.com)
            module_name: имя модуля для логирования
            session_factory: фабрика aiohttp.ClientSession (подменяется в тестах)
        """
        self.runtime = runtime
        self.base_url = base_url.rstrip("/")
        self.module_name = module_name
        self._session_factory = session_factory or aiohttp.ClientSession

    def _get_headers(self, auth_token: str) -> Dict[str, str]:
        """Заголовки для запросов к SmartThings API."""
        return {
            "Authorization": f"Bearer {auth_token}",
            "Content-Type": "application/json",
        }

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _log(self, level: str, message: str, **context: Any) -> None:
        await log(self.runtime, self.module_name, level, message, **context)

    async def call(
        self,
        method: str,
        path: str,
        auth_token: str,
        body: Optional[Dict[str, Any]] = None,
        success_log: str = "",
    ) -> ApiResult:
        """
        Выполнить вызов SmartThings API.

        Args:
            method: HTTP метод (GET, POST, DELETE, ...)
            path: путь относительно base_url или абсолютный URL
            auth_token: токен из входящего события
            body: JSON тело запроса (None - без тела)
            success_log: сообщение для лога при успехе

        Returns:
            ApiResult (исключения при ошибках HTTP/транспорта не пробрасываются)
        """
        return await self._request(
            method.upper(),
            self._url(path),
            headers=self._get_headers(auth_token),
            body=body,
            success_log=success_log,
        )

    async def fetch_confirmation(self, confirmation_url: str) -> ApiResult:
        """
        Получить JSON по confirmationUrl, присланному платформой.

        URL приходит в событии CONFIRMATION, авторизация не требуется.
        Тело ответа обязано быть JSON.
        """
        return await self._request(
            "GET",
            confirmation_url,
            headers={"Accept": "application/json"},
            success_log="confirmation fetched",
            require_json=True,
        )

    async def send_device_command(self, command: DeviceCommand, auth_token: str) -> ApiResult:
        """Отправить команду устройству: POST /v1/devices/{id}/commands."""
        return await self.call(
            "POST",
            f"/v1/devices/{command.device_id}/commands",
            auth_token,
            body=command.to_payload(),
            success_log=f"device command '{command.command}' sent",
        )

    async def _request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[Dict[str, Any]] = None,
        success_log: str = "",
        require_json: bool = False,
    ) -> ApiResult:
        await self._log("debug", f"SmartThings API request: {method} {url}")

        status: Optional[int] = None
        try:
            async with self._session_factory() as session:
                kwargs: Dict[str, Any] = {"headers": headers}
                if body is not None:
                    kwargs["data"] = json.dumps(body)
                async with session.request(method, url, **kwargs) as resp:
                    status = resp.status
                    text = await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            error = f"{type(e).__name__}: {e}"
            await self._log(
                "error",
                f"Error making SmartThings request [{method} {url}]: {error}",
                error_type=type(e).__name__,
            )
            return ApiResult.failure(method, url, None, error)
        except (UnicodeDecodeError, LookupError) as e:
            # тело не декодируется заявленной (или неизвестной) кодировкой
            error = f"undecodable response body: {type(e).__name__}: {e}"
            await self._log(
                "error",
                f"Error making SmartThings request [{method} {url}]: {error}",
                status_code=status,
                error_type=type(e).__name__,
            )
            return ApiResult.failure(method, url, status, error)

        if not 200 <= status < 300:
            error_detail = text[:500] if text else "no response body"
            await self._log(
                "error",
                f"Request failed [{method} {url}] -> HTTP {status}: {error_detail}",
                status_code=status,
            )
            return ApiResult.failure(method, url, status, error_detail)

        data: Any = {}
        if text:
            try:
                data = json.loads(text)
            except ValueError as e:
                if require_json:
                    error = f"invalid JSON in response: {e}"
                    await self._log(
                        "error",
                        f"Error making SmartThings request [{method} {url}]: {error}",
                        status_code=status,
                    )
                    return ApiResult.failure(method, url, status, error)
                data = {}

        if success_log:
            await self._log("info", success_log, status_code=status)
        return ApiResult.success(method, url, status, data)
