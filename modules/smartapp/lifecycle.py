"""
Диспетчер lifecycle событий SmartApp.

Каждая фаза обрабатывается своей функцией, которая возвращает
LifecycleResponse. Состояние между запросами не хранится.

Ошибки валидации (InvalidLifecycleEvent, UnsupportedPhase, UnknownPage,
MissingDeviceSelection) пробрасываются наверх: HTTP-слой превращает их в 500.
Ошибки исходящих вызовов приходят как ApiResult(ok=False) и отражаются
в ответе со statusCode 502.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from .api_client import ApiResult, DeviceCommand, SmartThingsAPIClient
from .config_pages import build_config
from .errors import InvalidLifecycleEvent, MissingDeviceSelection
from .log import log
from .models import (
    PHASE_PAYLOADS,
    ConfigurationData,
    ConfirmationData,
    DeviceEvent,
    EventData,
    InstallData,
    LifecycleEvent,
    UninstallData,
    UpdateData,
)
from .power import PowerController
from .subscriptions import SUBSCRIPTION_NAME, SubscriptionManager, SubscriptionSpec


@dataclass(frozen=True)
class LifecycleResponse:
    """Ответ платформе: {statusCode, message, data?, ...extra}."""
    status_code: int
    message: str
    data: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"statusCode": self.status_code, "message": self.message}
        if self.data is not None:
            body["data"] = self.data
        body.update(self.extra)
        return body


def _failure_response(message: str, failures: List[ApiResult], **extra: Any) -> LifecycleResponse:
    errors = [str(result.as_error()) for result in failures]
    return LifecycleResponse(502, message, data={"errors": errors}, extra=extra)


class LifecycleDispatcher:
    """
    State machine по полю `lifecycle`.

    Args:
        runtime: экземпляр CoreRuntime (для logger.log)
        settings: неизменяемая конфигурация процесса
        api_client: клиент SmartThings API
        subscriptions: менеджер подписок
        power: выключение хоста
    """

    def __init__(
        self,
        runtime: Any,
        settings: Any,
        api_client: SmartThingsAPIClient,
        subscriptions: SubscriptionManager,
        power: PowerController,
        module_name: str = "smartapp",
    ):
        self.runtime = runtime
        self.settings = settings
        self.api_client = api_client
        self.subscriptions = subscriptions
        self.power = power
        self.module_name = module_name
        self._handlers: Dict[str, Callable[[Any], Awaitable[LifecycleResponse]]] = {
            "CONFIGURATION": self.handle_configuration,
            "CONFIGURE": self.handle_configuration,
            "CONFIRMATION": self.handle_confirmation,
            "INSTALL": self.handle_install,
            "UPDATE": self.handle_update,
            "EVENT": self.handle_event,
            "UNINSTALL": self.handle_uninstall,
        }

    async def _log(self, level: str, message: str, **context: Any) -> None:
        await log(self.runtime, self.module_name, level, message, **context)

    async def dispatch(self, raw_event: Any) -> LifecycleResponse:
        """
        Обработать входящее событие.

        Args:
            raw_event: JSON тело запроса (dict)

        Raises:
            InvalidLifecycleEvent: тело не объект или payload фазы отсутствует/невалиден
            SmartAppError: ошибки валидации в обработчиках фаз
        """
        if not isinstance(raw_event, dict):
            raise InvalidLifecycleEvent("Lifecycle event must be a JSON object")
        event = LifecycleEvent.model_validate(raw_event)

        lifecycle = event.lifecycle
        handler = self._handlers.get(lifecycle) if isinstance(lifecycle, str) else None
        if handler is None:
            await self._log("warning", f"lifecycle {lifecycle} not supported", lifecycle=str(lifecycle))
            return LifecycleResponse(200, "Lifecycle not supported")

        return await handler(self._payload(event, lifecycle))

    def _payload(self, event: LifecycleEvent, lifecycle: str) -> Any:
        key, model = PHASE_PAYLOADS[lifecycle]
        raw = event.payload(key)
        if raw is None:
            if model is UninstallData:
                return UninstallData()
            raise InvalidLifecycleEvent(f"{lifecycle} event has no {key}")
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            raise InvalidLifecycleEvent(f"{lifecycle} event has invalid {key}: {e}") from e

    async def handle_configuration(self, data: ConfigurationData) -> LifecycleResponse:
        config = build_config(data.phase, data.page_id, data.config, self.settings)
        return LifecycleResponse(200, "Configured", data=config)

    async def handle_confirmation(self, data: ConfirmationData) -> LifecycleResponse:
        confirmation_url = data.confirmation_url
        await self._log("info", f"Confirmation URL: {confirmation_url}")
        result = await self.api_client.fetch_confirmation(confirmation_url)
        if not result.ok:
            return _failure_response(
                "Confirmation failed", [result], confirmationUrl=confirmation_url
            )
        return LifecycleResponse(
            200, "Confirmed", data=result.data, extra={"confirmationUrl": confirmation_url}
        )

    async def handle_install(self, data: InstallData) -> LifecycleResponse:
        created = await self.subscriptions.create_subscription(data.installed_app, data.auth_token)
        if not created.ok:
            return _failure_response("Install failed: subscription create failed", [created])
        return LifecycleResponse(200, "Installed")

    async def handle_update(self, data: UpdateData) -> LifecycleResponse:
        deleted, created = await self.subscriptions.replace_subscriptions(
            data.installed_app, data.auth_token
        )
        failed_steps = []
        if not deleted.ok:
            failed_steps.append("subscription delete failed")
        if not created.ok:
            failed_steps.append("subscription create failed")
        if failed_steps:
            await self._log(
                "error",
                f"Update incomplete: {', '.join(failed_steps)}",
                installed_app_id=data.installed_app.installed_app_id,
            )
            return _failure_response(
                f"Update failed: {', '.join(failed_steps)}",
                [r for r in (deleted, created) if not r.ok],
            )
        return LifecycleResponse(200, "Updated")

    async def handle_event(self, data: EventData) -> LifecycleResponse:
        device_event = self._find_trigger(data)
        if device_event is None:
            return LifecycleResponse(200, "Event ignored")

        await self._log("info", "shutdown command received!")
        command = DeviceCommand(
            device_id=self._resolve_device_id(device_event, data),
            command="off",
            component=device_event.component_id,
        )
        # Сначала выключаем виртуальный переключатель, затем хост
        switched_off = await self.api_client.send_device_command(command, data.auth_token)
        self.power.power_off()

        if not switched_off.ok:
            return _failure_response("Shutdown initiated: switch off failed", [switched_off])
        return LifecycleResponse(200, "Shutdown initiated")

    async def handle_uninstall(self, data: UninstallData) -> LifecycleResponse:
        # Подписки платформа удаляет сама
        return LifecycleResponse(200, "Uninstalled!")

    @staticmethod
    def _find_trigger(data: EventData) -> Optional[DeviceEvent]:
        for event in data.events:
            device_event = event.device_event
            if device_event is not None and device_event.subscription_name == SUBSCRIPTION_NAME:
                return device_event
        return None

    @staticmethod
    def _resolve_device_id(device_event: DeviceEvent, data: EventData) -> str:
        """
        Устройство, которое нужно выключить.

        Событие приходит от устройства из подписки, поэтому берём deviceId
        из deviceEvent; если его нет, используем выбор "switch" из installedApp.

        Raises:
            MissingDeviceSelection: устройство определить нельзя
        """
        if device_event.device_id:
            return device_event.device_id
        if data.installed_app is not None:
            return SubscriptionSpec.from_installed_app(data.installed_app).device_id
        raise MissingDeviceSelection("unknown")
