import sys
import pathlib
from types import SimpleNamespace

import pytest

# Ensure repository root is on sys.path so packages (core, modules) import correctly
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.config import Config
from modules.smartapp.api_client import SmartThingsAPIClient
from modules.smartapp.power import PowerController


class FakeRegistry:
    """Реестр сервисов с записью логов вместо вывода."""

    def __init__(self):
        self._services = {}
        self.logs = []
        self._services["logger.log"] = self._record_log

    async def _record_log(self, level, message, **context):
        self.logs.append({"level": level, "message": message, **context})

    async def register(self, name, func):
        if name in self._services:
            raise ValueError(f"duplicate service {name}")
        self._services[name] = func

    async def unregister(self, name):
        self._services.pop(name, None)

    async def has_service(self, name):
        return name in self._services

    async def call(self, name, *args, **kwargs):
        func = self._services.get(name)
        if func is None:
            raise ValueError("service not found")
        return await func(*args, **kwargs)


class FakeResponse:
    """Ответ aiohttp; text_exc пробрасывается при чтении тела."""

    def __init__(self, status=200, text="", text_exc=None):
        self.status = status
        self._text = text
        self._text_exc = text_exc

    async def text(self):
        if self._text_exc is not None:
            raise self._text_exc
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeTransport:
    """
    Подмена aiohttp.ClientSession.

    responses — очередь FakeResponse или исключений; когда очередь пуста,
    отвечает 200 с пустым телом. Все запросы пишутся в journal.
    """

    def __init__(self, journal=None, responses=None):
        self.journal = journal if journal is not None else []
        self.responses = list(responses or [])
        self.requests = []

    def session(self):
        return _FakeSession(self)


class _FakeSession:
    def __init__(self, transport):
        self._transport = transport

    def request(self, method, url, **kwargs):
        self._transport.requests.append({"method": method, "url": url, **kwargs})
        self._transport.journal.append(("request", method, url))
        if self._transport.responses:
            response = self._transport.responses.pop(0)
        else:
            response = FakeResponse(200, "")
        if isinstance(response, BaseException):
            raise response
        return response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class RecordingPowerController(PowerController):
    def __init__(self, journal=None):
        self.journal = journal if journal is not None else []
        self.calls = 0

    def power_off(self):
        self.calls += 1
        self.journal.append(("power_off",))


@pytest.fixture
def settings():
    return Config(
        app_name="PC Shutdown",
        app_description="Turns the PC off from a virtual switch",
        app_id="pc-shutdown-app",
        api_base_url="https://api.example.test",
    )


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def journal():
    return []


@pytest.fixture
def transport(journal):
    return FakeTransport(journal)


@pytest.fixture
def power(journal):
    return RecordingPowerController(journal)


@pytest.fixture
def runtime(registry, settings, power):
    return SimpleNamespace(service_registry=registry, config=settings, power_controller=power)


@pytest.fixture
def api_client(runtime, settings, transport):
    return SmartThingsAPIClient(runtime, settings.api_base_url, session_factory=transport.session)


def installed_app_payload(installed_app_id="app-1", device_id="device-1", component_id="main"):
    switch = []
    if device_id is not None:
        switch.append({
            "valueType": "DEVICE",
            "deviceConfig": {"deviceId": device_id, "componentId": component_id},
        })
    return {
        "installedAppId": installed_app_id,
        "locationId": "location-1",
        "config": {"switch": switch},
    }
