"""
Тесты для LifecycleDispatcher.

Проверяют:
- Обработку каждой фазы lifecycle
- Отражение ошибок исходящих вызовов в ответе (502)
- Порядок вызовов для UPDATE и EVENT
- Отсутствие побочных эффектов для неизвестных фаз
"""

import json

import pytest

from conftest import FakeResponse, installed_app_payload
from modules.smartapp.errors import (
    InvalidLifecycleEvent,
    MissingDeviceSelection,
    UnknownPage,
    UnsupportedPhase,
)
from modules.smartapp.lifecycle import LifecycleDispatcher, LifecycleResponse
from modules.smartapp.subscriptions import SubscriptionManager


@pytest.fixture
def dispatcher(runtime, settings, api_client, power):
    return LifecycleDispatcher(runtime, settings, api_client, SubscriptionManager(api_client), power)


def device_event(subscription_name="switch_on_subscription", device_id="device-1", **extra):
    event = {
        "subscriptionName": subscription_name,
        "deviceId": device_id,
        "componentId": "main",
        "capability": "switch",
        "attribute": "switch",
        "value": "on",
        **extra,
    }
    return {"eventType": "DEVICE_EVENT", "deviceEvent": event}


def event_lifecycle(*events, installed_app=None):
    data = {"authToken": "event-token", "events": list(events)}
    if installed_app is not None:
        data["installedApp"] = installed_app
    return {"lifecycle": "EVENT", "eventData": data}


@pytest.mark.asyncio
async def test_configuration_initialize(dispatcher, transport):
    response = await dispatcher.dispatch({
        "lifecycle": "CONFIGURATION",
        "configurationData": {"phase": "INITIALIZE"},
    })

    assert response.status_code == 200
    assert response.message == "Configured"
    assert response.data["initialize"]["firstPageId"] == "1"
    assert response.data["initialize"]["id"] == "pc-shutdown-app"
    assert transport.requests == []


@pytest.mark.asyncio
async def test_configure_alias_builds_page(dispatcher):
    response = await dispatcher.dispatch({
        "lifecycle": "CONFIGURE",
        "configurationData": {"phase": "PAGE", "pageId": "1", "config": {}},
    })

    assert response.data["page"]["complete"] is True


@pytest.mark.asyncio
async def test_configuration_errors_propagate(dispatcher):
    with pytest.raises(UnknownPage):
        await dispatcher.dispatch({
            "lifecycle": "CONFIGURATION",
            "configurationData": {"phase": "PAGE", "pageId": "2"},
        })
    with pytest.raises(UnsupportedPhase):
        await dispatcher.dispatch({
            "lifecycle": "CONFIGURATION",
            "configurationData": {"phase": "FINALIZE"},
        })


@pytest.mark.asyncio
async def test_confirmation_forwards_fetched_body(dispatcher, transport):
    transport.responses.append(FakeResponse(200, '{"targetUrl": "https://pc.example.test"}'))

    response = await dispatcher.dispatch({
        "lifecycle": "CONFIRMATION",
        "confirmationData": {"appId": "a", "confirmationUrl": "https://confirm.example.test/x"},
    })

    assert response.status_code == 200
    assert response.data == {"targetUrl": "https://pc.example.test"}
    body = response.to_body()
    assert body["confirmationUrl"] == "https://confirm.example.test/x"
    assert transport.requests[0]["url"] == "https://confirm.example.test/x"


@pytest.mark.asyncio
async def test_confirmation_fetch_failure_is_reported(dispatcher, transport):
    transport.responses.append(FakeResponse(404, "gone"))

    response = await dispatcher.dispatch({
        "lifecycle": "CONFIRMATION",
        "confirmationData": {"confirmationUrl": "https://confirm.example.test/x"},
    })

    assert response.status_code == 502
    assert response.extra["confirmationUrl"] == "https://confirm.example.test/x"
    assert "HTTP 404" in response.data["errors"][0]


@pytest.mark.asyncio
async def test_install_creates_subscription(dispatcher, transport):
    response = await dispatcher.dispatch({
        "lifecycle": "INSTALL",
        "installData": {"authToken": "install-token", "installedApp": installed_app_payload()},
    })

    assert response.to_body() == {"statusCode": 200, "message": "Installed"}
    request = transport.requests[0]
    assert request["method"] == "POST"
    assert request["headers"]["Authorization"] == "Bearer install-token"


@pytest.mark.asyncio
async def test_install_failure_is_reported(dispatcher, transport):
    transport.responses.append(FakeResponse(401, "unauthorized"))

    response = await dispatcher.dispatch({
        "lifecycle": "INSTALL",
        "installData": {"authToken": "t", "installedApp": installed_app_payload()},
    })

    assert response.status_code == 502
    assert response.message == "Install failed: subscription create failed"


@pytest.mark.asyncio
async def test_install_without_device_raises_and_makes_no_calls(dispatcher, transport):
    with pytest.raises(MissingDeviceSelection):
        await dispatcher.dispatch({
            "lifecycle": "INSTALL",
            "installData": {"authToken": "t", "installedApp": installed_app_payload(device_id=None)},
        })
    assert transport.requests == []


@pytest.mark.asyncio
async def test_update_deletes_then_creates(dispatcher, journal):
    response = await dispatcher.dispatch({
        "lifecycle": "UPDATE",
        "updateData": {"authToken": "t", "installedApp": installed_app_payload(installed_app_id="app-9")},
    })

    assert response.to_body() == {"statusCode": 200, "message": "Updated"}
    assert journal == [
        ("request", "DELETE", "https://api.example.test/installedapps/app-9/subscriptions"),
        ("request", "POST", "https://api.example.test/installedapps/app-9/subscriptions"),
    ]


@pytest.mark.asyncio
async def test_update_reports_failed_delete(dispatcher, transport, journal, registry):
    transport.responses.append(FakeResponse(500, "server error"))

    response = await dispatcher.dispatch({
        "lifecycle": "UPDATE",
        "updateData": {"authToken": "t", "installedApp": installed_app_payload()},
    })

    assert response.status_code == 502
    assert response.message == "Update failed: subscription delete failed"
    assert len(response.data["errors"]) == 1
    assert [entry[1] for entry in journal] == ["DELETE", "POST"]
    assert any("Update incomplete" in log["message"] for log in registry.logs)


@pytest.mark.asyncio
async def test_update_reports_both_failures(dispatcher, transport):
    transport.responses.extend([FakeResponse(500, "a"), FakeResponse(422, "b")])

    response = await dispatcher.dispatch({
        "lifecycle": "UPDATE",
        "updateData": {"authToken": "t", "installedApp": installed_app_payload()},
    })

    assert response.message == "Update failed: subscription delete failed, subscription create failed"
    assert len(response.data["errors"]) == 2


@pytest.mark.asyncio
async def test_event_turns_switch_off_then_powers_off(dispatcher, transport, journal, power):
    response = await dispatcher.dispatch(event_lifecycle(device_event(device_id="dev-42")))

    assert response.to_body() == {"statusCode": 200, "message": "Shutdown initiated"}
    assert journal == [
        ("request", "POST", "https://api.example.test/v1/devices/dev-42/commands"),
        ("power_off",),
    ]
    request = transport.requests[0]
    assert request["headers"]["Authorization"] == "Bearer event-token"
    assert json.loads(request["data"])["commands"][0]["command"] == "off"
    assert power.calls == 1


@pytest.mark.asyncio
async def test_event_with_other_subscription_does_nothing(dispatcher, transport, power):
    response = await dispatcher.dispatch(event_lifecycle(device_event(subscription_name="other")))

    assert response.message == "Event ignored"
    assert transport.requests == []
    assert power.calls == 0


@pytest.mark.asyncio
async def test_event_without_device_events_does_nothing(dispatcher, transport, power):
    response = await dispatcher.dispatch(event_lifecycle({"eventType": "TIMER_EVENT"}))

    assert response.status_code == 200
    assert transport.requests == []
    assert power.calls == 0


@pytest.mark.asyncio
async def test_event_uses_installed_app_device_when_event_has_none(dispatcher, journal):
    await dispatcher.dispatch(event_lifecycle(
        device_event(device_id=None),
        installed_app=installed_app_payload(device_id="from-config"),
    ))

    assert journal[0] == ("request", "POST", "https://api.example.test/v1/devices/from-config/commands")
    assert journal[1] == ("power_off",)


@pytest.mark.asyncio
async def test_event_switch_off_failure_still_powers_off(dispatcher, transport, journal, power):
    transport.responses.append(FakeResponse(500, "device offline"))

    response = await dispatcher.dispatch(event_lifecycle(device_event()))

    assert response.status_code == 502
    assert response.message == "Shutdown initiated: switch off failed"
    assert journal[-1] == ("power_off",)
    assert power.calls == 1


@pytest.mark.asyncio
async def test_event_undecodable_switch_off_response_still_powers_off(dispatcher, transport, journal, power):
    transport.responses.append(FakeResponse(200, text_exc=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")))

    response = await dispatcher.dispatch(event_lifecycle(device_event()))

    assert response.status_code == 502
    assert response.message == "Shutdown initiated: switch off failed"
    assert journal == [
        ("request", "POST", "https://api.example.test/v1/devices/device-1/commands"),
        ("power_off",),
    ]
    assert power.calls == 1


@pytest.mark.asyncio
async def test_envelope_fields_of_any_type_do_not_affect_known_phase(dispatcher, transport):
    response = await dispatcher.dispatch({"lifecycle": "UNINSTALL", "executionId": 7, "locale": ["en"], "version": 1.0})

    assert response.to_body() == {"statusCode": 200, "message": "Uninstalled!"}
    assert transport.requests == []


@pytest.mark.asyncio
async def test_uninstall_acks_without_calls(dispatcher, transport, power):
    response = await dispatcher.dispatch({"lifecycle": "UNINSTALL"})

    assert response.to_body() == {"statusCode": 200, "message": "Uninstalled!"}
    assert transport.requests == []
    assert power.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("lifecycle", ["PING", "OAUTH_CALLBACK", "", None, 42, ["EVENT"]])
@pytest.mark.parametrize("envelope", [
    {},
    {"executionId": 123, "locale": 5},
    {"executionId": None, "version": {"major": 1}},
])
async def test_unknown_lifecycle_logs_once_without_side_effects(dispatcher, transport, power, registry, lifecycle, envelope):
    response = await dispatcher.dispatch({"lifecycle": lifecycle, "pingData": {"challenge": "x"}, **envelope})

    assert isinstance(response, LifecycleResponse)
    assert response.status_code == 200
    assert transport.requests == []
    assert power.calls == 0
    assert len(registry.logs) == 1
    assert "not supported" in registry.logs[0]["message"]


@pytest.mark.asyncio
@pytest.mark.parametrize("event", [
    "not an object",
    {"lifecycle": "INSTALL"},
    {"lifecycle": "INSTALL", "installData": {"installedApp": installed_app_payload()}},
    {"lifecycle": "CONFIRMATION", "confirmationData": {}},
    {"lifecycle": "EVENT"},
])
async def test_malformed_event_raises(dispatcher, transport, event):
    with pytest.raises(InvalidLifecycleEvent):
        await dispatcher.dispatch(event)
    assert transport.requests == []
