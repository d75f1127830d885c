"""
Построение страниц конфигурации SmartApp.

Чистые функции: результат зависит только от аргументов,
каждый вызов строит новую структуру.
"""

from typing import Any, Dict, Optional

from .errors import UnknownPage, UnsupportedPhase


FIRST_PAGE_ID = "1"
SWITCH_SETTING_ID = "switch"


def build_initialize(settings: Any) -> Dict[str, Any]:
    """
    Метаданные приложения для фазы INITIALIZE.

    Args:
        settings: конфигурация процесса (app_name, app_description, app_id)
    """
    return {
        "name": settings.app_name,
        "description": settings.app_description,
        "id": settings.app_id,
        "firstPageId": FIRST_PAGE_ID,
    }


def build_page(page_id: Optional[str], current_settings: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Страница конфигурации.

    У приложения одна страница, поэтому она сразу complete.
    current_settings на содержимое страницы не влияют.

    Raises:
        UnknownPage: если page_id не "1"
    """
    if page_id != FIRST_PAGE_ID:
        raise UnknownPage(page_id)

    return {
        "pageId": FIRST_PAGE_ID,
        "name": "Configure",
        "nextPageId": None,
        "previousPageId": None,
        "complete": True,
        "sections": [
            {
                "name": "Choose a virtual switch to control the action",
                "settings": [
                    {
                        "id": SWITCH_SETTING_ID,
                        "name": "Virtual Switch",
                        "description": "Tap to select",
                        "type": "DEVICE",
                        "required": True,
                        "multiple": False,
                        "capabilities": ["switch"],
                        "permissions": ["r", "x"],
                    },
                ],
            },
        ],
    }


def build_config(
    phase: Any,
    page_id: Optional[str],
    current_settings: Optional[Dict[str, Any]],
    settings: Any,
) -> Dict[str, Any]:
    """
    Ответ на фазу конфигурации.

    Args:
        phase: "INITIALIZE" или "PAGE"
        page_id: идентификатор страницы (для PAGE)
        current_settings: настройки, накопленные на предыдущих страницах
        settings: конфигурация процесса

    Returns:
        {"initialize": {...}} или {"page": {...}}

    Raises:
        UnsupportedPhase: неизвестная фаза
        UnknownPage: неизвестная страница
    """
    if phase == "INITIALIZE":
        return {"initialize": build_initialize(settings)}
    if phase == "PAGE":
        return {"page": build_page(page_id, current_settings)}
    raise UnsupportedPhase(phase)
