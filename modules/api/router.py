"""
API Router SmartApp webhook.

GET  /  — проверка доступности
POST /  — lifecycle события платформы
"""

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse


def create_webhook_router(runtime: Any) -> APIRouter:
    """
    Создаёт FastAPI роутер webhook endpoint.

    Args:
        runtime: экземпляр CoreRuntime

    Returns:
        FastAPI роутер с endpoints GET / и POST /
    """
    router = APIRouter(tags=["smartapp"])

    @router.get("/")
    async def health():
        return {"statusCode": 200, "message": "Server is up!"}

    @router.post("/")
    async def lifecycle(request: Request):
        """
        Принять lifecycle событие и передать его в smartapp.handle_lifecycle.

        Любая ошибка обработки — plain text 500 без деталей.
        """
        try:
            event = await request.json()
            response = await runtime.service_registry.call("smartapp.handle_lifecycle", event)
        except Exception as e:
            try:
                await runtime.service_registry.call(
                    "logger.log",
                    level="error",
                    message=f"Error handling lifecycle: {type(e).__name__}: {e}",
                    module="api",
                )
            except Exception:
                pass
            return PlainTextResponse("Internal Server Error", status_code=500)

        return JSONResponse(response.to_body(), status_code=response.status_code)

    return router
