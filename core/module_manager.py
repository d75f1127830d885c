"""
ModuleManager — менеджер встроенных модулей Runtime.

Управляет жизненным циклом RuntimeModule:
- обнаружение и регистрация модулей
- запуск/остановка модулей
- гарантия уникальности имён

КОНТРАКТ LIFECYCLE:
- register() вызывается ровно один раз для каждого модуля
- start_all() вызывает start() для всех зарегистрированных модулей в порядке регистрации
- stop_all() вызывает stop() для всех модулей, даже при частичном старте

КОНТРАКТ REQUIRED vs OPTIONAL:
- REQUIRED модули обязательны для работы runtime
- OPTIONAL модули могут отсутствовать или фейлиться без остановки runtime
"""

from typing import Any, Dict, List, Optional
import sys
import importlib
import importlib.util
from dataclasses import dataclass

from core.runtime_module import RuntimeModule
from core.logger_helper import error as log_error


@dataclass
class ModuleSpec:
    """Спецификация модуля с флагом обязательности."""
    name: str
    required: bool = True


# ВАЖНО: logger должен быть первым, так как он нужен для логирования других модулей!
# smartapp регистрируется до api: HTTP-слой вызывает сервис smartapp.handle_lifecycle.
BUILTIN_MODULES = [
    ModuleSpec("logger", required=True),    # LoggerModule (инфраструктурный, должен быть первым)
    ModuleSpec("smartapp", required=True),  # SmartappModule (lifecycle dispatcher)
    ModuleSpec("api", required=True),       # ApiModule (HTTP endpoint)
]

REQUIRED_MODULES = [spec.name for spec in BUILTIN_MODULES if spec.required]


class ModuleManager:
    """
    Менеджер встроенных модулей Runtime.

    Управляет экземплярами RuntimeModule, гарантирует уникальность имён,
    обеспечивает идемпотентность регистрации.
    """

    def __init__(self, runtime: Optional[Any] = None):
        """
        Args:
            runtime: опциональный экземпляр CoreRuntime для логирования
        """
        self._modules: Dict[str, RuntimeModule] = {}
        self._runtime = runtime

    async def register(self, module: RuntimeModule) -> None:
        """
        Регистрирует модуль в менеджере.

        Повторная регистрация того же экземпляра игнорируется,
        регистрация другого экземпляра с тем же именем запрещена.

        Args:
            module: экземпляр RuntimeModule

        Raises:
            ValueError: если модуль с таким именем уже зарегистрирован (другой экземпляр)
        """
        module_name = module.name

        if module_name in self._modules:
            if self._modules[module_name] is module:
                return
            raise ValueError(
                f"Module '{module_name}' is already registered. "
                f"Use unregister() first or use a different name."
            )

        self._modules[module_name] = module
        await module.register()

    def unregister(self, module_name: str) -> None:
        """Отменяет регистрацию модуля."""
        self._modules.pop(module_name, None)

    def get_module(self, module_name: str) -> Optional[RuntimeModule]:
        """
        Получает модуль по имени.

        Returns:
            экземпляр RuntimeModule или None если не найден
        """
        return self._modules.get(module_name)

    def list_modules(self) -> List[str]:
        """Возвращает список имён зарегистрированных модулей."""
        return list(self._modules.keys())

    async def start_all(self) -> None:
        """
        Запускает все зарегистрированные модули.

        REQUIRED модули должны успешно запуститься, иначе RuntimeError.
        OPTIONAL модули могут фейлиться без остановки runtime.

        Raises:
            RuntimeError: если REQUIRED модуль упал в start()
        """
        failed_required = []

        for module in self._modules.values():
            try:
                await module.start()
            except Exception as e:
                if module.name in REQUIRED_MODULES:
                    failed_required.append((module.name, str(e)))
                else:
                    await log_error(
                        self._runtime,
                        f"Ошибка при запуске optional модуля '{module.name}': {e}",
                        component="module_manager",
                        module=module.name
                    )

        if failed_required:
            failed_names = [name for name, _ in failed_required]
            errors = "\n".join(f"  - {name}: {error}" for name, error in failed_required)
            raise RuntimeError(
                f"Failed to start required modules: {failed_names}\n"
                f"Errors:\n{errors}"
            )

    async def stop_all(self) -> None:
        """
        Останавливает все зарегистрированные модули в обратном порядке.

        Ошибка одного модуля не мешает остановке остальных.
        Logger останавливается последним, чтобы остальные модули могли логировать.
        """
        for module in reversed(list(self._modules.values())):
            try:
                await module.stop()
            except Exception as e:
                try:
                    await log_error(
                        self._runtime,
                        f"Ошибка при остановке модуля '{module.name}': {e}",
                        component="module_manager",
                        module=module.name
                    )
                except Exception:
                    print(f"[ModuleManager] Ошибка при остановке модуля '{module.name}': {e}", file=sys.stderr)

    def clear(self) -> None:
        """Очищает все зарегистрированные модули."""
        self._modules.clear()

    async def register_builtin_modules(self, runtime: Any) -> None:
        """
        Регистрирует все встроенные модули из BUILTIN_MODULES.

        Уже зарегистрированные модули пропускаются: тесты могут
        регистрировать модули вручную перед вызовом start().

        Args:
            runtime: экземпляр CoreRuntime (используется для создания модулей)

        Raises:
            RuntimeError: если REQUIRED модуль не найден или не зарегистрировался
        """
        failed_required = []

        for module_spec in BUILTIN_MODULES:
            if module_spec.name in self._modules:
                continue

            try:
                await self._register_module_by_name(runtime, module_spec.name, module_spec.required)
            except Exception as e:
                if module_spec.required:
                    failed_required.append((module_spec.name, str(e)))
                else:
                    await log_error(
                        self._runtime,
                        f"Ошибка при регистрации optional модуля '{module_spec.name}': {e}",
                        component="module_manager",
                        module=module_spec.name
                    )

        if failed_required:
            failed_names = [name for name, _ in failed_required]
            errors = "\n".join(f"  - {name}: {error}" for name, error in failed_required)
            raise RuntimeError(
                f"Failed to register required modules: {failed_names}\n"
                f"Errors:\n{errors}"
            )

    async def _discover_module(self, module_name: str) -> Optional[type]:
        """
        Обнаруживает класс RuntimeModule по имени модуля.

        Ищет класс f"{CamelCase}Module" в пакете modules.<module_name>,
        например "smartapp" -> SmartappModule.

        Raises:
            RuntimeError: если модуль найден, но класс не является RuntimeModule
        """
        module_path = f"modules.{module_name}"
        if importlib.util.find_spec(module_path) is None:
            return None

        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            raise RuntimeError(f"Failed to import module '{module_path}': {e}")

        camel_case_name = "".join(part.capitalize() for part in module_name.split("_"))
        module_class_name = f"{camel_case_name}Module"
        module_class = getattr(module, module_class_name, None)
        if module_class is None:
            return None

        if not issubclass(module_class, RuntimeModule):
            raise RuntimeError(
                f"Module class '{module_class_name}' in '{module_path}' "
                f"is not a subclass of RuntimeModule"
            )
        return module_class

    async def _register_module_by_name(self, runtime: Any, module_name: str, required: bool = True) -> None:
        """
        Регистрирует модуль по имени (обнаружение и создание экземпляра).

        Raises:
            RuntimeError: если required=True и модуль не найден
        """
        module_class = await self._discover_module(module_name)

        if module_class is None:
            if required:
                raise RuntimeError(
                    f"Required module '{module_name}' not found. "
                    f"Expected module at 'modules.{module_name}'"
                )
            return

        try:
            await self.register(module_class(runtime))
        except ValueError as e:
            raise RuntimeError(f"Module '{module_name}' registration failed: {e}")
