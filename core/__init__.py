"""
Core Runtime - минимальное ядро SmartApp Connector.
"""

from .config import Config
from .module_manager import ModuleManager
from .runtime import CoreRuntime
from .runtime_module import RuntimeModule
from .service_registry import ServiceRegistry
from .logger_helper import info, error

__all__ = [
    "Config",
    "CoreRuntime",
    "ModuleManager",
    "RuntimeModule",
    "ServiceRegistry",
    "info",
    "error",
]
