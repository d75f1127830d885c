"""
API Module — встроенный модуль HTTP endpoint.

Регистрируется через ModuleManager при старте CoreRuntime.
"""

from .module import ApiModule

__all__ = ["ApiModule"]
