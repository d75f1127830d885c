"""
Logger Module - встроенный модуль логирования.

Инфраструктурный модуль, который регистрируется первым
при старте CoreRuntime через ModuleManager.
"""

from .module import LoggerModule

__all__ = ["LoggerModule"]
