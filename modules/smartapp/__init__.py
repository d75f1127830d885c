"""
SmartApp Module — обработка lifecycle событий SmartThings.

Регистрируется через ModuleManager при старте CoreRuntime.
"""

from .module import SmartappModule

__all__ = ["SmartappModule"]
