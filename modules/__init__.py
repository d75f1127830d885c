from .logger import LoggerModule
from .smartapp import SmartappModule
from .api import ApiModule

__all__ = ["LoggerModule", "SmartappModule", "ApiModule"]
