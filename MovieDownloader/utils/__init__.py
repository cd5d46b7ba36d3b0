# 14.10.26

from .config_json import config_manager
from .os import os_manager, internet_manager
from .logger import Logger

__all__ = [
    "config_manager",
    "os_manager",
    "internet_manager",
    "Logger"
]
