# 14.10.26

import logging
from logging.handlers import RotatingFileHandler


# External libraries
from rich.logging import RichHandler


# Internal utilities
from .config_json import config_manager


class Logger:
    _instance = None

    def __new__(cls):
        # Configure the root logger only once per process
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self.debug_mode = config_manager.get_bool("DEFAULT", "debug")
        self.log_to_file = config_manager.get_bool("DEFAULT", "log_to_file")
        self.log_file = config_manager.get("DEFAULT", "log_file", "app.log")

        level = logging.DEBUG if self.debug_mode else logging.WARNING
        root = logging.getLogger()
        root.setLevel(level)

        for handler in root.handlers[:]:
            root.removeHandler(handler)

        console_handler = RichHandler(level=level, show_path=self.debug_mode, rich_tracebacks=self.debug_mode)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(console_handler)

        if self.log_to_file:
            file_handler = RotatingFileHandler(self.log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s"))
            root.addHandler(file_handler)

        # httpx is chatty at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
