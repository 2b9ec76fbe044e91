from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any


LEVEL_ALIASES: dict[str, str] = {"WARN": "WARNING", "FATAL": "CRITICAL"}


def normalize_level(level: str) -> str:
    """
    Upper-cases a level name and maps the `WARN` and `FATAL` aliases to the
    names the logging module registers.
    """
    level = (level or "").strip().upper()
    return LEVEL_ALIASES.get(level, level)


class LoggingConfig(ABC):
    """
    Describes how bullscope configures Python logging.

    Subclasses decide where records go (`configure`) and which logger the
    package writes to (`get_logger`). The active configuration comes from
    `settings.logging_config`.
    """

    __logging_levels__: list[str] = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

    def __init__(self, level: str = "INFO", **kwargs: Any) -> None:
        level = normalize_level(level)
        if level not in self.__logging_levels__:
            levels: str = ", ".join(self.__logging_levels__)
            raise ValueError(f"'{level}' is not valid. Use one of the following: {levels}.")
        self.level = level
        self.options = kwargs

    @abstractmethod
    def configure(self) -> None:
        """
        Applies the configuration to the logging module.
        """
        raise NotImplementedError("`configure()` must be implemented in subclasses.")

    @abstractmethod
    def get_logger(self) -> Any:
        """
        Returns the logger used by bullscope.
        """
        raise NotImplementedError("`get_logger()` must be implemented in subclasses.")


def setup_logging(logging_config: LoggingConfig | None = None) -> None:
    """
    Configures logging once per process from `logging_config` or, when
    omitted, from the settings.
    """
    from bullscope.conf import settings

    config = logging_config if logging_config is not None else settings.logging_config
    if config is None:
        return
    config.configure()
    settings.is_logging_setup = True


class LoggerProxy:
    """
    Lazily configured logger. The first attribute access sets up logging from
    the settings, so importing this module has no side effects.
    """

    def __init__(self) -> None:
        self._logger: Any = None

    def _resolve(self) -> Any:
        if self._logger is None:
            from bullscope.conf import settings

            if not settings.is_logging_setup:
                setup_logging()
            config = settings.logging_config
            self._logger = config.get_logger() if config is not None else logging.getLogger("bullscope")
        return self._logger

    def __getattr__(self, name: str) -> Any:
        return getattr(self._resolve(), name)


logger: Any = LoggerProxy()
