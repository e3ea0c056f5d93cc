from enum import IntEnum
import logging


class Verbosity(IntEnum):
    """How much the bufferfs loggers report."""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3

    @property
    def log_level(self) -> int:
        if self >= Verbosity.VERBOSE:
            return logging.DEBUG
        if self >= Verbosity.NORMAL:
            return logging.INFO
        return logging.WARN

    @staticmethod
    def get() -> 'Verbosity':
        """Get the verbosity from FSConfig."""
        from bufferfs import fs_config_ as fs_config
        return fs_config.get_verbosity()
