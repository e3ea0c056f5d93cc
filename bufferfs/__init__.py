# flake8: noqa
import logging

from bufferfs.fs_config import ConfigError, FSConfig
from bufferfs.registry import Registry
from bufferfs.verbosity import Verbosity

__version__ = '0.1.0'

root_logger = logging.getLogger('bufferfs')
sh = logging.StreamHandler()
sh.setLevel(logging.DEBUG)
formatter = logging.Formatter(
    '%(asctime)s:%(name)s: %(levelname)s - %(message)s', '%Y-%m-%d %H:%M:%S')
sh.setFormatter(formatter)
root_logger.addHandler(sh)

fs_config_ = FSConfig()
registry_ = Registry()
registry_.load_builtins()
