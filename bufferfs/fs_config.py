from typing import Any, Dict, List, Optional
import os
from tempfile import TemporaryDirectory, gettempdir, mkdtemp
from pathlib import Path
import logging

from everett.manager import (ConfigManager, ConfigDictEnv, ConfigOSEnv,
                             ConfigurationMissingError)
from everett.ext.inifile import ConfigIniEnv

from bufferfs.registry import RegistryError
from bufferfs.verbosity import Verbosity

log = logging.getLogger(__name__)

FILE_SYSTEM = 'file_system'


class ConfigError(Exception):
    """Exception raised for invalid or missing configuration."""


def check_writable_dir(path: str) -> None:
    """Create path if needed and check that files can be made in it."""
    os.makedirs(path, exist_ok=True)
    if not os.path.isdir(path):
        raise ConfigError(f'{path} is not a directory.')
    Path(path, '.can_touch').touch()


class FSConfig:
    """A store of user-specific configuration for bufferfs.

    This holds the logging verbosity, the root temporary directory, and the
    options handled by Everett, such as which backend to use by default.

    Attributes:
        DEFAULT_PROFILE: the default configuration profile name
        DEFAULT_TMP_DIR_ROOT: the default location for root of temporary
            directories
        DEFAULT_BACKEND: name of the backend used when none is configured
    """
    DEFAULT_PROFILE: str = 'default'
    DEFAULT_TMP_DIR_ROOT: str = os.path.join(gettempdir(), 'bufferfs')
    DEFAULT_BACKEND: str = 'os'

    def __init__(self):
        self.set_verbosity()
        self.set_tmp_dir_root()
        self.set_everett_config()

    def set_verbosity(self, verbosity: Verbosity = Verbosity.NORMAL):
        """Set verbosity level of the bufferfs loggers."""
        self.verbosity = Verbosity(verbosity)
        logging.getLogger('bufferfs').setLevel(self.verbosity.log_level)

    def get_verbosity(self) -> Verbosity:
        """Returns verbosity level for logging."""
        return self.verbosity

    def get_tmp_dir(self) -> TemporaryDirectory:
        """Return a new TemporaryDirectory object."""
        return TemporaryDirectory(dir=self.tmp_dir_root)

    def get_tmp_dir_root(self) -> str:
        """Return the root of all temp dirs."""
        return self.tmp_dir_root

    def set_tmp_dir_root(self, tmp_dir_root: Optional[str] = None):
        """Set root of all temporary directories.

        To set the value, the following rules are used in decreasing priority:

        1) the ``tmp_dir_root`` argument if it is not ``None``
        2) an environment variable (``TMPDIR``, ``TEMP``, or ``TMP``)
        3) ``DEFAULT_TMP_DIR_ROOT``

        If the chosen directory cannot be created or written to, a fresh
        directory from :func:`tempfile.mkdtemp` is used instead.
        """
        if tmp_dir_root is None:
            env_dirs = [os.environ.get(k) for k in ['TMPDIR', 'TEMP', 'TMP']]
            tmp_dir_root = next((d for d in env_dirs if d),
                                FSConfig.DEFAULT_TMP_DIR_ROOT)

        try:
            check_writable_dir(tmp_dir_root)
            self.tmp_dir_root = tmp_dir_root
        except (OSError, ConfigError) as e:
            self.tmp_dir_root = mkdtemp(prefix='bufferfs-')
            log.warning(f'Root temporary directory cannot be used ({e}). '
                        f'Using root: {self.tmp_dir_root}')
        log.debug(f'Temporary directory root is: {self.tmp_dir_root}')

    def set_everett_config(self,
                           profile: str = None,
                           fs_home: str = None,
                           config_overrides: Dict[str, str] = None):
        """Set Everett config.

        This sets up any other configuration using the Everett library.
        See https://everett.readthedocs.io/

        Configuration can be specified through configuration files, the
        config_overrides argument, and environment variables in increasing
        order of precedence.

        Configuration files are in the following format:
        ```
        [file_system]
        backend=memory
        ```

        Each configuration file is a "profile" with the name of the file being
        the name of the profile. The corresponding environment variable for
        namespace ``file_system`` and key ``backend`` is
        ``FILE_SYSTEM_BACKEND``.

        Args:
            profile: name of the configuration profile to use. If not set,
                defaults to value of BUFFERFS_PROFILE env var, or
                DEFAULT_PROFILE.
            fs_home: a local dir with configuration files. If not set,
                attempts to use ~/.bufferfs.
            config_overrides: any configuration to override. Each key is of
                form namespace_key with corresponding value.
        """
        if profile is None:
            if os.environ.get('BUFFERFS_PROFILE'):
                profile = os.environ.get('BUFFERFS_PROFILE')
            else:
                profile = FSConfig.DEFAULT_PROFILE
        self.profile = profile

        if config_overrides is None:
            config_overrides = {}

        if fs_home is None:
            home = os.path.expanduser('~')
            fs_home = os.path.join(home, '.bufferfs')
        self.fs_home = fs_home

        config_file_locations = self._discover_config_file_locations(
            self.profile)
        config_ini_env = ConfigIniEnv(config_file_locations)

        self.config = ConfigManager(
            [
                ConfigOSEnv(),
                ConfigDictEnv(config_overrides),
                config_ini_env,
            ],
            doc='Configure bufferfs with [file_system] backend=os|memory.')

    def get_namespace_option(self,
                             namespace: str,
                             key: str,
                             default: Optional[Any] = None,
                             as_bool: bool = False) -> Optional[Any]:
        """Get the value of an option from a namespace."""
        namespace_options = self.config.with_namespace(namespace)
        try:
            val: str = namespace_options(key)
            if as_bool:
                val = val.lower() in ('1', 'true', 'y', 'yes')
            return val
        except ConfigurationMissingError:
            if as_bool:
                return bool(default)
            return default

    def get_default_backend(self) -> str:
        """Return the name of the backend to use when none is given.

        Raises:
            RegistryError: if the configured name is not a registered backend.
        """
        # Import here to avoid circular reference.
        from bufferfs import registry_ as registry

        name = self.get_namespace_option(
            FILE_SYSTEM, 'backend', default=FSConfig.DEFAULT_BACKEND)
        names = registry.get_file_system_names()
        if name not in names:
            raise RegistryError(
                f'Configured {FILE_SYSTEM} backend {name!r} is not a '
                f'registered file system. Choose one of: {", ".join(names)}.')
        return name

    def _discover_config_file_locations(self, profile) -> List[str]:
        """Discover the location of config files.

        Args:
            profile: the name of the profile to use

        Returns:
            a list of paths to config files matching the profile name
        """
        result = []

        # Allow for user to specify specific config file
        # in the BUFFERFS_CONFIG env variable.
        env_specified_path = os.environ.get('BUFFERFS_CONFIG')
        if env_specified_path:
            result.append(env_specified_path)

        # Allow user to specify config directory that will
        # contain profile configs in BUFFERFS_CONFIG_DIR
        # env variable. Otherwise, use "$HOME/.bufferfs"
        env_specified_dir_path = os.environ.get('BUFFERFS_CONFIG_DIR')
        if env_specified_dir_path:
            result.append(os.path.join(env_specified_dir_path, profile))
        else:
            result.append(os.path.join(self.fs_home, profile))
        result.append(os.path.join(os.getcwd(), '.bufferfs'))

        results_that_exist = list(filter(lambda x: os.path.exists(x), result))

        # If the profile is not default, and there is no config that exists,
        # then throw an error.
        if not any(results_that_exist) and profile != FSConfig.DEFAULT_PROFILE:
            raise ConfigError(f'Configuration profile {profile} not found. '
                              f'Checked: {", ".join(result)}')

        return results_that_exist
