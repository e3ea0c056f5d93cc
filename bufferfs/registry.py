from typing import Dict, List, Type, TYPE_CHECKING

if TYPE_CHECKING:
    from bufferfs.file_system import FileSystem  # noqa

OS = 'os'
MEMORY = 'memory'


class RegistryError(Exception):
    """Exception raised for invalid use of registry."""


class Registry():
    """A registry of the FileSystem backends that can be selected by name."""

    def __init__(self):
        self.file_systems: Dict[str, Type['FileSystem']] = {}

    def add_file_system(self, name: str, file_system: Type['FileSystem']):
        """Add a FileSystem.

        Args:
            name: the name used to select the backend, eg. in configuration
            file_system: the FileSystem class
        """
        if name in self.file_systems:
            raise RegistryError(f'There is already a {name} file system in '
                                'the registry.')

        self.file_systems[name] = file_system

    def get_file_system(self, name: str) -> Type['FileSystem']:  # noqa
        """Return a FileSystem class based on its name."""
        file_system = self.file_systems.get(name)
        if file_system:
            return file_system
        else:
            raise RegistryError(f'{name} is not a registered file system. '
                                'Choose one of: '
                                f'{", ".join(self.get_file_system_names())}.')

    def get_file_system_names(self) -> List[str]:
        """Return the names of all registered file systems, sorted."""
        return sorted(self.file_systems)

    def load_builtins(self):
        """Add all builtin resources."""
        from bufferfs.file_system import (MemoryFileSystem, OSFileSystem)

        self.add_file_system(OS, OSFileSystem)
        self.add_file_system(MEMORY, MemoryFileSystem)
