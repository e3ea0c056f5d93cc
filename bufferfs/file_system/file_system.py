from abc import (ABC, abstractmethod)
from dataclasses import dataclass
from datetime import datetime
from os import SEEK_CUR, SEEK_END, SEEK_SET
from typing import Optional, Union

from bufferfs import registry_ as registry

WHENCE_VALUES = (SEEK_SET, SEEK_CUR, SEEK_END)
OPEN_MODES = ('rb', 'r+b')

BytesLike = Union[bytes, bytearray, memoryview]


class FileSystemError(Exception):
    """Base class for all errors raised by a FileSystem or File."""


class NotFoundError(FileSystemError):
    """Exception raised when a path does not exist."""

    def __init__(self, path: str):
        super().__init__(f'No such file: {path}')
        self.path = path


class UnimplementedError(FileSystemError):
    """Exception raised when a backend cannot perform an operation."""


class UnderlyingError(FileSystemError):
    """An error reported by the host operating system.

    Attributes:
        errno: the errno of the original OSError, if any
        path: the path the failing operation was applied to, if known
    """

    def __init__(self,
                 message: str,
                 errno: Optional[int] = None,
                 path: Optional[str] = None):
        super().__init__(message)
        self.errno = errno
        self.path = path

    @classmethod
    def from_os_error(cls, e: OSError,
                      path: Optional[str] = None) -> 'UnderlyingError':
        if path is None:
            path = e.filename
        return cls(str(e), errno=e.errno, path=path)


class NotWritableError(FileSystemError):
    """Exception raised when writing through a read-only handle."""


class ClosedFileError(FileSystemError):
    """Exception raised when using a handle after it has been closed."""


class InvalidSeekError(FileSystemError):
    """Exception raised when seeking or reading at a negative position."""


@dataclass(frozen=True)
class FileInfo:
    """Metadata about a file.

    Attributes:
        name: the path the file was looked up with
        size: size of the file in bytes
        modified: last modified time in UTC, or None if the backend does not
            track it
    """
    name: str
    size: int
    modified: Optional[datetime] = None


def check_whence(whence: int) -> None:
    if whence not in WHENCE_VALUES:
        raise ValueError(f'Invalid whence ({whence}, should be '
                         f'{SEEK_SET}, {SEEK_CUR} or {SEEK_END})')


def check_open_mode(mode: str) -> None:
    if mode not in OPEN_MODES:
        raise ValueError(
            f'Invalid mode: {mode!r}. Must be one of {OPEN_MODES}.')


class File(ABC):
    """An open file belonging to a FileSystem.

    Handles are context managers and are closed on exit:

    .. code-block:: python

        with fs.create('hello.txt') as f:
            f.write(b'hello')
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Path this handle was opened with."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True once close() has been called."""

    @abstractmethod
    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes from the current position.

        Args:
            size: maximum number of bytes to read. If negative, read until the
                end of the file.

        Returns:
            The bytes read. An empty bytes object signals end of file.
        """

    @abstractmethod
    def read_at(self, size: int, offset: int) -> bytes:
        """Read up to size bytes starting at offset.

        The current position is neither used nor changed.

        Raises:
            InvalidSeekError: if offset is negative.
        """

    @abstractmethod
    def seek(self, offset: int, whence: int = SEEK_SET) -> int:
        """Move the current position and return the new one.

        Args:
            offset: position relative to whence
            whence: os.SEEK_SET, os.SEEK_CUR or os.SEEK_END

        Raises:
            ValueError: if whence is not one of the above.
            InvalidSeekError: if the resulting position would be negative.
        """

    @abstractmethod
    def tell(self) -> int:
        """Return the current position."""

    @abstractmethod
    def write(self, data: BytesLike) -> int:
        """Write data at the current position and advance past it.

        Writing past the end of the file extends it. Any gap left by seeking
        beyond the end is filled with zero bytes.

        Returns:
            The number of bytes written, always len(data).

        Raises:
            NotWritableError: if the handle was opened read-only.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the handle. Closing twice is a no-op."""

    @abstractmethod
    def stat(self) -> FileInfo:
        """Return metadata for the file behind this handle."""

    def readinto(self, buffer: Union[bytearray, memoryview]) -> int:
        """Read into a pre-allocated buffer and return the bytes read."""
        view = memoryview(buffer).cast('B')
        data = self.read(len(view))
        n = len(data)
        view[:n] = data
        return n

    def fileno(self) -> int:
        raise UnimplementedError(
            f'{type(self).__name__} is not backed by a file descriptor')

    def _check_not_closed(self) -> None:
        if self.closed:
            raise ClosedFileError(f'I/O operation on closed file {self.name}')

    def __enter__(self) -> 'File':
        return self

    def __exit__(self, *args) -> None:
        self.close()


class FileSystem(ABC):
    """Abstraction for a file system that can open, create, stat and rename
    files.

    Backends are interchangeable: code written against this interface works
    the same on the host file system and on an in-memory one.
    """

    @staticmethod
    def get_file_system(name: Optional[str] = None) -> 'FileSystem':
        """Return a new instance of the FileSystem registered under name.

        Args:
            name: name of a registered backend (eg. 'os' or 'memory'). If None,
                use the backend named in the configuration.
        """
        if name is None:
            # Import here to avoid circular reference.
            from bufferfs import fs_config_ as fs_config
            name = fs_config.get_default_backend()
        return registry.get_file_system(name)()

    @abstractmethod
    def open(self, path: str, mode: str = 'rb') -> File:
        """Open an existing file.

        Args:
            path: path of the file
            mode: 'rb' for a read-only handle or 'r+b' for a read/write handle
                that does not truncate the file

        Raises:
            NotFoundError: if there is no file at path. The file is never
                created.
        """

    @abstractmethod
    def create(self, path: str) -> File:
        """Create an empty file at path and return a read/write handle to it.

        Any existing content at path is truncated.
        """

    @abstractmethod
    def stat(self, path: str) -> FileInfo:
        """Return metadata for path without opening it.

        Raises:
            NotFoundError: if there is no file at path.
        """

    @abstractmethod
    def rename(self, old_path: str, new_path: str) -> None:
        """Atomically move the file at old_path to new_path.

        A file already at new_path is replaced.

        Raises:
            NotFoundError: if there is no file at old_path. In this case
                nothing at new_path is created or modified.
        """

    @abstractmethod
    def read_file(self, path: str) -> bytes:
        """Read the whole content of path.

        Raises:
            NotFoundError: if there is no file at path.
        """

    @abstractmethod
    def remove(self, path: str) -> None:
        """Delete the file at path.

        Raises:
            NotFoundError: if there is no file at path.
        """

    def exists(self, path: str) -> bool:
        """Return True if there is a file at path."""
        try:
            self.stat(path)
        except NotFoundError:
            return False
        return True

    def write_file(self, path: str, data: BytesLike) -> None:
        """Replace the content of path with data, creating it if needed."""
        with self.create(path) as f:
            f.write(data)
