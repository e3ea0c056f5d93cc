# flake8: noqa

from bufferfs.file_system.file_system import *
from bufferfs.file_system.os_file_system import *
from bufferfs.file_system.memory_file_system import *
from bufferfs.file_system.utils import *

__all__ = [
    FileSystem.__name__,
    File.__name__,
    FileInfo.__name__,
    OSFileSystem.__name__,
    OSFile.__name__,
    MemoryFileSystem.__name__,
    MemoryFile.__name__,
    MemoryRecord.__name__,
    FileSystemError.__name__,
    NotFoundError.__name__,
    UnimplementedError.__name__,
    UnderlyingError.__name__,
    NotWritableError.__name__,
    ClosedFileError.__name__,
    InvalidSeekError.__name__,
]
