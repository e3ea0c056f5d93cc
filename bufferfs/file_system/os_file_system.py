from contextlib import contextmanager
from datetime import datetime, timezone
import errno
import io
import logging
import os
from os import SEEK_SET
from typing import Iterator, Optional

from bufferfs.file_system.file_system import (
    BytesLike, File, FileInfo, FileSystem, InvalidSeekError, NotFoundError,
    NotWritableError, UnderlyingError, UnimplementedError, check_open_mode,
    check_whence)

log = logging.getLogger(__name__)


@contextmanager
def translate_os_errors(path: Optional[str] = None) -> Iterator[None]:
    """Re-raise OSErrors from the block as FileSystemErrors.

    FileNotFoundError becomes NotFoundError; any other OSError becomes an
    UnderlyingError carrying the original errno.
    """
    try:
        yield
    except FileNotFoundError as e:
        raise NotFoundError(path if path is not None else e.filename) from e
    except OSError as e:
        raise UnderlyingError.from_os_error(e, path=path) from e


def stat_result_to_file_info(name: str, st: os.stat_result) -> FileInfo:
    modified = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
    return FileInfo(name=name, size=st.st_size, modified=modified)


class OSFile(File):
    """A File wrapping an unbuffered file object from the host OS."""

    def __init__(self, path: str, file_obj: io.FileIO, writable: bool):
        self._path = path
        self._file = file_obj
        self._writable = writable

    @property
    def name(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._file.closed

    def read(self, size: int = -1) -> bytes:
        self._check_not_closed()
        with translate_os_errors(self._path):
            if size is None or size < 0:
                return self._file.readall()
            return self._file.read(size)

    def read_at(self, size: int, offset: int) -> bytes:
        self._check_not_closed()
        if size < 0:
            raise ValueError(f'size must be non-negative, got {size}')
        if offset < 0:
            raise InvalidSeekError(f'negative offset {offset} on {self._path}')
        if not hasattr(os, 'pread'):
            raise UnimplementedError(
                'Positional reads are not supported on this platform')
        with translate_os_errors(self._path):
            return os.pread(self._file.fileno(), size, offset)

    def seek(self, offset: int, whence: int = SEEK_SET) -> int:
        self._check_not_closed()
        check_whence(whence)
        try:
            return self._file.seek(offset, whence)
        except OSError as e:
            if e.errno == errno.EINVAL:
                raise InvalidSeekError(
                    f'Cannot seek {self._path} to offset {offset} '
                    f'(whence={whence})') from e
            raise UnderlyingError.from_os_error(e, path=self._path) from e

    def tell(self) -> int:
        self._check_not_closed()
        with translate_os_errors(self._path):
            return self._file.tell()

    def write(self, data: BytesLike) -> int:
        self._check_not_closed()
        if not self._writable:
            raise NotWritableError(f'{self._path} is not open for writing')
        view = memoryview(data).cast('B')
        total = len(view)
        written = 0
        with translate_os_errors(self._path):
            # Raw writes may be partial.
            while written < total:
                n = self._file.write(view[written:])
                if n is None:
                    raise UnderlyingError(
                        f'Write to {self._path} would block', path=self._path)
                written += n
        return written

    def close(self) -> None:
        with translate_os_errors(self._path):
            self._file.close()

    def stat(self) -> FileInfo:
        self._check_not_closed()
        with translate_os_errors(self._path):
            st = os.fstat(self._file.fileno())
        return stat_result_to_file_info(self._path, st)

    def fileno(self) -> int:
        self._check_not_closed()
        return self._file.fileno()


class OSFileSystem(FileSystem):
    """A FileSystem that forwards every operation to the host OS.

    Paths are passed through unmodified.
    """

    def open(self, path: str, mode: str = 'rb') -> OSFile:
        check_open_mode(mode)
        with translate_os_errors(path):
            file_obj = open(path, mode, buffering=0)
        return OSFile(path, file_obj, writable=(mode == 'r+b'))

    def create(self, path: str) -> OSFile:
        with translate_os_errors(path):
            file_obj = open(path, 'w+b', buffering=0)
        log.debug(f'Created {path}')
        return OSFile(path, file_obj, writable=True)

    def stat(self, path: str) -> FileInfo:
        with translate_os_errors(path):
            st = os.stat(path)
        return stat_result_to_file_info(path, st)

    def rename(self, old_path: str, new_path: str) -> None:
        # os.replace overwrites new_path on every platform, unlike os.rename.
        try:
            os.replace(old_path, new_path)
        except FileNotFoundError as e:
            # Also raised when the parent directory of new_path is missing.
            if os.path.lexists(old_path):
                raise UnderlyingError.from_os_error(
                    e, path=new_path) from e
            raise NotFoundError(old_path) from e
        except OSError as e:
            raise UnderlyingError.from_os_error(e, path=old_path) from e
        log.debug(f'Renamed {old_path} to {new_path}')

    def exists(self, path: str) -> bool:
        try:
            self.stat(path)
        except NotFoundError:
            return False
        except UnderlyingError as e:
            # A path below a regular file, eg. 'file.txt/x'.
            if e.errno == errno.ENOTDIR:
                return False
            raise
        return True

    def read_file(self, path: str) -> bytes:
        with translate_os_errors(path):
            with open(path, 'rb') as in_file:
                return in_file.read()

    def remove(self, path: str) -> None:
        with translate_os_errors(path):
            os.remove(path)
        log.debug(f'Removed {path}')
