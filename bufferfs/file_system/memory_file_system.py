import logging
from os import SEEK_CUR, SEEK_END, SEEK_SET
from typing import Dict, List, Optional, Union

from bufferfs.file_system.file_system import (
    BytesLike, File, FileInfo, FileSystem, InvalidSeekError, NotFoundError,
    NotWritableError, check_open_mode, check_whence)

log = logging.getLogger(__name__)


class MemoryRecord:
    """The stored content of one in-memory file.

    Records are owned by the MemoryFileSystem that holds them. Every handle
    opened on a path refers to the same record, so content written through one
    handle is visible through all of them.
    """

    def __init__(self, content: BytesLike = b''):
        self.data = bytearray(content)

    def __len__(self) -> int:
        return len(self.data)

    def truncate(self) -> None:
        del self.data[:]


class MemoryFile(File):
    """A handle onto a MemoryRecord with its own position."""

    def __init__(self, path: str, record: MemoryRecord, writable: bool):
        self._path = path
        self._record = record
        self._writable = writable
        self._pos = 0
        self._closed = False

    @property
    def name(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int = -1) -> bytes:
        self._check_not_closed()
        data = self._record.data
        if size is None or size < 0:
            end = len(data)
        else:
            end = self._pos + size
        chunk = bytes(data[self._pos:end])
        self._pos += len(chunk)
        return chunk

    def read_at(self, size: int, offset: int) -> bytes:
        self._check_not_closed()
        if size < 0:
            raise ValueError(f'size must be non-negative, got {size}')
        if offset < 0:
            raise InvalidSeekError(f'negative offset {offset} on {self._path}')
        return bytes(self._record.data[offset:offset + size])

    def seek(self, offset: int, whence: int = SEEK_SET) -> int:
        self._check_not_closed()
        check_whence(whence)
        if whence == SEEK_SET:
            base = 0
        elif whence == SEEK_CUR:
            base = self._pos
        else:
            base = len(self._record)
        pos = base + offset
        if pos < 0:
            raise InvalidSeekError(
                f'Cannot seek {self._path} to offset {offset} '
                f'(whence={whence})')
        self._pos = pos
        return pos

    def tell(self) -> int:
        self._check_not_closed()
        return self._pos

    def write(self, data: BytesLike) -> int:
        self._check_not_closed()
        if not self._writable:
            raise NotWritableError(f'{self._path} is not open for writing')
        chunk = memoryview(data).cast('B')
        if not chunk:
            # An empty write past the end does not extend the file.
            return 0
        buf = self._record.data
        if self._pos > len(buf):
            buf.extend(bytes(self._pos - len(buf)))
        end = self._pos + len(chunk)
        buf[self._pos:end] = chunk
        self._pos = end
        return len(chunk)

    def close(self) -> None:
        self._closed = True

    def stat(self) -> FileInfo:
        self._check_not_closed()
        return FileInfo(name=self._path, size=len(self._record))


class MemoryFileSystem(FileSystem):
    """A FileSystem that keeps files in memory.

    Each instance has its own set of files, which are lost when the instance
    is garbage collected. There are no directories: a path is just a key.

    Not thread-safe. Callers sharing an instance between threads must provide
    their own locking.

    Args:
        files: optional initial files, mapping path to content. str content is
            encoded as UTF-8.
    """

    def __init__(self, files: Optional[Dict[str, Union[str, bytes]]] = None):
        self._records: Dict[str, MemoryRecord] = {}
        if files:
            for path, content in files.items():
                if isinstance(content, str):
                    content = content.encode('utf-8')
                self._records[path] = MemoryRecord(content)

    def _get_record(self, path: str) -> MemoryRecord:
        record = self._records.get(path)
        if record is None:
            raise NotFoundError(path)
        return record

    def open(self, path: str, mode: str = 'rb') -> MemoryFile:
        check_open_mode(mode)
        record = self._get_record(path)
        return MemoryFile(path, record, writable=(mode == 'r+b'))

    def create(self, path: str) -> MemoryFile:
        record = self._records.get(path)
        if record is None:
            record = MemoryRecord()
            self._records[path] = record
        else:
            # Truncate in place so handles already open on path see it, as on
            # the host file system.
            record.truncate()
        log.debug(f'Created {path}')
        return MemoryFile(path, record, writable=True)

    def stat(self, path: str) -> FileInfo:
        record = self._get_record(path)
        return FileInfo(name=path, size=len(record))

    def rename(self, old_path: str, new_path: str) -> None:
        record = self._get_record(old_path)
        if old_path == new_path:
            return
        del self._records[old_path]
        self._records[new_path] = record
        log.debug(f'Renamed {old_path} to {new_path}')

    def read_file(self, path: str) -> bytes:
        return bytes(self._get_record(path).data)

    def remove(self, path: str) -> None:
        self._get_record(path)
        del self._records[path]
        log.debug(f'Removed {path}')

    def get_buffer(self, path: str) -> bytearray:
        """Return the live buffer backing path.

        Changes made to the returned bytearray are visible to every handle
        open on path.
        """
        return self._get_record(path).data

    def paths(self) -> List[str]:
        """Return the paths of all files, sorted."""
        return sorted(self._records)
