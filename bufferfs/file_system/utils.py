from typing import TYPE_CHECKING, Any, Dict, Optional
import os
import json
import logging

from tqdm.auto import tqdm

from bufferfs import fs_config_ as fs_config
from bufferfs.file_system.file_system import BytesLike, FileSystem
from bufferfs.file_system.os_file_system import OSFileSystem

if TYPE_CHECKING:
    from tempfile import TemporaryDirectory

log = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024

# One instance per backend name so that helpers called without an explicit fs
# share the same in-memory files.
_default_file_systems: Dict[str, FileSystem] = {}


def get_default_file_system() -> FileSystem:
    """Return the shared instance of the configured default backend."""
    name = fs_config.get_default_backend()
    fs = _default_file_systems.get(name)
    if fs is None:
        fs = FileSystem.get_file_system(name)
        _default_file_systems[name] = fs
    return fs


def progressbar(total_size: int, desc: str):
    return tqdm(
        total=total_size,
        desc=desc,
        unit='B',
        unit_scale=True,
        unit_divisor=1024,
        mininterval=0.5,
        delay=5)


def file_exists(path: str, fs: Optional[FileSystem] = None) -> bool:
    """Check if a file exists.

    Args:
        path: the path to check
        fs: if supplied, use fs instead of the default FileSystem
    """
    if not fs:
        fs = get_default_file_system()
    return fs.exists(path)


def file_to_bytes(path: str, fs: Optional[FileSystem] = None) -> bytes:
    """Return the content of a file as bytes."""
    if not fs:
        fs = get_default_file_system()
    return fs.read_file(path)


def bytes_to_file(data: BytesLike, path: str,
                  fs: Optional[FileSystem] = None) -> None:
    """Write bytes to a file, replacing any existing content."""
    if not fs:
        fs = get_default_file_system()
    fs.write_file(path, data)


def file_to_str(path: str,
                fs: Optional[FileSystem] = None,
                encoding: str = 'utf-8') -> str:
    """Load contents of a file into a string.

    Args:
        path: path of the file
        fs: if supplied, use fs instead of the default FileSystem
        encoding: text encoding of the file
    """
    return file_to_bytes(path, fs=fs).decode(encoding)


def str_to_file(content_str: str,
                path: str,
                fs: Optional[FileSystem] = None,
                encoding: str = 'utf-8') -> None:
    """Write string to a file."""
    bytes_to_file(content_str.encode(encoding), path, fs=fs)


def file_to_json(path: str, fs: Optional[FileSystem] = None) -> Any:
    """Return JSON dict based on file at path."""
    return json.loads(file_to_str(path, fs=fs))


def json_to_file(obj: Any, path: str,
                 fs: Optional[FileSystem] = None) -> None:
    """Serialize obj to JSON and write it to path."""
    str_to_file(json.dumps(obj), path, fs=fs)


def is_same_file(src_path: str, dst_path: str, src_fs: FileSystem,
                 dst_fs: FileSystem) -> bool:
    """Return True if src_path and dst_path name the same existing file.

    Every OSFileSystem views the host file system, so two different instances
    (or two different spellings of a path) can still refer to one file.
    """
    if src_fs is dst_fs and src_path == dst_path:
        return True
    if isinstance(src_fs, OSFileSystem) and isinstance(dst_fs, OSFileSystem):
        try:
            return os.path.samefile(src_path, dst_path)
        except OSError:
            return False
    return False


def copy_file(src_path: str,
              dst_path: str,
              src_fs: Optional[FileSystem] = None,
              dst_fs: Optional[FileSystem] = None,
              chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Copy a file, possibly between two different FileSystems.

    The file is streamed in chunks of chunk_size bytes, with a progress bar
    shown for long copies.

    Args:
        src_path: path of the source file in src_fs
        dst_path: path of the destination file in dst_fs. Existing content is
            replaced.
        src_fs: if supplied, use src_fs instead of the default FileSystem
        dst_fs: if supplied, use dst_fs instead of the default FileSystem

    Returns:
        The number of bytes copied.
    """
    if not src_fs:
        src_fs = get_default_file_system()
    if not dst_fs:
        dst_fs = get_default_file_system()

    size = src_fs.stat(src_path).size
    if is_same_file(src_path, dst_path, src_fs, dst_fs):
        return size

    copied = 0
    with src_fs.open(src_path) as src, dst_fs.create(dst_path) as dst:
        with progressbar(size, desc=f'Copying {src_path}') as bar:
            while True:
                chunk = src.read(chunk_size)
                if not chunk:
                    break
                dst.write(chunk)
                copied += len(chunk)
                bar.update(len(chunk))
    log.debug(f'Copied {copied} bytes from {src_path} to {dst_path}')
    return copied


def get_tmp_dir() -> 'TemporaryDirectory':
    """Return temporary directory given by the configuration.

    Returns:
        TemporaryDirectory: A new TemporaryDirectory object.
    """
    return fs_config.get_tmp_dir()
