import os
import unittest

from bufferfs.file_system import (
    ClosedFileError, FileSystem, InvalidSeekError, MemoryFileSystem,
    NotFoundError, NotWritableError, OSFileSystem, get_tmp_dir)


class FileSystemContractMixin:
    """Behaviour every FileSystem backend must share.

    Subclasses set self.fs in setUp and implement path().
    """
    fs: FileSystem

    def path(self, name: str) -> str:
        raise NotImplementedError()

    def make_file(self, name: str, content: bytes) -> str:
        path = self.path(name)
        with self.fs.create(path) as f:
            f.write(content)
        return path

    def test_open_missing(self):
        with self.assertRaises(NotFoundError):
            self.fs.open(self.path('missing.txt'))
        self.assertFalse(self.fs.exists(self.path('missing.txt')))

    def test_open_and_stat_agree_on_missing(self):
        path = self.path('missing.txt')
        with self.assertRaises(NotFoundError):
            self.fs.open(path)
        with self.assertRaises(NotFoundError):
            self.fs.stat(path)

    def test_read_file_missing(self):
        with self.assertRaises(NotFoundError):
            self.fs.read_file(self.path('missing.txt'))

    def test_create_then_open_is_empty(self):
        path = self.path('empty.txt')
        self.fs.create(path).close()
        with self.fs.open(path) as f:
            self.assertEqual(f.read(), b'')
        self.assertEqual(self.fs.stat(path).size, 0)

    def test_write_then_read_file(self):
        path = self.path('data.bin')
        content = bytes(range(256)) * 3
        with self.fs.create(path) as f:
            self.assertEqual(f.write(content), len(content))
        self.assertEqual(self.fs.read_file(path), content)

    def test_create_truncates(self):
        path = self.make_file('a.txt', b'hello world')
        self.fs.create(path).close()
        self.assertEqual(self.fs.read_file(path), b'')

    def test_end_to_end(self):
        a = self.path('a.txt')
        b = self.path('b.txt')
        with self.fs.create(a) as f:
            f.write(b'hello')
        self.assertEqual(self.fs.read_file(a), b'hello')

        self.fs.rename(a, b)
        self.assertEqual(self.fs.read_file(b), b'hello')
        with self.assertRaises(NotFoundError):
            self.fs.read_file(a)

    def test_rename(self):
        a = self.make_file('a.txt', b'content')
        b = self.path('b.txt')
        self.fs.rename(a, b)
        with self.assertRaises(NotFoundError):
            self.fs.open(a)
        with self.fs.open(b) as f:
            self.assertEqual(f.read(), b'content')

    def test_rename_replaces_destination(self):
        a = self.make_file('a.txt', b'new')
        b = self.make_file('b.txt', b'old')
        self.fs.rename(a, b)
        self.assertEqual(self.fs.read_file(b), b'new')
        self.assertFalse(self.fs.exists(a))

    def test_rename_missing_source(self):
        a = self.path('a.txt')
        b = self.path('b.txt')
        with self.assertRaises(NotFoundError):
            self.fs.rename(a, b)
        self.assertFalse(self.fs.exists(b))

        self.make_file('b.txt', b'keep')
        with self.assertRaises(NotFoundError):
            self.fs.rename(a, b)
        self.assertEqual(self.fs.read_file(b), b'keep')

    def test_sequential_read(self):
        path = self.make_file('a.txt', b'abcdef')
        with self.fs.open(path) as f:
            self.assertEqual(f.read(2), b'ab')
            self.assertEqual(f.tell(), 2)
            self.assertEqual(f.read(3), b'cde')
            self.assertEqual(f.read(), b'f')
            self.assertEqual(f.read(), b'')
            self.assertEqual(f.read(10), b'')

    def test_readinto(self):
        path = self.make_file('a.txt', b'abcdef')
        buf = bytearray(4)
        with self.fs.open(path) as f:
            self.assertEqual(f.readinto(buf), 4)
            self.assertEqual(buf, bytearray(b'abcd'))
            self.assertEqual(f.readinto(buf), 2)
            self.assertEqual(buf[:2], bytearray(b'ef'))
            self.assertEqual(f.readinto(buf), 0)

    def test_read_at(self):
        path = self.make_file('a.txt', b'abcdef')
        with self.fs.open(path) as f:
            f.read(1)
            self.assertEqual(f.read_at(3, 2), b'cde')
            self.assertEqual(f.tell(), 1)
            self.assertEqual(f.read_at(10, 4), b'ef')
            self.assertEqual(f.read_at(3, 100), b'')
            self.assertEqual(f.read(), b'bcdef')

    def test_read_at_negative_offset(self):
        path = self.make_file('a.txt', b'abc')
        with self.fs.open(path) as f:
            with self.assertRaises(InvalidSeekError):
                f.read_at(1, -1)

    def test_seek(self):
        path = self.make_file('a.txt', b'abcdef')
        with self.fs.open(path) as f:
            self.assertEqual(f.seek(2), 2)
            self.assertEqual(f.read(1), b'c')
            self.assertEqual(f.seek(1, os.SEEK_CUR), 4)
            self.assertEqual(f.read(), b'ef')
            self.assertEqual(f.seek(-3, os.SEEK_END), 3)
            self.assertEqual(f.read(1), b'd')
            self.assertEqual(f.seek(0, os.SEEK_END), 6)
            self.assertEqual(f.read(), b'')

    def test_seek_invalid(self):
        path = self.make_file('a.txt', b'abc')
        with self.fs.open(path) as f:
            with self.assertRaises(ValueError):
                f.seek(0, 7)
            with self.assertRaises(InvalidSeekError):
                f.seek(-1)
            with self.assertRaises(InvalidSeekError):
                f.seek(-10, os.SEEK_END)
            self.assertEqual(f.tell(), 0)

    def test_empty_write_past_end_does_not_extend(self):
        path = self.path('a.bin')
        with self.fs.create(path) as f:
            f.write(b'ab')
            f.seek(10)
            self.assertEqual(f.write(b''), 0)
            self.assertEqual(f.tell(), 10)
            self.assertEqual(f.stat().size, 2)
        self.assertEqual(self.fs.read_file(path), b'ab')

    def test_write_past_end_fills_with_zeros(self):
        path = self.path('sparse.bin')
        with self.fs.create(path) as f:
            f.write(b'ab')
            self.assertEqual(f.seek(5), 5)
            f.write(b'cd')
        self.assertEqual(self.fs.read_file(path), b'ab\x00\x00\x00cd')

    def test_write_in_middle(self):
        path = self.make_file('a.txt', b'abcdef')
        with self.fs.open(path, 'r+b') as f:
            f.seek(2)
            f.write(b'XY')
            self.assertEqual(f.tell(), 4)
            f.seek(0)
            self.assertEqual(f.read(), b'abXYef')

    def test_write_read_only(self):
        path = self.make_file('a.txt', b'abc')
        with self.fs.open(path) as f:
            with self.assertRaises(NotWritableError):
                f.write(b'x')
        self.assertEqual(self.fs.read_file(path), b'abc')

    def test_open_read_write_does_not_truncate(self):
        path = self.make_file('a.txt', b'abc')
        with self.fs.open(path, 'r+b') as f:
            self.assertEqual(f.read(), b'abc')
            f.write(b'def')
        self.assertEqual(self.fs.read_file(path), b'abcdef')

    def test_open_invalid_mode(self):
        path = self.make_file('a.txt', b'abc')
        with self.assertRaises(ValueError):
            self.fs.open(path, 'w')

    def test_close(self):
        path = self.make_file('a.txt', b'abc')
        f = self.fs.open(path)
        self.assertFalse(f.closed)
        f.close()
        self.assertTrue(f.closed)
        f.close()
        with self.assertRaises(ClosedFileError):
            f.read()
        with self.assertRaises(ClosedFileError):
            f.seek(0)
        with self.assertRaises(ClosedFileError):
            f.read_at(1, 0)
        with self.assertRaises(ClosedFileError):
            f.stat()

    def test_context_manager_closes(self):
        path = self.path('a.txt')
        with self.fs.create(path) as f:
            pass
        self.assertTrue(f.closed)
        with self.assertRaises(ClosedFileError):
            f.write(b'x')

    def test_handle_stat(self):
        path = self.path('a.txt')
        with self.fs.create(path) as f:
            self.assertEqual(f.stat().size, 0)
            f.write(b'hello')
            info = f.stat()
            self.assertEqual(info.size, 5)
            self.assertEqual(info.name, path)
            self.assertEqual(f.name, path)

    def test_stat(self):
        path = self.make_file('a.txt', b'hello')
        info = self.fs.stat(path)
        self.assertEqual(info.name, path)
        self.assertEqual(info.size, 5)

    def test_exists(self):
        path = self.path('a.txt')
        self.assertFalse(self.fs.exists(path))
        self.make_file('a.txt', b'')
        self.assertTrue(self.fs.exists(path))

    def test_remove(self):
        path = self.make_file('a.txt', b'abc')
        self.fs.remove(path)
        self.assertFalse(self.fs.exists(path))
        with self.assertRaises(NotFoundError):
            self.fs.remove(path)

    def test_write_file(self):
        path = self.make_file('a.txt', b'something longer')
        self.fs.write_file(path, b'short')
        self.assertEqual(self.fs.read_file(path), b'short')


class TestMemoryFileSystemContract(FileSystemContractMixin,
                                  unittest.TestCase):
    def setUp(self):
        self.fs = MemoryFileSystem()

    def path(self, name: str) -> str:
        return name


class TestOSFileSystemContract(FileSystemContractMixin, unittest.TestCase):
    def setUp(self):
        self.tmp_dir = get_tmp_dir()
        self.fs = OSFileSystem()

    def tearDown(self):
        self.tmp_dir.cleanup()

    def path(self, name: str) -> str:
        return os.path.join(self.tmp_dir.name, name)


if __name__ == '__main__':
    unittest.main()
