from contextlib import (
    contextmanager,
)
import logging
from os import (
    PathLike,
)
import os.path
import tempfile
from typing import (
    Union,
)

log = logging.getLogger(__name__)

AnyPath = Union[str, PathLike]


@contextmanager
def write_file_atomically(path: AnyPath, mode=0o644):
    """
    Yield a text file that replaces the file at the given path only after the
    body of the `with` statement completed normally.

    >>> from tempfile import TemporaryDirectory
    >>> with TemporaryDirectory() as d:
    ...     path = os.path.join(d, 'foo.txt')
    ...     with write_file_atomically(path) as f:
    ...         _ = f.write('foo')
    ...     try:
    ...         with write_file_atomically(path) as f:
    ...             _ = f.write('bar')
    ...             raise ValueError()
    ...     except ValueError:
    ...         pass
    ...     with open(path) as f:
    ...         f.read(), os.listdir(d)
    ('foo', ['foo.txt'])
    """
    dir_path, file_name = os.path.split(os.fspath(path))
    fd, temp_path = tempfile.mkstemp(dir=dir_path)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            yield f
        os.chmod(temp_path, mode)
        os.rename(temp_path, path)
    except BaseException:
        os.unlink(temp_path)
        raise


def ensure_dir(path: AnyPath) -> bool:
    """
    Create the directory at the given path, including any missing parents.
    Return True if the directory had to be created.

    >>> from tempfile import TemporaryDirectory
    >>> with TemporaryDirectory() as d:
    ...     path = os.path.join(d, 'foo', 'bar')
    ...     ensure_dir(path), ensure_dir(path)
    (True, False)
    """
    if os.path.isdir(path):
        return False
    else:
        log.debug('Creating directory %r', os.fspath(path))
        os.makedirs(path, exist_ok=True)
        return True


def ensure_parent_dir(path: AnyPath) -> None:
    parent = os.path.dirname(os.fspath(path))
    if parent:
        ensure_dir(parent)


def write_text(path: AnyPath, content: str) -> None:
    log.info('Writing %r', os.fspath(path))
    ensure_parent_dir(path)
    with write_file_atomically(path) as f:
        f.write(content)
