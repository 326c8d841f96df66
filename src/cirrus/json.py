import hashlib
import json
import logging
import os
from typing import (
    Optional,
)

from cirrus import (
    require,
)
from cirrus.files import (
    AnyPath,
    ensure_parent_dir,
    write_file_atomically,
)
from cirrus.types import (
    AnyJSON,
    CompositeJSON,
    MutableJSON,
)

log = logging.getLogger(__name__)


def read_json(path: AnyPath, *, throw_if_not_exist: bool = True) -> Optional[MutableJSON]:
    """
    Load the JSON document at the given path.

    :param throw_if_not_exist: If False, return None instead of raising
                               FileNotFoundError when there is no file at the
                               given path.

    >>> read_json('/does/not/exist', throw_if_not_exist=False) is None
    True

    >>> read_json('/does/not/exist')
    Traceback (most recent call last):
    ...
    FileNotFoundError: [Errno 2] No such file or directory: '/does/not/exist'
    """
    try:
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        if throw_if_not_exist:
            raise
        else:
            log.debug('No document at %r', os.fspath(path))
            return None


def write_json(path: AnyPath, doc: CompositeJSON) -> None:
    """
    Serialize the given document to the given path, creating any missing
    parent directories. The file is replaced atomically so that a failure
    during serialization leaves any previous version of it intact.
    """
    require(doc is not None, 'Refusing to write an empty document', os.fspath(path))
    log.info('Writing %r', os.fspath(path))
    ensure_parent_dir(path)
    with write_file_atomically(path) as f:
        json.dump(doc, f, indent=4)
        f.write('\n')


def json_hash(o: AnyJSON, hash=None):
    """
    Efficiently compute a hash of a JSON object. The order of the keys in a
    dictionary does not affect the hash.

    >>> o = {'foo': 1, 'bar': 2.0, 'baz': 'baz'}
    >>> json_hash(o).hexdigest()
    '08335acd02f77fdd32775f51a1766796e91bc0e1'

    >>> json_hash(o).digest() == json_hash(dict(reversed(o.items()))).digest()
    True
    """
    if hash is None:
        hash = hashlib.sha1()
    encoder = json.JSONEncoder(sort_keys=True, separators=(',', ':'))
    for chunk in encoder.iterencode(o):
        hash.update(chunk.encode())
    return hash
