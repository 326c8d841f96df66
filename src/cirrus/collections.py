from collections.abc import (
    Iterable,
    Mapping,
    MutableMapping,
)
from typing import (
    Any,
    TypeVar,
    Union,
)

from cirrus import (
    require,
)
from cirrus.types import (
    KeyPath,
)

K = TypeVar('K')
V = TypeVar('V')


def adict(seq: Union[Mapping[K, V], Iterable[tuple[K, V]]] = None,
          /,
          **kwargs: V
          ) -> dict[K, V]:
    """
    Like dict() but ignores keyword arguments that are None. Really only useful
    for literals. May be inefficient for large arguments.

    >>> adict(a=None, b=42)
    {'b': 42}

    None values in the positional argument are retained.

    >>> adict({'a':None}, b=None, c=42)
    {'a': None, 'c': 42}
    """
    kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return kwargs if seq is None else dict(seq, **kwargs)


def deep_get(tree: Mapping[str, Any], path: KeyPath, default: Any = None) -> Any:
    """
    Return the value at the given path into a tree of nested mappings, or the
    given default if any node along the path is missing or not a mapping.

    >>> deep_get({'a': {'b': 1}}, ['a', 'b'])
    1

    >>> deep_get({'a': {'b': 1}}, ['a', 'c'], 42)
    42

    >>> deep_get({'a': 1}, ['a', 'b']) is None
    True

    An empty path yields the tree itself:

    >>> deep_get({'a': 1}, [])
    {'a': 1}
    """
    node = tree
    for key in path:
        if isinstance(node, Mapping) and key in node:
            node = node[key]
        else:
            return default
    return node


def deep_has(tree: Mapping[str, Any], path: KeyPath) -> bool:
    """
    >>> deep_has({'a': {'b': None}}, ['a', 'b'])
    True

    >>> deep_has({'a': {'b': None}}, ['a', 'c'])
    False
    """
    return deep_get(tree, path, default=_missing) is not _missing


_missing = object()


def deep_set(tree: MutableMapping[str, Any], path: KeyPath, value: Any) -> None:
    """
    Set the value at the given path into a tree of nested dictionaries,
    creating any missing intermediate dictionaries. An intermediate node that
    is not a mapping is replaced.

    >>> t = {'a': {'x': 0}}
    >>> deep_set(t, ['a', 'b', 'c'], 1)
    >>> t
    {'a': {'x': 0, 'b': {'c': 1}}}

    >>> deep_set(t, ['a', 'x', 'y'], 2)
    >>> t
    {'a': {'x': {'y': 2}, 'b': {'c': 1}}}

    >>> deep_set(t, [], 3)
    Traceback (most recent call last):
    ...
    cirrus.RequirementError: Path must not be empty
    """
    require(len(path) > 0, 'Path must not be empty')
    *parents, leaf = path
    node = tree
    for key in parents:
        child = node.get(key)
        if not isinstance(child, MutableMapping):
            child = {}
            node[key] = child
        node = child
    node[leaf] = value


def deep_unset(tree: MutableMapping[str, Any],
               path: KeyPath,
               *,
               keep: int = 0
               ) -> bool:
    """
    Remove the entry at the given path from a tree of nested dictionaries and
    then remove every ancestor of that entry that is empty, whether or not the
    entry was present.
    Ancestors at depth `keep` or less are never removed, even if empty.
    Return True if the entry was present.

    >>> t = {'dev': {'nonCFNdata': {'function': {'l1': {}, 'l2': {}}}}}
    >>> deep_unset(t, ['dev', 'nonCFNdata', 'function', 'l1'], keep=1)
    True
    >>> t
    {'dev': {'nonCFNdata': {'function': {'l2': {}}}}}

    >>> deep_unset(t, ['dev', 'nonCFNdata', 'function', 'l2'], keep=1)
    True
    >>> t
    {'dev': {}}

    Without a `keep`, pruning goes all the way to the root:

    >>> t = {'a': {'b': {'c': 1}}, 'd': 2}
    >>> deep_unset(t, ['a', 'b', 'c'])
    True
    >>> t
    {'d': 2}

    Siblings stop the pruning:

    >>> t = {'a': {'b': {'c': 1}, 'e': 3}}
    >>> deep_unset(t, ['a', 'b', 'c'])
    True
    >>> t
    {'a': {'e': 3}}

    Ancestors that were empty already are removed even if the entry is missing:

    >>> t = {'dev': {'nonCFNdata': {'function': {}}}, 'prod': {}}
    >>> deep_unset(t, ['dev', 'nonCFNdata', 'function', 'l1'], keep=1)
    False
    >>> t
    {'dev': {}, 'prod': {}}

    A missing entry with non-empty ancestors leaves the tree unchanged:

    >>> t = {'a': {'b': {'d': 1}}}
    >>> deep_unset(t, ['a', 'b', 'c'])
    False
    >>> t
    {'a': {'b': {'d': 1}}}
    """
    require(len(path) > 0, 'Path must not be empty')
    return _unset(tree, list(path), depth=0, keep=keep)


def _unset(node: MutableMapping[str, Any], path: list[str], *, depth: int, keep: int) -> bool:
    key, *rest = path
    if key not in node:
        return False
    elif rest:
        child = node[key]
        if not isinstance(child, MutableMapping):
            return False
        removed = _unset(child, rest, depth=depth + 1, keep=keep)
        # The child sits at depth + 1
        if not child and depth + 1 > keep:
            del node[key]
        return removed
    else:
        del node[key]
        return True
