from collections.abc import (
    Mapping,
    Sequence,
)
import json
import logging
import os
from pathlib import (
    Path,
)

import attr
from more_itertools import (
    one,
)

from cirrus import (
    require,
)
from cirrus.function import (
    layer_runtimes_file_name,
)
from cirrus.function.layer import (
    LayerDefaultFile,
    LayerRuntime,
)
from cirrus.json import (
    read_json,
    write_json,
)
from cirrus.types import (
    JSONs,
)

log = logging.getLogger(__name__)

python_version = '3.11'

nodejs = LayerRuntime(
    name='NodeJS',
    value='nodejs',
    layer_executable_path='nodejs',
    cloud_template_value='nodejs18.x',
    layer_default_files=[
        LayerDefaultFile(path='nodejs',
                         filename='package.json',
                         content=json.dumps({'version': '1.0.0', 'dependencies': {}}, indent=2))
    ]
)

python = LayerRuntime(
    name='Python',
    value='python',
    layer_executable_path=os.path.join('python', 'lib', f'python{python_version}', 'site-packages'),
    cloud_template_value=f'python{python_version}',
    layer_default_files=[
        LayerDefaultFile(path='python',
                         filename='Pipfile',
                         content='\n'.join([
                             '[[source]]',
                             'name = "pypi"',
                             'url = "https://pypi.org/simple"',
                             'verify_ssl = true',
                             '',
                             '[packages]',
                             '',
                             '[requires]',
                             f'python_version = "{python_version}"',
                             ''
                         ]))
    ]
)


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class LayerRuntimeRegistry:
    """
    The runtimes a layer can support, by runtime value

    >>> registry = LayerRuntimeRegistry()
    >>> registry.get('python').cloud_template_value
    'python3.11'

    >>> registry.get('cobol')
    Traceback (most recent call last):
    ...
    cirrus.RequirementError: ('Unsupported layer runtime', 'cobol', ['nodejs', 'python'])
    """
    runtimes: Sequence[LayerRuntime] = (nodejs, python)

    def get(self, value: str) -> LayerRuntime:
        runtimes = [runtime for runtime in self.runtimes if runtime.value == value]
        require(len(runtimes) > 0,
                'Unsupported layer runtime', value, self.values())
        return one(runtimes)

    def values(self) -> list[str]:
        return [runtime.value for runtime in self.runtimes]


def save_layer_runtimes(layer_dir_path: Path,
                        layer_name: str,
                        runtimes: Sequence[LayerRuntime]
                        ) -> None:
    """
    Record the runtimes of a multi-environment layer in its directory, so
    that they are known regardless of the current environment.
    """
    log.info('Saving %i runtime(s) of layer %r', len(runtimes), layer_name)
    write_json(layer_dir_path / layer_runtimes_file_name,
               {'runtimes': [runtime.to_json() for runtime in runtimes]})


def load_layer_runtimes(layer_dir_path: Path) -> JSONs:
    """
    The runtimes saved by :func:`save_layer_runtimes`, or an empty list if
    none were saved.
    """
    document: Mapping = read_json(layer_dir_path / layer_runtimes_file_name,
                                  throw_if_not_exist=False) or {}
    return document.get('runtimes', [])
