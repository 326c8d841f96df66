import logging
from pathlib import (
    Path,
)

from cirrus.files import (
    ensure_dir,
    write_text,
)
from cirrus.function import (
    category,
)
from cirrus.function.layer import (
    LayerParameters,
    LayerRuntime,
)
from cirrus.project import (
    ProjectContext,
)

log = logging.getLogger(__name__)

readme_file_name = 'README.txt'

readme_content = 'Replace this file with your layer files'


def layer_dir_path(context: ProjectContext, layer_name: str) -> Path:
    return context.paths.resource_dir_path(category, layer_name)


def ensure_layer_folders(context: ProjectContext, parameters: LayerParameters) -> Path:
    """
    Ensure that the directory of the given layer exists, along with its
    `opt` directory and a library directory for each of its runtimes.

    :return: the path to the layer directory
    """
    layer_dir = layer_dir_path(context, parameters.layer_name)
    ensure_dir(layer_dir / 'opt')
    for runtime in parameters.runtimes:
        _ensure_layer_runtime_folder(layer_dir, runtime)
    return layer_dir


def _ensure_layer_runtime_folder(layer_dir: Path, runtime: LayerRuntime) -> None:
    # Files are seeded only when the runtime folder is created
    lib_dir = layer_dir / 'lib'
    runtime_dir = lib_dir / runtime.layer_executable_path
    if runtime_dir.exists():
        log.debug('Runtime folder %r already exists', str(runtime_dir))
    else:
        log.info('Provisioning %r runtime folder %r', runtime.value, str(runtime_dir))
        ensure_dir(runtime_dir)
        write_text(runtime_dir / readme_file_name, readme_content)
        # Default files go into the library root, not the runtime folder
        for default_file in runtime.layer_default_files:
            write_text(lib_dir / default_file.path / default_file.filename,
                       default_file.content)
