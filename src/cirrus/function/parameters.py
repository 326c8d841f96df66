import logging
from pathlib import (
    Path,
)

from cirrus.function import (
    category,
)
from cirrus.json import (
    read_json,
    write_json,
)
from cirrus.project import (
    ProjectContext,
)
from cirrus.types import (
    JSON,
    MutableJSON,
)

log = logging.getLogger(__name__)

#: Earlier releases mistakenly wrote this field to parameter files
deprecated_fields = frozenset({'mutableParametersState'})


def parameters_file_path(context: ProjectContext, resource_name: str, file_name: str) -> Path:
    return context.paths.resource_dir_path(category, resource_name) / file_name


def read_parameters_file(context: ProjectContext,
                         resource_name: str,
                         file_name: str
                         ) -> MutableJSON:
    """
    The contents of the given parameter file of the given resource, or an
    empty document if there is no such file.
    """
    path = parameters_file_path(context, resource_name, file_name)
    return read_json(path, throw_if_not_exist=False) or {}


def create_parameters_file(context: ProjectContext,
                           parameters: JSON,
                           resource_name: str,
                           file_name: str
                           ) -> None:
    """
    Merge the given parameters into the given parameter file of the given
    resource, creating the file if necessary. Given parameters replace
    existing ones of the same name, other existing parameters are retained,
    except for deprecated ones, which are removed.
    """
    path = parameters_file_path(context, resource_name, file_name)
    current_parameters = read_json(path, throw_if_not_exist=False) or {}
    merged_parameters = {**current_parameters, **parameters}
    for field in deprecated_fields & merged_parameters.keys():
        log.info('Removing deprecated field %r from %r', field, str(path))
        del merged_parameters[field]
    write_json(path, merged_parameters)
