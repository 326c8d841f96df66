"""
Locations and accessors of the documents that make up the metadata of an
infrastructure-as-code project.

A project keeps three kinds of metadata about its resources:

- per-resource parameter files inside the resource's directory,

- the project metadata document (``amplify-meta.json``) and its companion,
  the backend configuration (``backend-config.json``), both shared by all
  environments and kept under version control,

- the team-provider document (``team-provider-info.json``), keyed by
  environment name and holding data that differs between environments.
"""
import logging
from pathlib import (
    Path,
)
from typing import (
    Callable,
    Optional,
)

import attr

from cirrus import (
    config,
    require,
)
from cirrus.collections import (
    deep_get,
    deep_set,
)
from cirrus.function import (
    category,
    layer_parameters_file_name,
)
from cirrus.json import (
    read_json,
    write_json,
)
from cirrus.template import (
    JinjaTemplateEngine,
    TemplateEngine,
)
from cirrus.types import (
    JSON,
    MutableJSON,
)

log = logging.getLogger(__name__)

amplify_dir_name = 'amplify'
backend_dir_name = 'backend'
amplify_meta_file_name = 'amplify-meta.json'
backend_config_file_name = 'backend-config.json'
team_provider_info_file_name = 'team-provider-info.json'
local_env_info_file_name = 'local-env-info.json'
breadcrumbs_file_name = 'amplify.state'


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class PathManager:
    project_root: Path = attr.ib(converter=Path)

    def amplify_dir_path(self) -> Path:
        return self.project_root / amplify_dir_name

    def backend_dir_path(self) -> Path:
        return self.amplify_dir_path() / backend_dir_name

    def amplify_meta_file_path(self) -> Path:
        return self.backend_dir_path() / amplify_meta_file_name

    def backend_config_file_path(self) -> Path:
        return self.backend_dir_path() / backend_config_file_name

    def team_provider_info_file_path(self) -> Path:
        return self.amplify_dir_path() / team_provider_info_file_name

    def local_env_info_file_path(self) -> Path:
        return self.amplify_dir_path() / '.config' / local_env_info_file_name

    def resource_dir_path(self, category: str, resource_name: str) -> Path:
        require(bool(resource_name), 'Resource name must not be empty', category)
        return self.backend_dir_path() / category / resource_name


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class StateManager:
    """
    Loads and stores the project-wide metadata documents. Nothing is cached,
    every getter reads the file anew and every setter overwrites it. A
    missing document reads as an empty one.
    """
    paths: PathManager

    def _get(self, path: Path) -> MutableJSON:
        return read_json(path, throw_if_not_exist=False) or {}

    def get_meta(self) -> MutableJSON:
        return self._get(self.paths.amplify_meta_file_path())

    def set_meta(self, meta: JSON) -> None:
        write_json(self.paths.amplify_meta_file_path(), meta)

    def get_backend_config(self) -> MutableJSON:
        return self._get(self.paths.backend_config_file_path())

    def set_backend_config(self, backend_config: JSON) -> None:
        write_json(self.paths.backend_config_file_path(), backend_config)

    def get_team_provider_info(self) -> MutableJSON:
        return self._get(self.paths.team_provider_info_file_path())

    def set_team_provider_info(self, team_provider_info: JSON) -> None:
        write_json(self.paths.team_provider_info_file_path(), team_provider_info)

    def get_local_env_name(self) -> Optional[str]:
        local_env_info = self._get(self.paths.local_env_info_file_path())
        return local_env_info.get('envName')

    def update_meta_after_resource_add(self,
                                       category: str,
                                       resource_name: str,
                                       descriptor: JSON
                                       ) -> None:
        """
        Register a resource in the project metadata and in the backend
        configuration. An existing entry for the resource is replaced.
        """
        log.info('Registering resource %r in category %r', resource_name, category)
        for load, store in [
            (self.get_meta, self.set_meta),
            (self.get_backend_config, self.set_backend_config)
        ]:
            document = load()
            deep_set(document, [category, resource_name], dict(descriptor))
            store(document)

    def load_env_resource_parameters(self,
                                     env_name: str,
                                     category: str,
                                     resource_name: str
                                     ) -> MutableJSON:
        """
        The environment-specific parameters of the given resource, as recorded
        in the team-provider document.
        """
        team_provider_info = self.get_team_provider_info()
        path = [env_name, 'categories', category, resource_name]
        return dict(deep_get(team_provider_info, path, default={}))

    def leave_breadcrumbs(self, category: str, resource_name: str, breadcrumbs: JSON) -> None:
        path = self.paths.resource_dir_path(category, resource_name) / breadcrumbs_file_name
        write_json(path, breadcrumbs)


#: Given the name of a layer, return True if its runtime configuration is kept
#: per environment in the team-provider document
MultiEnvPredicate = Callable[[str], bool]


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class ProjectContext:
    """
    Everything an operation on the resources of a project needs to know about
    the project and the environment it operates in.
    """
    env_name: str
    paths: PathManager
    state: StateManager
    template_engine: TemplateEngine
    is_multi_env_layer: MultiEnvPredicate

    @classmethod
    def for_project(cls,
                    project_root: Optional[str] = None,
                    *,
                    env_name: Optional[str] = None,
                    template_engine: Optional[TemplateEngine] = None,
                    is_multi_env_layer: Optional[MultiEnvPredicate] = None
                    ) -> 'ProjectContext':
        """
        A context for the project at the given root directory, or at the root
        configured via ``CIRRUS_PROJECT_ROOT``. If no environment name is
        given, the project's current local environment is used.
        """
        if project_root is None:
            project_root = config.project_root
        paths = PathManager(project_root=project_root)
        state = StateManager(paths=paths)
        if env_name is None:
            env_name = state.get_local_env_name()
            require(env_name is not None,
                    'No current environment is configured for the project', project_root)
        if is_multi_env_layer is None:
            def is_multi_env_layer(layer_name: str) -> bool:
                return layer_is_multi_env(paths, layer_name)
        return cls(env_name=env_name,
                   paths=paths,
                   state=state,
                   template_engine=JinjaTemplateEngine() if template_engine is None else template_engine,
                   is_multi_env_layer=is_multi_env_layer)


def layer_is_multi_env(paths: PathManager, layer_name: str) -> bool:
    """
    A layer is multi-environment unless its local parameters file records the
    runtimes. Layers created before runtime configuration moved to the
    team-provider document have such a file, new layers don't.
    """
    path = paths.resource_dir_path(category, layer_name) / layer_parameters_file_name
    layer_parameters = read_json(path, throw_if_not_exist=False)
    if layer_parameters is None:
        return True
    else:
        return 'runtimes' not in layer_parameters