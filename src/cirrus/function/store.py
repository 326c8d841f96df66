"""
Create, update and remove the files and the metadata of functions and layers.

Each operation writes to the file system and the metadata stores in a fixed
order and does not undo earlier writes if a later one fails. All writes are
idempotent so a failed operation can simply be retried.

Whether a layer is a multi-environment layer is decided by the context's
predicate whenever one of its documents is written, not once per operation.
"""
import json
import logging
from pathlib import (
    Path,
)
from typing import (
    Optional,
)

import attr

from cirrus import (
    config,
)
from cirrus.collections import (
    deep_set,
)
from cirrus.function import (
    AnyFunctionParameters,
    FunctionParameters,
    TriggerFunctionParameters,
    category,
    function_parameters_file_name,
    layer_parameters_file_name,
    parameters_file_name,
)
from cirrus.function.layer import (
    LayerParameters,
)
from cirrus.function.layer.cloudformation import (
    generate_layer_cfn,
    layer_template_file_name,
    to_layer_cfn_array,
)
from cirrus.function.layer.folders import (
    ensure_layer_folders,
)
from cirrus.function.layer.runtimes import (
    save_layer_runtimes,
)
from cirrus.function.parameters import (
    create_parameters_file,
)
from cirrus.function.projections import (
    to_amplify_meta_params,
    to_breadcrumbs,
    to_cfn_parameters,
    to_meta_and_backend_params,
    to_mutable_state_document,
    to_resource_opts,
    to_stored_params,
)
from cirrus.function.team_provider import (
    remove_layer_team_provider_info,
    set_layer_team_provider_info,
)
from cirrus.json import (
    write_json,
)
from cirrus.project import (
    ProjectContext,
)
from cirrus.template import (
    CopyJob,
)
from cirrus.types import (
    JSON,
    MutableJSON,
)

log = logging.getLogger(__name__)


def create_function_resources(context: ProjectContext,
                              parameters: AnyFunctionParameters
                              ) -> None:
    name = parameters.name
    log.info('Creating resources for function %r', name)
    context.state.update_meta_after_resource_add(category, name, to_resource_opts(parameters))
    _copy_template_files(context, parameters)
    save_mutable_state(context, parameters)
    save_cfn_parameters(context, parameters)
    context.state.leave_breadcrumbs(category, name, to_breadcrumbs(parameters))


def save_mutable_state(context: ProjectContext, parameters: AnyFunctionParameters) -> None:
    create_parameters_file(context,
                           to_mutable_state_document(parameters),
                           parameters.name,
                           function_parameters_file_name)


def save_cfn_parameters(context: ProjectContext, parameters: AnyFunctionParameters) -> None:
    cfn_parameters = to_cfn_parameters(parameters)
    if cfn_parameters is None:
        log.debug('Function %r has no CloudFormation parameters', parameters.name)
    else:
        create_parameters_file(context, cfn_parameters, parameters.name, parameters_file_name)


def _copy_template_files(context: ProjectContext, parameters: AnyFunctionParameters) -> None:
    resource_dir = context.paths.resource_dir_path(category, parameters.name)
    template = parameters.function_template
    copy_jobs = [
        CopyJob(dir=template.source_root,
                template=source_file,
                target=str(resource_dir / template.destination(source_file)))
        for source_file in template.source_files
    ]
    template_params = _template_params(context, parameters)
    context.template_engine.copy_batch(copy_jobs, template_params, False)

    cloud_template_job = CopyJob(dir='',
                                 template=parameters.cloud_resource_template_path,
                                 target=str(resource_dir / f'{parameters.name}-cloudformation-template.json'))
    context.template_engine.copy_batch([cloud_template_job], template_params, False)


def _template_params(context: ProjectContext, parameters: AnyFunctionParameters) -> MutableJSON:
    """
    The parameters for rendering the templates of the given function: its
    own parameters, the environment variables of a trigger function, the
    layer references of a function using layers and the CORS flag.
    """
    template_params = parameters.to_json()
    match parameters:
        case TriggerFunctionParameters():
            trigger_envs = context.state.load_env_resource_parameters(context.env_name,
                                                                      category,
                                                                      parameters.name)
            # Malformed JSON propagates as a JSONDecodeError
            declared_envs = json.loads(parameters.trigger_envs) or []
            template_params['triggerEnvs'] = declared_envs
            for env in declared_envs:
                trigger_envs[env['key']] = env['value']
            template_params.update(trigger_envs)
        case FunctionParameters(lambda_layers=None):
            pass
        case FunctionParameters(lambda_layers=lambda_layers):
            template_params['lambdaLayersCFNArray'] = to_layer_cfn_array(lambda_layers,
                                                                         context.env_name)
        case _:
            assert False, parameters
    template_params['enableCors'] = config.lambda_cors_header
    return template_params


def create_layer_artifacts(context: ProjectContext,
                           parameters: LayerParameters,
                           latest_version: int = 1
                           ) -> Path:
    """
    Create the directories and files of a new layer and register it in the
    project metadata.

    :return: the path to the layer directory
    """
    log.info('Creating artifacts for layer %r', parameters.layer_name)
    layer_dir = ensure_layer_folders(context, parameters)
    _update_layer_state(context, parameters, layer_dir)
    create_parameters_file(context,
                           {'layerVersion': latest_version},
                           parameters.layer_name,
                           parameters_file_name)
    _write_layer_cfn_file(parameters, layer_dir)
    _add_layer_to_amplify_meta(context, parameters)
    return layer_dir


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class LayerUpdateOptions:
    """
    Selects the artifacts updated by :func:`update_layer_artifacts`. The
    layer's folders are always ensured.
    """
    #: Update the layer's state in the local parameters file or, for a
    #: multi-environment layer, in the team-provider document
    layer_params: bool = True
    #: Rewrite the CloudFormation template, and the parameters file if a new
    #: version is given
    cfn_file: bool = True
    #: Update the layer's entry in the project metadata
    amplify_meta: bool = True


def update_layer_artifacts(context: ProjectContext,
                           parameters: LayerParameters,
                           latest_version: Optional[int] = None,
                           options: LayerUpdateOptions = LayerUpdateOptions()
                           ) -> Path:
    """
    Update the files and the metadata of an existing layer.

    :param latest_version: The new version of the layer, if any

    :param options: Selects what to update

    :return: the path to the layer directory
    """
    log.info('Updating artifacts for layer %r with %r', parameters.layer_name, options)
    layer_dir = ensure_layer_folders(context, parameters)
    if options.layer_params:
        _update_layer_state(context, parameters, layer_dir)
    if options.cfn_file:
        if latest_version is not None:
            create_parameters_file(context,
                                   {'layerVersion': latest_version},
                                   parameters.layer_name,
                                   parameters_file_name)
        _write_layer_cfn_file(parameters, layer_dir)
    if options.amplify_meta:
        _write_parameters_to_amplify_meta(context, parameters)
    return layer_dir


def remove_layer_artifacts(context: ProjectContext, layer_name: str) -> None:
    """
    Remove the metadata of a layer that is not removed along with the layer's
    directory. Only a multi-environment layer has any.
    """
    if context.is_multi_env_layer(layer_name):
        remove_layer_team_provider_info(context, layer_name)
    else:
        log.debug('Layer %r is not a multi-environment layer, nothing to remove', layer_name)


def _update_layer_state(context: ProjectContext, parameters: LayerParameters, layer_dir: Path) -> None:
    layer_name = parameters.layer_name
    if context.is_multi_env_layer(layer_name):
        set_layer_team_provider_info(context,
                                     layer_name,
                                     to_stored_params(parameters, context.is_multi_env_layer(layer_name)))
        save_layer_runtimes(layer_dir, layer_name, parameters.runtimes)
    else:
        write_json(layer_dir / layer_parameters_file_name,
                   to_stored_params(parameters, context.is_multi_env_layer(layer_name)))


def _write_layer_cfn_file(parameters: LayerParameters, layer_dir: Path) -> None:
    write_json(layer_dir / layer_template_file_name(parameters.layer_name),
               generate_layer_cfn(parameters))


def _add_layer_to_amplify_meta(context: ProjectContext, parameters: LayerParameters) -> None:
    context.state.update_meta_after_resource_add(category,
                                                 parameters.layer_name,
                                                 to_meta_and_backend_params(parameters))
    _write_parameters_to_amplify_meta(context, parameters)


def _write_parameters_to_amplify_meta(context: ProjectContext, parameters: LayerParameters) -> None:
    layer_name = parameters.layer_name
    meta_params: JSON = to_amplify_meta_params(parameters, context.is_multi_env_layer(layer_name))
    amplify_meta = context.state.get_meta()
    deep_set(amplify_meta, [category, layer_name], meta_params)
    context.state.set_meta(amplify_meta)
