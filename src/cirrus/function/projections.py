"""
Derive the documents persisted to each of the metadata stores from the
parameters of a function or layer. Nothing in this module performs I/O.

Layer runtimes are environment-specific for multi-environment layers. Their
runtimes live in the team-provider document, one copy per environment, and
must not appear in the documents shared by all environments.
"""
from typing import (
    Optional,
)

from cirrus.collections import (
    adict,
)
from cirrus.function import (
    AnyFunctionParameters,
    FunctionParameters,
    ServiceName,
    TriggerFunctionParameters,
    legacy_node_runtime,
    provider,
)
from cirrus.function.layer import (
    LayerParameters,
    layer_version_map_to_json,
)
from cirrus.types import (
    JSON,
    MutableJSON,
)

trigger_runtime_plugin_id = 'amplify-nodejs-function-runtime-provider'

trigger_default_editor_file = 'src/index.js'


def to_stored_params(parameters: LayerParameters, is_multi_env: bool) -> MutableJSON:
    stored_params = {
        'layerVersionMap': layer_version_map_to_json(parameters.layer_version_map)
    }
    if not is_multi_env:
        stored_params['runtimes'] = [runtime.to_json() for runtime in parameters.runtimes]
    return stored_params


def to_meta_and_backend_params(parameters: LayerParameters) -> MutableJSON:
    return {
        'providerPlugin': parameters.provider_context.provider,
        'service': parameters.provider_context.service,
        'build': parameters.build
    }


def to_amplify_meta_params(parameters: LayerParameters, is_multi_env: bool) -> MutableJSON:
    return {
        **to_stored_params(parameters, is_multi_env),
        **to_meta_and_backend_params(parameters)
    }


def to_resource_opts(parameters: AnyFunctionParameters) -> MutableJSON:
    """
    The descriptor that registers a function in the project metadata. Trigger
    functions don't declare dependencies.
    """
    resource_opts = {
        'build': True,
        'providerPlugin': provider,
        'service': ServiceName.lambda_function.value
    }
    match parameters:
        case TriggerFunctionParameters():
            pass
        case FunctionParameters(depends_on=depends_on):
            resource_opts['dependsOn'] = list(depends_on)
        case _:
            assert False, parameters
    return resource_opts


def to_breadcrumbs(parameters: AnyFunctionParameters) -> JSON:
    """
    The information later needed to locate the plugin that builds the given
    function and the runtime it builds it for.
    """
    match parameters:
        case TriggerFunctionParameters():
            return {
                'pluginId': trigger_runtime_plugin_id,
                'functionRuntime': legacy_node_runtime,
                'useLegacyBuild': True,
                'defaultEditorFile': trigger_default_editor_file
            }
        case FunctionParameters():
            return adict(pluginId=parameters.runtime_plugin_id,
                         functionRuntime=parameters.runtime.value,
                         useLegacyBuild=parameters.runtime.value == legacy_node_runtime,
                         defaultEditorFile=parameters.function_template.default_editor_file)
        case _:
            assert False, parameters


def to_mutable_state_document(parameters: AnyFunctionParameters) -> MutableJSON:
    """
    The contents of the function parameters file. For a trigger function,
    that's all of its parameters except those describing the templates it
    was generated from. For any other function it's the opaque state supplied
    by the caller and the layers the function uses, if any.
    """
    match parameters:
        case TriggerFunctionParameters():
            # `triggerEnvs` is stored as the serialized JSON string it was
            # declared as, not the decoded list used for rendering templates
            document = parameters.to_json()
            del document['functionTemplate']
            del document['cloudResourceTemplatePath']
            return document
        case FunctionParameters():
            return adict(parameters.mutable_parameters_state,
                         lambdaLayers=parameters.lambda_layers_json())
        case _:
            assert False, parameters


def to_cfn_parameters(parameters: AnyFunctionParameters) -> Optional[MutableJSON]:
    """
    The parameters the CloudFormation template of the given function expects,
    or None if it expects none.
    """
    match parameters:
        case TriggerFunctionParameters():
            return adict({
                'modules': ','.join(parameters.modules),
                'resourceName': parameters.resource_name
            }, CloudWatchRule=parameters.cloudwatch_rule)
        case FunctionParameters(cloudwatch_rule=None):
            return None
        case FunctionParameters(cloudwatch_rule=cloudwatch_rule):
            return {'CloudWatchRule': cloudwatch_rule}
        case _:
            assert False, parameters
