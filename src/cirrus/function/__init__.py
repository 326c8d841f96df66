from collections.abc import (
    Mapping,
    Sequence,
)
from enum import (
    Enum,
)
from typing import (
    Optional,
    Union,
)

import attr

from cirrus import (
    require,
)
from cirrus.collections import (
    adict,
)
from cirrus.types import (
    JSON,
    JSONs,
    MutableJSON,
)

category = 'function'

provider = 'awscloudformation'

function_parameters_file_name = 'function-parameters.json'

parameters_file_name = 'parameters.json'

layer_parameters_file_name = 'layer-parameters.json'

layer_runtimes_file_name = 'layer-runtimes.json'

#: The runtime whose functions are still built the legacy way
legacy_node_runtime = 'nodejs'

#: The suffix of function source templates, stripped from the name of the
#: rendered file
template_suffix = '.j2'


class ServiceName(Enum):
    lambda_function = 'Lambda'
    lambda_layer = 'LambdaLayer'


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class FunctionTemplate:
    source_root: str
    source_files: Sequence[str]
    #: Maps a source file to its destination, relative to the resource
    #: directory. Unmapped files are rendered to their own name, sans suffix.
    dest_map: Mapping[str, str] = attr.ib(factory=dict)
    default_editor_file: Optional[str] = None

    def destination(self, source_file: str) -> str:
        """
        >>> t = FunctionTemplate(source_root='t',
        ...                      source_files=['index.js.j2', 'event.json'],
        ...                      dest_map={'event.json': 'src/event.json'})
        >>> list(map(t.destination, t.source_files))
        ['index.js', 'src/event.json']
        """
        try:
            return self.dest_map[source_file]
        except KeyError:
            return source_file.removesuffix(template_suffix)

    def to_json(self) -> JSON:
        return adict(sourceRoot=self.source_root,
                     sourceFiles=list(self.source_files),
                     destMap=dict(self.dest_map),
                     defaultEditorFile=self.default_editor_file)


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class FunctionRuntime:
    name: str
    value: str
    cloud_template_value: str
    default_handler: Optional[str] = None

    def to_json(self) -> JSON:
        return adict(name=self.name,
                     value=self.value,
                     cloudTemplateValue=self.cloud_template_value,
                     defaultHandler=self.default_handler)


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class ProjectLayer:
    """
    A reference to a layer managed by the same project
    """
    resource_name: str
    #: None selects whichever version of the layer is the latest
    version: Optional[int] = None

    def to_json(self) -> JSON:
        return {
            'type': 'ProjectLayer',
            'resourceName': self.resource_name,
            'version': self.version,
            'isLatestVersionSelected': self.version is None
        }


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class ExternalLayer:
    """
    A reference to a layer outside of the project, by ARN
    """
    arn: str

    def to_json(self) -> JSON:
        return {
            'type': 'ExternalLayer',
            'arn': self.arn
        }


LayerReference = Union[ProjectLayer, ExternalLayer]


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class FunctionParameters:
    """
    The parameters of a function created from one of the regular function
    templates
    """
    resource_name: Optional[str] = None
    function_name: Optional[str] = None
    depends_on: JSONs = ()
    #: Opaque fields supplied by the caller, persisted verbatim
    mutable_parameters_state: JSON = attr.ib(factory=dict)
    #: None if the function was configured without considering layers, which
    #: is different from an empty sequence
    lambda_layers: Optional[Sequence[LayerReference]] = None
    function_template: FunctionTemplate
    cloud_resource_template_path: str
    runtime: FunctionRuntime
    runtime_plugin_id: str
    cloudwatch_rule: Optional[str] = None

    @property
    def name(self) -> str:
        name = self.resource_name or self.function_name
        require(bool(name), 'A function needs a resource name or a function name')
        return name

    def lambda_layers_json(self) -> Optional[JSONs]:
        if self.lambda_layers is None:
            return None
        else:
            return [layer.to_json() for layer in self.lambda_layers]

    def to_json(self) -> MutableJSON:
        return adict(resourceName=self.resource_name,
                     functionName=self.function_name,
                     dependsOn=list(self.depends_on),
                     mutableParametersState=dict(self.mutable_parameters_state),
                     lambdaLayers=self.lambda_layers_json(),
                     functionTemplate=self.function_template.to_json(),
                     cloudResourceTemplatePath=self.cloud_resource_template_path,
                     runtime=self.runtime.to_json(),
                     runtimePluginId=self.runtime_plugin_id,
                     cloudwatchRule=self.cloudwatch_rule)


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class TriggerFunctionParameters:
    """
    The parameters of a function generated to respond to the events of
    another resource, such as the triggers of a user pool
    """
    resource_name: str
    trigger_provider: str
    modules: Sequence[str]
    parent_resource: str
    parent_stack: str
    function_template: FunctionTemplate
    cloud_resource_template_path: str
    #: A JSON array of `{"key": …, "value": …}` objects
    trigger_envs: str = '[]'
    trigger_iam_policies: Optional[JSON] = None
    trigger_dir: Optional[str] = None
    role_name: Optional[str] = None
    cloudwatch_rule: Optional[str] = None

    @property
    def name(self) -> str:
        require(bool(self.resource_name), 'A trigger function needs a resource name')
        return self.resource_name

    def to_json(self) -> MutableJSON:
        return adict(trigger=True,
                     resourceName=self.resource_name,
                     triggerProvider=self.trigger_provider,
                     modules=list(self.modules),
                     parentResource=self.parent_resource,
                     parentStack=self.parent_stack,
                     functionTemplate=self.function_template.to_json(),
                     cloudResourceTemplatePath=self.cloud_resource_template_path,
                     triggerEnvs=self.trigger_envs,
                     triggerIAMPolicies=self.trigger_iam_policies,
                     triggerDir=self.trigger_dir,
                     roleName=self.role_name,
                     cloudwatchRule=self.cloudwatch_rule)


AnyFunctionParameters = Union[FunctionParameters, TriggerFunctionParameters]
