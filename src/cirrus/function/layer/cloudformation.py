"""
CloudFormation fragments for layers and for the functions that use them
"""
from collections.abc import (
    Iterable,
    Sequence,
)
import re

from cirrus.function import (
    ExternalLayer,
    LayerReference,
    ProjectLayer,
    category,
)
from cirrus.function.layer import (
    LayerParameters,
    LayerPermission,
    PermissionType,
    latest_version,
)
from cirrus.json import (
    json_hash,
)
from cirrus.types import (
    AnyJSON,
    JSON,
    MutableJSON,
)

template_format_version = '2010-09-09'


def layer_template_file_name(layer_name: str) -> str:
    return f'{layer_name}-awscloudformation-template.json'


def generate_layer_cfn(parameters: LayerParameters) -> MutableJSON:
    """
    A template that publishes the latest version of the given layer and
    grants the permissions declared for each of its versions.

    >>> from cirrus.function.layer import LayerRuntime, LayerVersionMetadata, ProviderContext
    >>> p = LayerParameters(layer_name='foo',
    ...                     runtimes=[LayerRuntime(name='NodeJS',
    ...                                            value='nodejs',
    ...                                            layer_executable_path='nodejs',
    ...                                            cloud_template_value='nodejs18.x')],
    ...                     layer_version_map={
    ...                         1: LayerVersionMetadata(permissions=[
    ...                             LayerPermission(type=PermissionType.aws_accounts,
    ...                                             accounts=['123456789012'])
    ...                         ]),
    ...                         2: LayerVersionMetadata(permissions=[
    ...                             LayerPermission(type=PermissionType.public)
    ...                         ])
    ...                     },
    ...                     provider_context=ProviderContext(provider='awscloudformation',
    ...                                                      service='LambdaLayer'))
    >>> t = generate_layer_cfn(p)
    >>> sorted(t['Resources'])  # doctest: +ELLIPSIS
    ['LambdaLayerVersion...', 'LayerPermissionAwsAccounts1123456789012', 'LayerPermissionPublic2']

    >>> t['Resources']['LayerPermissionPublic2']['Properties']['LayerVersionArn'] == t['Outputs']['Arn']['Value']
    True

    >>> t['Resources']['LayerPermissionAwsAccounts1123456789012']['Properties']['LayerVersionArn']
    {'Fn::Sub': 'arn:aws:lambda:${AWS::Region}:${AWS::AccountId}:layer:foo-${env}:1'}
    """
    version = latest_version(parameters.layer_version_map)
    logical_id = layer_version_logical_id(parameters)
    resources = {
        logical_id: {
            'Type': 'AWS::Lambda::LayerVersion',
            'Properties': {
                'CompatibleRuntimes': [
                    runtime.cloud_template_value
                    for runtime in parameters.runtimes
                ],
                'Content': {
                    'S3Bucket': {'Ref': 'deploymentBucketName'},
                    'S3Key': {'Ref': 's3Key'}
                },
                'Description': f'Version {version} of layer {parameters.layer_name}',
                'LayerName': _qualified_layer_name(parameters.layer_name)
            },
            'DeletionPolicy': 'Delete',
            'UpdateReplacePolicy': 'Retain'
        }
    }
    for v, metadata in sorted(parameters.layer_version_map.items()):
        if v == version:
            layer_version_arn = {'Ref': logical_id}
        else:
            layer_version_arn = {'Fn::Sub': _layer_version_arn(parameters.layer_name, '${env}', v)}
        for permission in metadata.permissions:
            resources.update(_permission_resources(permission, v, layer_version_arn))
    return {
        'AWSTemplateFormatVersion': template_format_version,
        'Description': f'Lambda layer {parameters.layer_name}',
        'Parameters': {
            'env': {'Type': 'String'},
            'deploymentBucketName': {'Type': 'String'},
            's3Key': {'Type': 'String'}
        },
        'Resources': resources,
        'Outputs': {
            'Arn': {
                'Value': {'Ref': logical_id}
            }
        }
    }


def layer_version_logical_id(parameters: LayerParameters) -> str:
    """
    The logical ID of the layer version resource changes with the latest
    version and its content, so that CloudFormation publishes a new version
    instead of updating the existing one in place.
    """
    version = latest_version(parameters.layer_version_map)
    metadata = parameters.layer_version_map[version]
    digest = json_hash({
        'version': version,
        'hash': metadata.hash,
        'runtimes': [runtime.to_json() for runtime in parameters.runtimes]
    }).hexdigest()
    return 'LambdaLayerVersion' + digest[:8]


def _qualified_layer_name(layer_name: str) -> JSON:
    return {'Fn::Sub': [f'{layer_name}-${{env}}', {'env': {'Ref': 'env'}}]}


def _layer_version_arn(layer_name: str, env: str, version: int) -> str:
    return ('arn:aws:lambda:${AWS::Region}:${AWS::AccountId}:layer:'
            f'{layer_name}-{env}:{version}')


def _permission_resources(permission: LayerPermission,
                          version: int,
                          layer_version_arn: AnyJSON
                          ) -> Iterable[tuple[str, JSON]]:
    def resource(suffix: str, **properties: str) -> tuple[str, JSON]:
        logical_id = f'LayerPermission{permission.type.value}{version}{_alphanumeric(suffix)}'
        return logical_id, {
            'Type': 'AWS::Lambda::LayerVersionPermission',
            'Properties': {
                'Action': 'lambda:GetLayerVersion',
                'LayerVersionArn': layer_version_arn,
                **properties
            }
        }

    match permission.type:
        case PermissionType.private:
            # Only the owning account has access, which needs no grant
            return []
        case PermissionType.public:
            return [resource('', Principal='*')]
        case PermissionType.aws_accounts:
            return [resource(account, Principal=account) for account in permission.accounts]
        case PermissionType.aws_org:
            return [resource(org, Principal='*', OrganizationId=org) for org in permission.orgs]
        case permission_type:
            assert False, permission_type


def _alphanumeric(s: str) -> str:
    """
    >>> _alphanumeric('o-a1b2c3d4e5')
    'oa1b2c3d4e5'
    """
    return re.sub(r'[^A-Za-z0-9]', '', s)


def to_layer_cfn_array(layers: Sequence[LayerReference], env_name: str) -> list[AnyJSON]:
    """
    The values that reference the given layers from the template of a
    function using them.

    >>> to_layer_cfn_array([ProjectLayer(resource_name='foo'),
    ...                     ProjectLayer(resource_name='bar', version=3),
    ...                     ExternalLayer(arn='arn:aws:lambda:us-east-1:123456789012:layer:baz:1')],
    ...                    env_name='dev')  # doctest: +NORMALIZE_WHITESPACE
    [{'Fn::GetAtt': ['functionfoo', 'Outputs.Arn']},
     {'Fn::Sub': 'arn:aws:lambda:${AWS::Region}:${AWS::AccountId}:layer:bar-dev:3'},
     'arn:aws:lambda:us-east-1:123456789012:layer:baz:1']
    """
    result = []
    for layer in layers:
        match layer:
            case ProjectLayer(resource_name=resource_name, version=None):
                result.append({'Fn::GetAtt': [category + resource_name, 'Outputs.Arn']})
            case ProjectLayer(resource_name=resource_name, version=version):
                arn = _layer_version_arn(resource_name, env_name, version)
                result.append({'Fn::Sub': arn})
            case ExternalLayer(arn=arn):
                result.append(arn)
            case _:
                assert False, layer
    return result
