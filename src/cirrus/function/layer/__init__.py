from collections.abc import (
    Mapping,
    Sequence,
)
from enum import (
    Enum,
)
from typing import (
    Optional,
)

import attr
from more_itertools import (
    last,
)

from cirrus import (
    require,
)
from cirrus.collections import (
    adict,
)
from cirrus.function import (
    ServiceName,
    provider,
)
from cirrus.types import (
    JSON,
    MutableJSON,
)


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class LayerDefaultFile:
    """
    A file seeded into the library root of a layer when support for a runtime
    is first added to it
    """
    #: The directory, relative to the library root
    path: str
    filename: str
    content: str


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class LayerRuntime:
    name: str
    value: str
    #: The directory, relative to the library root, that the runtime loads
    #: layer code from
    layer_executable_path: str
    cloud_template_value: str
    layer_default_files: Sequence[LayerDefaultFile] = ()

    def to_json(self) -> JSON:
        """
        The persisted form of the runtime. Default files are not persisted.
        """
        return {
            'value': self.value,
            'name': self.name,
            'layerExecutablePath': self.layer_executable_path,
            'cloudTemplateValue': self.cloud_template_value
        }


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class ProviderContext:
    provider: str = provider
    service: str = ServiceName.lambda_layer.value


class PermissionType(Enum):
    private = 'Private'
    public = 'Public'
    aws_accounts = 'AwsAccounts'
    aws_org = 'AwsOrg'


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class LayerPermission:
    type: PermissionType
    accounts: Sequence[str] = ()
    orgs: Sequence[str] = ()

    def to_json(self) -> JSON:
        return adict(type=self.type.value,
                     accounts=list(self.accounts) if self.accounts else None,
                     orgs=list(self.orgs) if self.orgs else None)


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class LayerVersionMetadata:
    permissions: Sequence[LayerPermission] = (LayerPermission(type=PermissionType.private),)
    #: A hash of the layer content that was published as this version
    hash: Optional[str] = None

    def to_json(self) -> JSON:
        return adict(permissions=[p.to_json() for p in self.permissions],
                     hash=self.hash)


LayerVersionMap = Mapping[int, LayerVersionMetadata]


def layer_version_map_to_json(version_map: LayerVersionMap) -> MutableJSON:
    """
    JSON requires string keys, the versions are sorted numerically.

    >>> layer_version_map_to_json({10: LayerVersionMetadata(), 2: LayerVersionMetadata()})
    {'2': {'permissions': [{'type': 'Private'}]}, '10': {'permissions': [{'type': 'Private'}]}}
    """
    return {
        str(version): metadata.to_json()
        for version, metadata in sorted(version_map.items())
    }


def latest_version(version_map: LayerVersionMap) -> int:
    """
    >>> latest_version({1: LayerVersionMetadata(), 10: LayerVersionMetadata()})
    10

    >>> latest_version({})
    Traceback (most recent call last):
    ...
    cirrus.RequirementError: A layer must have at least one version
    """
    require(len(version_map) > 0, 'A layer must have at least one version')
    return last(sorted(version_map))


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class LayerParameters:
    layer_name: str
    runtimes: Sequence[LayerRuntime]
    layer_version_map: LayerVersionMap
    provider_context: ProviderContext
    build: bool = True

    def __attrs_post_init__(self):
        require(bool(self.layer_name), 'Layer name must not be empty')
