import logging

from cirrus.collections import (
    deep_set,
    deep_unset,
)
from cirrus.function import (
    category,
)
from cirrus.project import (
    ProjectContext,
)
from cirrus.types import (
    JSON,
    KeyPath,
)

log = logging.getLogger(__name__)

#: The key under each environment of the data that is not passed to
#: CloudFormation
non_cfn_data_key = 'nonCFNdata'


def layer_path(env_name: str, layer_name: str) -> KeyPath:
    return [env_name, non_cfn_data_key, category, layer_name]


def set_layer_team_provider_info(context: ProjectContext, layer_name: str, document: JSON) -> None:
    log.info('Recording layer %r for environment %r in team-provider document',
             layer_name, context.env_name)
    team_provider_info = context.state.get_team_provider_info()
    deep_set(team_provider_info, layer_path(context.env_name, layer_name), dict(document))
    context.state.set_team_provider_info(team_provider_info)


def remove_layer_team_provider_info(context: ProjectContext, layer_name: str) -> None:
    """
    Remove the given layer from the current environment's entry in the
    team-provider document, along with any containers left empty by that.
    The environment's entry itself is retained.
    """
    team_provider_info = context.state.get_team_provider_info()
    # Everything below the environment's entry is subject to pruning
    if deep_unset(team_provider_info, layer_path(context.env_name, layer_name), keep=1):
        log.info('Removing layer %r for environment %r from team-provider document',
                 layer_name, context.env_name)
    else:
        log.debug('Layer %r is absent from team-provider document for environment %r',
                  layer_name, context.env_name)
    context.state.set_team_provider_info(team_provider_info)
