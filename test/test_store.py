import json
import os
from unittest.mock import (
    patch,
)

import attr

from cirrus.function import (
    ExternalLayer,
    FunctionParameters,
    ProjectLayer,
    TriggerFunctionParameters,
)
from cirrus.function.layer import (
    LayerVersionMetadata,
)
from cirrus.function.store import (
    LayerUpdateOptions,
    create_function_resources,
    create_layer_artifacts,
    remove_layer_artifacts,
    update_layer_artifacts,
)
from cirrus.logging import (
    configure_test_logging,
)
from cirrus_test_case import (
    CirrusUnitTestCase,
)


# noinspection PyPep8Naming
def setUpModule():
    configure_test_logging()


class StoreTestCase(CirrusUnitTestCase):

    @property
    def amplify_meta_path(self):
        return self.backend_dir / 'amplify-meta.json'

    @property
    def backend_config_path(self):
        return self.backend_dir / 'backend-config.json'

    @property
    def team_provider_info_path(self):
        return self.project_root / 'amplify' / 'team-provider-info.json'

    def read_text(self, path) -> str:
        with open(path) as f:
            return f.read()


class TestLayerStore(StoreTestCase):

    def test_create_single_env_layer(self):
        parameters = self.layer_parameters()
        layer_dir = create_layer_artifacts(self.context, parameters)
        self.assertEqual(self.resource_dir('myLayer'), layer_dir)
        self.assertTrue((layer_dir / 'opt').is_dir())
        self.assertTrue((layer_dir / 'lib' / 'nodejs').is_dir())
        runtimes = [
            {
                'value': 'nodejs',
                'name': 'NodeJS',
                'layerExecutablePath': 'nodejs',
                'cloudTemplateValue': 'nodejs18.x'
            }
        ]
        stored_params = {
            'layerVersionMap': {'1': {'permissions': [{'type': 'Private'}]}},
            'runtimes': runtimes
        }
        self.assertEqual(stored_params, self.read_json(layer_dir / 'layer-parameters.json'))
        self.assertEqual({'layerVersion': 1}, self.read_json(layer_dir / 'parameters.json'))
        self.assertFalse((layer_dir / 'layer-runtimes.json').exists())
        self.assertFalse(self.team_provider_info_path.exists())
        backend_params = {
            'providerPlugin': 'awscloudformation',
            'service': 'LambdaLayer',
            'build': True
        }
        self.assertEqual({'function': {'myLayer': {**stored_params, **backend_params}}},
                         self.read_json(self.amplify_meta_path))
        self.assertEqual({'function': {'myLayer': backend_params}},
                         self.read_json(self.backend_config_path))
        template = self.read_json(layer_dir / 'myLayer-awscloudformation-template.json')
        self.assertEqual({'env', 'deploymentBucketName', 's3Key'}, set(template['Parameters']))
        self.assertIn('Arn', template['Outputs'])

    def test_create_multi_env_layer(self):
        self.multi_env_layers.add('myLayer')
        self.write_json(self.team_provider_info_path, {'dev': {'awscloudformation': {}}})
        layer_dir = create_layer_artifacts(self.context, self.layer_parameters(), latest_version=3)
        stored_params = {'layerVersionMap': {'1': {'permissions': [{'type': 'Private'}]}}}
        self.assertEqual({
            'dev': {
                'awscloudformation': {},
                'nonCFNdata': {'function': {'myLayer': stored_params}}
            }
        }, self.read_json(self.team_provider_info_path))
        self.assertEqual({
            'runtimes': [
                {
                    'value': 'nodejs',
                    'name': 'NodeJS',
                    'layerExecutablePath': 'nodejs',
                    'cloudTemplateValue': 'nodejs18.x'
                }
            ]
        }, self.read_json(layer_dir / 'layer-runtimes.json'))
        self.assertFalse((layer_dir / 'layer-parameters.json').exists())
        self.assertEqual({'layerVersion': 3}, self.read_json(layer_dir / 'parameters.json'))
        meta = self.read_json(self.amplify_meta_path)
        self.assertNotIn('runtimes', meta['function']['myLayer'])
        self.assertEqual(stored_params['layerVersionMap'],
                         meta['function']['myLayer']['layerVersionMap'])

    def test_update(self):
        self.multi_env_layers.add('myLayer')
        create_layer_artifacts(self.context, self.layer_parameters())
        meta = self.read_json(self.amplify_meta_path)
        parameters = self.layer_parameters(layer_version_map={
            1: LayerVersionMetadata(),
            2: LayerVersionMetadata(hash='abc')
        })
        options = LayerUpdateOptions(amplify_meta=False)
        layer_dir = update_layer_artifacts(self.context, parameters, latest_version=2, options=options)
        self.assertEqual(meta, self.read_json(self.amplify_meta_path))
        self.assertEqual({'layerVersion': 2}, self.read_json(layer_dir / 'parameters.json'))
        team_provider_info = self.read_json(self.team_provider_info_path)
        version_map = team_provider_info['dev']['nonCFNdata']['function']['myLayer']['layerVersionMap']
        self.assertEqual({'1', '2'}, set(version_map))
        update_layer_artifacts(self.context, parameters)
        meta = self.read_json(self.amplify_meta_path)
        self.assertEqual({'1', '2'}, set(meta['function']['myLayer']['layerVersionMap']))
        self.assertEqual({'layerVersion': 2}, self.read_json(layer_dir / 'parameters.json'))

    def test_multi_env_flag_is_read_on_every_write(self):
        self.multi_env_layers.add('myLayer')
        layer_dir = create_layer_artifacts(self.context, self.layer_parameters())
        team_provider_info = self.read_text(self.team_provider_info_path)
        self.assertFalse((layer_dir / 'layer-parameters.json').exists())
        # The same context now sees a single-environment layer
        self.multi_env_layers.discard('myLayer')
        update_layer_artifacts(self.context, self.layer_parameters())
        runtimes = [
            {
                'value': 'nodejs',
                'name': 'NodeJS',
                'layerExecutablePath': 'nodejs',
                'cloudTemplateValue': 'nodejs18.x'
            }
        ]
        self.assertEqual(runtimes, self.read_json(layer_dir / 'layer-parameters.json')['runtimes'])
        meta = self.read_json(self.amplify_meta_path)
        self.assertEqual(runtimes, meta['function']['myLayer']['runtimes'])
        self.assertEqual(team_provider_info, self.read_text(self.team_provider_info_path))

    def test_update_nothing(self):
        create_layer_artifacts(self.context, self.layer_parameters())
        layer_dir = self.resource_dir('myLayer')
        paths = [
            self.amplify_meta_path,
            layer_dir / 'parameters.json',
            layer_dir / 'myLayer-awscloudformation-template.json'
        ]
        before = {path: self.read_text(path) for path in paths}
        options = LayerUpdateOptions(layer_params=False, cfn_file=False, amplify_meta=False)
        parameters = self.layer_parameters(layer_version_map={1: LayerVersionMetadata(hash='x'),
                                                              2: LayerVersionMetadata()})
        with patch('cirrus.json.write_file_atomically') as write_file_atomically:
            update_layer_artifacts(self.context, parameters, latest_version=2, options=options)
            write_file_atomically.assert_not_called()
        self.assertEqual(before, {path: self.read_text(path) for path in paths})

    def test_remove_multi_env_layer(self):
        self.multi_env_layers.add('myLayer')
        self.write_json(self.team_provider_info_path, {'prod': {'x': 1}})
        create_layer_artifacts(self.context, self.layer_parameters())
        remove_layer_artifacts(self.context, 'myLayer')
        self.assertEqual({'dev': {}, 'prod': {'x': 1}}, self.read_json(self.team_provider_info_path))

    def test_remove_single_env_layer(self):
        document = {'dev': {'nonCFNdata': {'function': {'myLayer': {}}}}}
        self.write_json(self.team_provider_info_path, document)
        remove_layer_artifacts(self.context, 'myLayer')
        self.assertEqual(document, self.read_json(self.team_provider_info_path))


class TestFunctionStore(StoreTestCase):

    def function_parameters(self, **kwargs) -> FunctionParameters:
        return FunctionParameters(resource_name='foo',
                                  function_template=self.function_template(),
                                  cloud_resource_template_path=self.cloud_template_path(),
                                  runtime=self.nodejs_function_runtime,
                                  runtime_plugin_id='amplify-nodejs-function-runtime-provider',
                                  **kwargs)

    def trigger_parameters(self, **kwargs) -> TriggerFunctionParameters:
        return TriggerFunctionParameters(resource_name='preSignup',
                                         trigger_provider='Cognito',
                                         modules=['email-filter-denylist'],
                                         parent_resource='userPool',
                                         parent_stack='authuserPool',
                                         function_template=self.function_template(),
                                         cloud_resource_template_path=self.cloud_template_path(),
                                         **kwargs)

    def test_create_function(self):
        layers = [ProjectLayer(resource_name='myLayer'), ExternalLayer(arn='arn:aws:lambda:x')]
        state = {'permissions': {'storage': {'bucket': ['read']}}}
        parameters = self.function_parameters(lambda_layers=layers, mutable_parameters_state=state)
        create_function_resources(self.context, parameters)
        resource_dir = self.resource_dir('foo')
        self.assertEqual('exports.handler = async () => "foo";\n',
                         self.read_text(resource_dir / 'src' / 'index.js'))
        self.assertEqual('{"key": "value"}\n', self.read_text(resource_dir / 'src' / 'event.json'))
        self.assertEqual({'Description': 'foo', 'Cors': False},
                         self.read_json(resource_dir / 'foo-cloudformation-template.json'))
        resource_opts = {
            'build': True,
            'providerPlugin': 'awscloudformation',
            'service': 'Lambda',
            'dependsOn': []
        }
        self.assertEqual({'function': {'foo': resource_opts}}, self.read_json(self.amplify_meta_path))
        self.assertEqual({'function': {'foo': resource_opts}}, self.read_json(self.backend_config_path))
        function_parameters = self.read_json(resource_dir / 'function-parameters.json')
        self.assertEqual(state['permissions'], function_parameters['permissions'])
        self.assertEqual(['ProjectLayer', 'ExternalLayer'],
                         [layer['type'] for layer in function_parameters['lambdaLayers']])
        self.assertFalse((resource_dir / 'parameters.json').exists())
        self.assertEqual({
            'pluginId': 'amplify-nodejs-function-runtime-provider',
            'functionRuntime': 'nodejs',
            'useLegacyBuild': True,
            'defaultEditorFile': 'src/index.js'
        }, self.read_json(resource_dir / 'amplify.state'))

    def test_cors(self):
        with patch.dict(os.environ, CIRRUS_LAMBDA_CORS_HEADER='true'):
            create_function_resources(self.context, self.function_parameters())
        template = self.read_json(self.resource_dir('foo') / 'foo-cloudformation-template.json')
        self.assertEqual(True, template['Cors'])

    def test_existing_files_are_retained(self):
        index_js = self.resource_dir('foo') / 'src' / 'index.js'
        self.write_text(index_js, 'edited')
        self.write_json(self.resource_dir('foo') / 'function-parameters.json',
                        {'mutableParametersState': {}, 'other': 1})
        create_function_resources(self.context, self.function_parameters(lambda_layers=[]))
        self.assertEqual('edited', self.read_text(index_js))
        self.assertEqual({'other': 1, 'lambdaLayers': []},
                         self.read_json(self.resource_dir('foo') / 'function-parameters.json'))

    def test_function_with_cloudwatch_rule(self):
        parameters = self.function_parameters(cloudwatch_rule='rate(5 minutes)')
        create_function_resources(self.context, parameters)
        self.assertEqual({'CloudWatchRule': 'rate(5 minutes)'},
                         self.read_json(self.resource_dir('foo') / 'parameters.json'))

    def test_create_trigger(self):
        self.write_json(self.team_provider_info_path, {
            'dev': {'categories': {'function': {'preSignup': {'TABLE': 'dev-table'}}}}
        })
        self.write_text(self.project_root / 'templates' / 'env.txt.j2',
                        '{{ TABLE }} {{ DOMAINDENYLIST }} {{ triggerEnvs | length }}')
        template = self.function_template()
        template = attr.evolve(template, source_files=[*template.source_files, 'env.txt.j2'])
        trigger_envs = '[{"key": "DOMAINDENYLIST", "value": "example.com"}]'
        parameters = TriggerFunctionParameters(resource_name='preSignup',
                                               trigger_provider='Cognito',
                                               modules=['email-filter-denylist', 'custom'],
                                               parent_resource='userPool',
                                               parent_stack='authuserPool',
                                               function_template=template,
                                               cloud_resource_template_path=self.cloud_template_path(),
                                               trigger_envs=trigger_envs,
                                               cloudwatch_rule='rate(5 minutes)')
        create_function_resources(self.context, parameters)
        resource_dir = self.resource_dir('preSignup')
        self.assertEqual('dev-table example.com 1', self.read_text(resource_dir / 'env.txt'))
        self.assertEqual({
            'modules': 'email-filter-denylist,custom',
            'resourceName': 'preSignup',
            'CloudWatchRule': 'rate(5 minutes)'
        }, self.read_json(resource_dir / 'parameters.json'))
        function_parameters = self.read_json(resource_dir / 'function-parameters.json')
        self.assertEqual(trigger_envs, function_parameters['triggerEnvs'])
        self.assertTrue(function_parameters['trigger'])
        self.assertNotIn('functionTemplate', function_parameters)
        self.assertEqual({
            'build': True,
            'providerPlugin': 'awscloudformation',
            'service': 'Lambda'
        }, self.read_json(self.amplify_meta_path)['function']['preSignup'])
        self.assertEqual({
            'pluginId': 'amplify-nodejs-function-runtime-provider',
            'functionRuntime': 'nodejs',
            'useLegacyBuild': True,
            'defaultEditorFile': 'src/index.js'
        }, self.read_json(resource_dir / 'amplify.state'))

    def test_malformed_trigger_envs(self):
        parameters = self.trigger_parameters(trigger_envs='[{"key": ')
        with self.assertRaises(json.JSONDecodeError):
            create_function_resources(self.context, parameters)
        self.assertFalse((self.resource_dir('preSignup') / 'src' / 'index.js').exists())
