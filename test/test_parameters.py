from cirrus.function.parameters import (
    create_parameters_file,
    read_parameters_file,
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


class TestParameterFileStore(CirrusUnitTestCase):
    file_name = 'parameters.json'

    def test_read_missing(self):
        self.assertEqual({}, read_parameters_file(self.context, 'foo', self.file_name))

    def test_create(self):
        create_parameters_file(self.context, {'a': 1}, 'foo', self.file_name)
        path = self.resource_dir('foo') / self.file_name
        self.assertEqual({'a': 1}, self.read_json(path))
        self.assertEqual({'a': 1}, read_parameters_file(self.context, 'foo', self.file_name))

    def test_merge(self):
        deprecated = 'mutableParametersState'
        for existing, new, expected in [
            (
                {'a': 1, 'b': 2},
                {'b': 3, 'c': 4},
                {'a': 1, 'b': 3, 'c': 4}
            ),
            (
                {'a': 1, deprecated: {'x': 1}},
                {'b': 2},
                {'a': 1, 'b': 2}
            ),
            (
                {'a': 1},
                {'b': 2, deprecated: {'x': 1}},
                {'a': 1, 'b': 2}
            ),
            (
                {deprecated: {'x': 1}},
                {deprecated: {'y': 2}},
                {}
            ),
            (
                {'a': {'nested': 1}},
                {'a': {'other': 2}},
                {'a': {'other': 2}}
            ),
        ]:
            with self.subTest(existing=existing, new=new):
                path = self.resource_dir('foo') / self.file_name
                self.write_json(path, existing)
                create_parameters_file(self.context, new, 'foo', self.file_name)
                self.assertEqual(expected, read_parameters_file(self.context, 'foo', self.file_name))
                self.assertEqual(expected, self.read_json(path))

    def test_files_are_separate(self):
        create_parameters_file(self.context, {'a': 1}, 'foo', 'parameters.json')
        create_parameters_file(self.context, {'b': 2}, 'foo', 'function-parameters.json')
        create_parameters_file(self.context, {'c': 3}, 'bar', 'parameters.json')
        self.assertEqual({'a': 1}, read_parameters_file(self.context, 'foo', 'parameters.json'))
        self.assertEqual({'b': 2}, read_parameters_file(self.context, 'foo', 'function-parameters.json'))
        self.assertEqual({'c': 3}, read_parameters_file(self.context, 'bar', 'parameters.json'))
