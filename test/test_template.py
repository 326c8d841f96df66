from jinja2 import (
    UndefinedError,
)

from cirrus.logging import (
    configure_test_logging,
)
from cirrus.template import (
    CopyJob,
    JinjaTemplateEngine,
)
from cirrus_test_case import (
    CirrusUnitTestCase,
)


# noinspection PyPep8Naming
def setUpModule():
    configure_test_logging()


class TestJinjaTemplateEngine(CirrusUnitTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.engine = JinjaTemplateEngine()
        self.template_dir = self.project_root / 'templates'
        self.write_text(self.template_dir / 'greeting.txt.j2', 'Hello, {{ name }}!\n')
        self.target = self.project_root / 'out' / 'greeting.txt'
        self.job = CopyJob(dir=str(self.template_dir),
                           template='greeting.txt.j2',
                           target=str(self.target))

    def read_text(self, path) -> str:
        with open(path) as f:
            return f.read()

    def test_render(self):
        self.engine.copy_batch([self.job], {'name': 'world'}, False)
        self.assertEqual('Hello, world!\n', self.read_text(self.target))

    def test_template_path(self):
        self.assertEqual(str(self.template_dir / 'greeting.txt.j2'), self.job.template_path)
        job = CopyJob(dir='', template='/a/b.j2', target='/c')
        self.assertEqual('/a/b.j2', job.template_path)

    def test_overwrite(self):
        self.write_text(self.target, 'edited')
        for overwrite, expected in [
            (False, 'edited'),
            (True, 'Hello, world!\n')
        ]:
            with self.subTest(overwrite=overwrite):
                self.engine.copy_batch([self.job], {'name': 'world'}, overwrite)
                self.assertEqual(expected, self.read_text(self.target))

    def test_undefined_parameter(self):
        with self.assertRaises(UndefinedError):
            self.engine.copy_batch([self.job], {}, False)
        self.assertFalse(self.target.exists())
