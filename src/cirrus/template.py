from collections.abc import (
    Iterable,
)
import logging
import os
from typing import (
    Protocol,
)

import attr
import jinja2

from cirrus.files import (
    AnyPath,
    write_text,
)
from cirrus.types import (
    JSON,
)

log = logging.getLogger(__name__)


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class CopyJob:
    """
    Render one template file to one target file
    """
    #: The directory containing the template. If empty, `template` is the
    #: path of the template file itself.
    dir: str
    template: str
    target: str

    @property
    def template_path(self) -> str:
        return os.path.join(self.dir, self.template) if self.dir else self.template


class TemplateEngine(Protocol):

    def copy_batch(self, jobs: Iterable[CopyJob], params: JSON, overwrite: bool) -> None:
        """
        Render every job's template with the given parameters and write the
        result to the job's target.

        :param overwrite: If False, targets that already exist are left alone.
        """
        raise NotImplementedError


@attr.s(frozen=True, auto_attribs=True, kw_only=True)
class JinjaTemplateEngine:
    """
    Renders templates with Jinja2. Undefined template variables are an error
    so that a misspelled parameter doesn't silently produce an empty value.
    """
    keep_trailing_newline: bool = True

    def copy_batch(self, jobs: Iterable[CopyJob], params: JSON, overwrite: bool) -> None:
        for job in jobs:
            if not overwrite and os.path.exists(job.target):
                log.info('Not overwriting existing file %r', job.target)
            else:
                self._render(job.template_path, job.target, params)

    def _render(self, template_path: AnyPath, target: AnyPath, params: JSON) -> None:
        log.debug('Rendering %r', os.fspath(template_path))
        with open(template_path, encoding='utf-8') as f:
            source = f.read()
        env = jinja2.Environment(undefined=jinja2.StrictUndefined,
                                 keep_trailing_newline=self.keep_trailing_newline)
        write_text(target, env.from_string(source).render(**params))
