import logging
import os
from typing import (
    Mapping,
)

log = logging.getLogger(__name__)


class Config:
    """
    Settings read from the process environment. Every property consults the
    environment anew, so a setting changed by one step of an operation is
    visible to the next.
    """

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ

    @property
    def debug(self) -> int:
        debug = int(self.environ.get('CIRRUS_DEBUG', '0'))
        self._validate_debug(debug)
        return debug

    def _validate_debug(self, debug):
        require(debug in (0, 1, 2), 'CIRRUS_DEBUG must be either 0, 1 or 2')

    @property
    def project_root(self) -> str:
        try:
            return self.environ['CIRRUS_PROJECT_ROOT']
        except KeyError:
            return os.getcwd()

    @property
    def lambda_cors_header(self) -> bool:
        """
        True if generated function templates should include a CORS header.
        Only the exact string ``true`` enables it.

        >>> from unittest.mock import patch
        >>> with patch.dict(os.environ, CIRRUS_LAMBDA_CORS_HEADER='true'):
        ...     config.lambda_cors_header
        True

        >>> with patch.dict(os.environ, CIRRUS_LAMBDA_CORS_HEADER='1'):
        ...     config.lambda_cors_header
        False
        """
        return self.environ.get('CIRRUS_LAMBDA_CORS_HEADER') == 'true'


config: Config = Config()  # yes, the type hint does help PyCharm


class RequirementError(RuntimeError):
    """
    Unlike assertions, unsatisfied requirements do not constitute a bug in the program.
    """


def require(condition: bool, *args, exception: type = RequirementError):
    """
    Raise a RequirementError, or an instance of the given exception class, if
    the given condition is False.

    :param condition: The boolean condition to be required.

    :param args: optional positional arguments to be passed to the exception
                 constructor. Typically this should be a string containing a
                 textual description of the requirement, and optionally one or
                 more values involved in the required condition.

    :param exception: A custom exception class to be instantiated and raised if
                      the condition does not hold.

    >>> require(True, 'never raised')

    >>> require(False, 'Layer name must not be empty', '')
    Traceback (most recent call last):
    ...
    cirrus.RequirementError: ('Layer name must not be empty', '')
    """
    reject(not condition, *args, exception=exception)


def reject(condition: bool, *args, exception: type = RequirementError):
    """
    Raise a RequirementError, or an instance of the given exception class, if
    the given condition is True.

    :param condition: The boolean condition to be rejected.

    :param args: Optional positional arguments to be passed to the exception
                 constructor. Typically this should be a string containing a
                 textual description of the rejected condition, and optionally
                 one or more values involved in the rejected condition.

    :param exception: A custom exception class to be instantiated and raised if
                      the condition occurs.
    """
    if condition:
        raise exception(*args)
