import logging

import cirrus


def get_test_logger(*names):
    return logging.getLogger(_test_logger_name(names))


def _test_logger_name(names):
    return '.'.join(('test', *names))


def configure_test_logging(*loggers):
    prefix = _test_logger_name('')
    expected = [(logger.name, True) for logger in loggers]
    actual = [(logger.name, logger.name.startswith(prefix)) for logger in loggers]
    assert actual == expected, actual
    _configure_logging(get_test_logger(), *loggers)


log_format = ' '.join([
    '%(asctime)s',
    '%(levelname)+7s',
    '%(name)s:',
    '%(message)s'
])


def _configure_logging(*loggers):
    _configure_log_levels(*loggers)
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        # Test runners may install more than one handler
        root_formatter = logging.Formatter(log_format)
        for handler in root_logger.handlers:
            handler.setFormatter(root_formatter)
    else:
        logging.basicConfig(format=log_format)


def _configure_log_levels(*loggers):
    cirrus_level_ = cirrus_log_level()
    root_level = root_log_level()
    logging.getLogger().setLevel(root_level)
    for logger in {*loggers, cirrus.log}:
        logger.setLevel(cirrus_level_)


def root_log_level():
    return [logging.WARN, logging.INFO, logging.DEBUG][cirrus.config.debug]


def cirrus_log_level():
    return [logging.INFO, logging.DEBUG, logging.DEBUG][cirrus.config.debug]
