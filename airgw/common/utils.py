# airgw/common/utils.py

"""AIR gateway common utility functions"""



import importlib
import logging
import logging.handlers

from .const import DEFAULT_LOG_HANDLER_SETTINGS



def get_logger(log, default_name):

    """Resolve a `log' argument (logger object, logger name or None)

    >>> get_logger(None, 'airgw.test').name
    'airgw.test'
    >>> get_logger('other', 'airgw.test').name
    'other'
    """

    if log is None:
        return logging.getLogger(default_name)
    elif isinstance(log, str):
        return logging.getLogger(log)
    else:
        return log


def configure_logging(log, log_handlers, log_config):

    """Configure logging for a particular logger, using given settings.

    Arguments:

    * log (logging.Logger instance) -- the logger to configure;

    * log_handlers -- auxiliary list of logger handlers being in use
      (when reconfiguring, the previous ones are removed from the logger);

    * log_config -- a dict with all or some of the keys: 'level' (str),
      'handlers' (list of dicts), 'propagate' (bool); see: airgw.config
      documentation about configuration file structure and content.

    """

    while log_handlers:  # when reconfiguring -- disable old handlers
        log.removeHandler(log_handlers.pop())

    log.propagate = log_config.get('propagate', False)
    level = log_config.get('level', 'info').upper()
    log.setLevel(getattr(logging, level))

    default_hprops = DEFAULT_LOG_HANDLER_SETTINGS
    for handler_props in log_config.get('handlers', [default_hprops]):
        HandlerClass = get_handler_class(handler_props['cls'])
        kwargs = handler_props.get('kwargs', default_hprops['kwargs'])
        level = handler_props.get('level', default_hprops['level']).upper()
        format = handler_props.get('format', default_hprops['format'])

        handler = HandlerClass(**kwargs)
        handler.setLevel(getattr(logging, level))
        handler.setFormatter(logging.Formatter(format))

        log_handlers.append(handler)
        log.addHandler(handler)

    log.debug('Logger %s configured', log.name)
    return log


def get_handler_class(class_name):

    """Get a handler class: 'StreamHandler' (from logging),
    'RotatingFileHandler' (from logging.handlers) or 'package.ClassName'

    >>> get_handler_class('StreamHandler') is logging.StreamHandler
    True
    """

    if '.' in class_name:
        module_name, class_name = class_name.rsplit('.', 1)
        return getattr(importlib.import_module(module_name), class_name)
    try:
        return getattr(logging, class_name)
    except AttributeError:
        return getattr(logging.handlers, class_name)
