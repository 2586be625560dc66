import logging

DEFAULT_FORMAT = "[%(levelname)s] @ %(asctime)s %(name)s: %(message)s"


def configure_logging(
    log=None,
    level=logging.INFO,
    handler_filters=None,
    fmt_str=DEFAULT_FORMAT,
):
    """
    Replace the handlers of `log` (the memsig package logger by default)
    with a single formatted stream handler.
    """
    if log is None:
        log = logging.getLogger("memsig")
    log.propagate = False
    log.setLevel(level)
    formatter = logging.Formatter(fmt_str)
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.setLevel(level)

    if handler_filters is not None:
        for _filter in handler_filters:
            handler.addFilter(_filter)

    for old in log.handlers[:]:
        log.removeHandler(old)
        old.close()

    log.addHandler(handler)
    return handler


def configure_debug_logging(log=None, **kwargs):
    kwargs["level"] = logging.DEBUG
    return configure_logging(log, **kwargs)
