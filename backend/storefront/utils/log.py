import logging
import sys

ROOT_LOGGER = "storefront"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a stdout handler to the `storefront` logger tree once.
    Module loggers are children (storefront.catalogue, storefront.products, ...)
    and inherit the handler and level.
    """
    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
        log.addHandler(h)
        log.propagate = False
    return log
