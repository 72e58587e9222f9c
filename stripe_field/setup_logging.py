import logging, sys

from stripe_field.settings import LOG_LEVEL

def setup_logging(level: str = LOG_LEVEL):
    logger = logging.getLogger()
    if logger.handlers:  # don’t double add during reload
        return
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    h = logging.StreamHandler(sys.stdout)
    fmt = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s :: %(message)s"
    )
    h.setFormatter(fmt)
    logger.addHandler(h)
    # requests/urllib3 are chatty at DEBUG and echo query strings
    logging.getLogger("urllib3").setLevel(logging.WARNING)
