import logging

logger = logging.getLogger("albaranes")
logger.setLevel(logging.INFO)

if not logger.handlers:
    handler = logging.StreamHandler()
    fmt = logging.Formatter("[%(levelname)s] %(message)s")
    handler.setFormatter(fmt)
    logger.addHandler(handler)
