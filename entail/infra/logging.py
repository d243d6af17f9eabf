import logging
from typing import Union

LOG_FORMAT = '%(asctime)s | %(levelname)-5s | %(name)s | %(message)s'


def configure_logging(level: Union[int, str] = 'INFO') -> logging.Logger:
    """Attach one stream handler to the package logger (idempotent)."""
    root = logging.getLogger('entail')
    root.setLevel(level if isinstance(level, int) else level.upper())
    if not any(getattr(h, '_entail_handler', False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        handler._entail_handler = True
        root.addHandler(handler)
    return root
