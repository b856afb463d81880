# app_logger.py
"""
Logging setup shared by the decoder, the listener and the CLI.

Every module logs through ``logger`` from here.  Records go to a bounded
in-memory buffer (``log_buffer``) and to ``beacon.log``.
"""

import logging
from collections import deque
from typing import Deque, Union

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
LOG_FILE = "beacon.log"
LOG_LEVEL = logging.INFO
MAX_LOG_RECORDS = 200

logger = logging.getLogger("BeaconLogger")
logger.setLevel(LOG_LEVEL)
logger.propagate = False


class MemoryHandler(logging.Handler):
    """Keeps the newest ``capacity`` formatted records in ``buffer``."""

    def __init__(self, capacity: int = MAX_LOG_RECORDS):
        super().__init__()
        self.capacity = capacity
        self.buffer: Deque[str] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        self.buffer.append(self.format(record))


formatter = logging.Formatter(LOG_FORMAT)

memory_handler = MemoryHandler()
memory_handler.setFormatter(formatter)
logger.addHandler(memory_handler)

# delay: the file appears on the first record, not at import
file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8", delay=True)
file_handler.setLevel(logging.DEBUG)
file_handler.setFormatter(formatter)
logger.addHandler(file_handler)

log_buffer = memory_handler.buffer


def set_level(level: Union[int, str]) -> None:
    """Change the verbosity of the beacon logger (e.g. ``logging.DEBUG``)."""
    logger.setLevel(level)
