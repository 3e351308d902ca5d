"""
Logging setup for the app process.

Every module logs through logging.getLogger(__name__); this installs one
stdout handler on the root logger at the configured level.
"""

import logging
import sys

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


def setup_logging(level='INFO'):
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root_logger.handlers = [handler]

    # The Google client libraries are chatty at INFO.
    for name in ('google', 'urllib3', 'grpc'):
        logging.getLogger(name).setLevel(logging.WARNING)
