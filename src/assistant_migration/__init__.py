"""Assistant Bridge - Migrate assistant workspaces from a source deployment to a target one."""

import logging

__version__ = "0.1.0"
__author__ = "Assistant Migration Team"
__license__ = "Apache-2.0"

# Suppress verbose third-party library logging
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpcore.connection").setLevel(logging.WARNING)
logging.getLogger("httpcore.http11").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
