#!/usr/bin/env python
import logging

__version__ = "0.3.0"

from .davclient import DAVClient
from .davclient import get_davclient

# Silence notification of no default logging handler
log = logging.getLogger("davcore")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = ["__version__", "DAVClient", "get_davclient"]
