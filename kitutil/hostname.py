"""Cached host name lookup.

Each thread looks the host name up again at most once a minute.
"""

from __future__ import annotations

import socket
import threading
import time

__all__ = ["HOSTNAME_LOOKUP_INTERVAL", "hostname", "short_hostname"]

HOSTNAME_LOOKUP_INTERVAL = 60
_FALLBACK = "Amnesiac"

_cache = threading.local()


def hostname() -> str:
    """Return the host name, refreshed at most every HOSTNAME_LOOKUP_INTERVAL seconds."""
    now = int(time.time())
    then = getattr(_cache, "then", -1)
    if now == 0 or now > then + HOSTNAME_LOOKUP_INTERVAL or not hasattr(_cache, "name"):
        try:
            _cache.name = socket.gethostname()
        except OSError:
            _cache.name = _FALLBACK
        _cache.then = now
    return _cache.name


def short_hostname() -> str:
    """Return the host name cut before its second '.', if it has one."""
    name = hostname()
    first = name.find(".")
    if first != -1:
        second = name.find(".", first + 1)
        if second != -1:
            return name[:second]
    return name