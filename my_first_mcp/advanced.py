"""
Supporting utilities for a production-style server:
- TTLCache: in-memory cache with per-entry expiry
- validate_path: path-traversal guard for tool arguments
- sanitize_content: masks credentials in text before it leaves the server
- get_server_status: process uptime and memory figures
"""

import os
import platform
import re
import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

try:
    import resource
except ImportError:  # Windows
    resource = None


T = TypeVar("T")

_STARTED_AT = time.monotonic()


class TTLCache(Generic[T]):
    """
    In-memory cache whose entries expire after a time-to-live.

    Example:
        cache = TTLCache(ttl_seconds=300)
        cache.set("key", "value")
        cache.get("key")  # "value"
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = ttl_seconds
        self._clock = clock
        self._store: Dict[str, Tuple[T, float]] = {}

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Store a value. ttl overrides the default time-to-live (seconds)."""
        expiry = self._clock() + (ttl if ttl is not None else self.default_ttl)
        self._store[key] = (value, expiry)

    def get(self, key: str) -> Optional[T]:
        """Return the cached value, or None if missing or expired."""
        entry = self._store.get(key)
        if entry is None:
            return None

        value, expiry = entry
        if self._clock() > expiry:
            del self._store[key]
            return None
        return value

    def clear(self) -> None:
        self._store.clear()

    def cleanup(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = self._clock()
        expired = [key for key, (_, expiry) in self._store.items() if now > expiry]
        for key in expired:
            del self._store[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._store)


class PathTraversalError(ValueError):
    """A requested path resolves outside its allowed base directory."""


def validate_path(base_path: str, target_path: str) -> str:
    """
    Resolve target_path against base_path and make sure it stays inside it.

    Args:
        base_path: Directory the target must stay within
        target_path: Relative or absolute path supplied by a client

    Returns:
        The resolved absolute path

    Raises:
        PathTraversalError: If the resolved path escapes base_path
    """
    base = os.path.realpath(base_path)
    resolved = os.path.realpath(os.path.join(base, target_path))

    if resolved != base and not resolved.startswith(base + os.sep):
        raise PathTraversalError(f"Path escapes allowed root: {target_path}")
    return resolved


SENSITIVE_PATTERNS = [
    re.compile(r"""password\s*[:=]\s*['"][^'"]+['"]""", re.IGNORECASE),
    re.compile(r"""api[_-]?key\s*[:=]\s*['"][^'"]+['"]""", re.IGNORECASE),
    re.compile(r"""secret\s*[:=]\s*['"][^'"]+['"]""", re.IGNORECASE),
    re.compile(r"""token\s*[:=]\s*['"][^'"]+['"]""", re.IGNORECASE),
]


def sanitize_content(content: str) -> str:
    """Replace quoted credential assignments with [REDACTED]."""
    for pattern in SENSITIVE_PATTERNS:
        content = pattern.sub("[REDACTED]", content)
    return content


@dataclass
class ServerStatus:
    uptime: float
    max_rss_kb: Optional[int]
    python_version: str
    platform: str
    pid: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uptime": round(self.uptime, 3),
            "maxRssKb": self.max_rss_kb,
            "pythonVersion": self.python_version,
            "platform": self.platform,
            "pid": self.pid,
        }


def get_server_status() -> ServerStatus:
    """Report process uptime and peak memory where the platform exposes it."""
    max_rss = None
    if resource is not None:
        max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # macOS reports bytes, Linux kilobytes
        if sys.platform == "darwin":
            max_rss //= 1024

    return ServerStatus(
        uptime=time.monotonic() - _STARTED_AT,
        max_rss_kb=max_rss,
        python_version=platform.python_version(),
        platform=platform.platform(),
        pid=os.getpid(),
    )
