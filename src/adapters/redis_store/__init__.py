"""
Backend Redis do KeyValueStore.
"""

from .store import RedisKeyValueStore

__all__ = ["RedisKeyValueStore"]
