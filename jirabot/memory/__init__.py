"""
Memory
======

Process-lifetime storage. The bot keeps no state on disk; the only thing it
remembers between messages is a time-bounded cache of slow-changing lookups.
"""

from jirabot.memory.cache import CacheEntry, ExpiringCache

__all__ = ["CacheEntry", "ExpiringCache"]
