"""
Utilities Module
================

Common utilities shared across the application:
- Logger: Named, level-filtered terminal logging
- config: Centralized configuration management
"""

from jirabot.utils.logger import Logger
from jirabot.utils.config import get_config, Config

__all__ = ["Logger", "get_config", "Config"]
