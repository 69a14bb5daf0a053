"""
CloudSoft Core
==============

Configuration and logging shared by the CloudSoft modules.
"""

from .config import Config
from .logging_service import LoggingService, db_log

__all__ = ['Config', 'LoggingService', 'db_log']
