"""
Service Layer Module
"""

from .config_service import ConfigService

__all__ = [
    'ConfigService',
]
