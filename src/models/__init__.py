"""
Data Models Module
"""

from .command_options import (
    CommandOptions,
    CommandOptionsBuilder,
    PlayerAction,
    UrlListAction,
    UNSET,
    VOLUME_STEP,
)

__all__ = [
    'CommandOptions',
    'CommandOptionsBuilder',
    'PlayerAction',
    'UrlListAction',
    'UNSET',
    'VOLUME_STEP',
]
