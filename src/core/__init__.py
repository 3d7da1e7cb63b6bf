"""
Clementine Remote Core Module
"""

from .command_line_parser import CommandLineParser, CommandLineError, HelpRequest
from .help_text import format_help_text, load_translations
from .options_codec import MalformedRecordError, decode, encode

__all__ = [
    'CommandLineParser',
    'CommandLineError',
    'HelpRequest',
    'format_help_text',
    'load_translations',
    'MalformedRecordError',
    'decode',
    'encode',
]
