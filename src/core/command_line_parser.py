# -*- coding: utf-8 -*-
"""
Command Line Parser

Turns the process argument vector into a CommandOptions record.

Usage Example:
    parser = CommandLineParser()
    try:
        result = parser.parse(sys.argv[1:])
    except CommandLineError as e:
        print(f"clementine: {e}", file=sys.stderr)
        sys.exit(1)

    if isinstance(result, HelpRequest):
        print(result.text, end="")
        sys.exit(0)
"""

from __future__ import annotations

import argparse
import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence, Union

from PyQt6.QtCore import QFileInfo, QUrl

from core.help_text import format_help_text
from models.command_options import (
    CommandOptions,
    CommandOptionsBuilder,
    PlayerAction,
    UrlListAction,
    UNSET,
    VOLUME_STEP,
)

logger = logging.getLogger(__name__)

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_INTEGER_PATTERN = re.compile(r'[+-]?[0-9]+')

_TRAILING_DEST = "trailing_arguments"


class CommandLineError(ValueError):
    """Unrecognized option or malformed option syntax"""


@dataclass(frozen=True)
class HelpRequest:
    """Returned instead of a record when --help was given"""
    text: str


class _HelpRequested(Exception):
    """Raised from inside argparse to stop at the help flag"""


class _HelpAction(argparse.Action):
    def __init__(self, option_strings, dest, **kwargs):
        super().__init__(option_strings, dest=argparse.SUPPRESS, nargs=0, default=argparse.SUPPRESS)

    def __call__(self, parser, namespace, values, option_string=None):
        raise _HelpRequested()


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of printing usage and exiting"""

    def error(self, message):
        raise CommandLineError(message)


def parse_integer(value: str) -> Optional[int]:
    """
    Parse a base-10 integer that fits in 32 bits.

    Returns:
        The number, or None if the text is not such an integer.
    """
    text = value.strip()
    if not _INTEGER_PATTERN.fullmatch(text):
        return None

    number = int(text)
    if not INT32_MIN <= number <= INT32_MAX:
        return None
    return number


def url_from_argument(value: str) -> str:
    """
    Convert a trailing argument to a URL.

    Anything containing "://" is taken verbatim, everything else is a
    local path resolved against the current working directory.
    """
    if "://" in value:
        return value
    url = QUrl.fromLocalFile(QFileInfo(value).absoluteFilePath())
    return url.toEncoded().data().decode('ascii')


class CommandLineParser:
    """
    Parses command line arguments into CommandOptions.

    Follows getopt_long conventions: short flags can be bundled, long
    options can be abbreviated to a unique prefix, and file names may
    appear between options. Repeating a flag overwrites the earlier value.

    Example:
        parser = CommandLineParser()
        parser.parse(["-p", "--volume", "50"])
        # -> CommandOptions(player_action=PlayerAction.PLAY, set_volume=50, ...)

        parser.parse(["--volume", "loud"])
        # -> CommandOptions(set_volume=-1, ...), the bad value is dropped
    """

    PROG = "clementine"

    def __init__(
        self,
        strict_numbers: bool = False,
        translations: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the parser.

        Args:
            strict_numbers: Raise CommandLineError for a malformed numeric
                value instead of silently leaving the field unset.
            translations: Translation mapping for the help text.
        """
        self._strict_numbers = strict_numbers
        self._translations = translations
        self._parser = self._build_parser()

    def parse(self, argv: Sequence[str]) -> Union[CommandOptions, HelpRequest]:
        """
        Parse the argument vector (without the program name).

        Returns:
            CommandOptions, or HelpRequest if the help flag was reached.

        Raises:
            CommandLineError: Unknown option, missing option value, or a
                bad number in strict mode.
        """
        argv = list(argv)
        builder = CommandOptionsBuilder()

        try:
            self._parser.parse_intermixed_args(argv, namespace=builder)
        except _HelpRequested:
            self._reject_unknown_before_help(argv)
            return HelpRequest(format_help_text(self._translations))

        # Trailing tokens are kept apart from the builder's own fields
        trailing = getattr(builder, _TRAILING_DEST, None) or []
        builder.urls = [url_from_argument(arg) for arg in trailing]

        options = builder.build()
        logger.debug("Parsed command line: %s", options.to_dict())
        return options

    def _help_position(self, argv: List[str]) -> int:
        """Index of the token at which the help flag was reached."""
        for end in range(1, len(argv) + 1):
            try:
                self._parser.parse_known_intermixed_args(argv[:end], namespace=CommandOptionsBuilder())
            except _HelpRequested:
                return end - 1
            except CommandLineError:
                # Prefix ends inside an option that still needs its value
                continue
        return len(argv)

    def _reject_unknown_before_help(self, argv: List[str]) -> None:
        """
        Raise CommandLineError if an unknown option precedes the help flag.

        argparse only reports unknown options once every token has been
        seen, while the help flag acts as soon as it is reached.
        """
        prefix = argv[:self._help_position(argv)]
        _, unknown = self._parser.parse_known_intermixed_args(prefix, namespace=CommandOptionsBuilder())
        if unknown:
            raise CommandLineError(f"unrecognized arguments: {' '.join(unknown)}")

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = _ArgumentParser(prog=self.PROG, add_help=False)

        parser.add_argument("-h", "--help", action=_HelpAction)

        player = parser.add_argument_group("Player options")
        for flags, action in (
            (("-p", "--play"), PlayerAction.PLAY),
            (("-t", "--play-pause"), PlayerAction.PLAY_PAUSE),
            (("-u", "--pause"), PlayerAction.PAUSE),
            (("-s", "--stop"), PlayerAction.STOP),
            (("-r", "--previous"), PlayerAction.PREVIOUS),
            (("-f", "--next"), PlayerAction.NEXT),
        ):
            player.add_argument(*flags, dest="player_action", action="store_const", const=action)

        player.add_argument(
            "-v", "--volume", dest="set_volume", metavar="<value>",
            type=self._integer_argument("--volume"),
        )
        player.add_argument(
            "--volume-up", dest="volume_modifier", action="store_const", const=VOLUME_STEP,
        )
        player.add_argument(
            "--volume-down", dest="volume_modifier", action="store_const", const=-VOLUME_STEP,
        )
        player.add_argument(
            "--seek-to", dest="seek_to_seconds", metavar="<seconds>",
            type=self._integer_argument("--seek-to"),
        )

        playlist = parser.add_argument_group("Playlist options")
        playlist.add_argument(
            "-a", "--append", dest="url_list_action", action="store_const", const=UrlListAction.APPEND,
        )
        playlist.add_argument(
            "-l", "--load", dest="url_list_action", action="store_const", const=UrlListAction.LOAD,
        )
        playlist.add_argument(
            "-k", "--play-track", dest="play_track_at_index", metavar="<n>",
            type=self._integer_argument("--play-track"),
        )

        other = parser.add_argument_group("Other options")
        other.add_argument("-o", "--show-osd", dest="show_osd", action="store_true")

        parser.add_argument(_TRAILING_DEST, nargs="*", metavar="URL", default=[])
        return parser

    def _integer_argument(self, option: str) -> Callable[[str], int]:
        """Build the argparse type converter for a numeric option."""

        def convert(value: str) -> int:
            number = parse_integer(value)
            if number is not None:
                return number

            if self._strict_numbers:
                raise argparse.ArgumentTypeError(
                    f"invalid integer value for {option}: {value!r}"
                )
            logger.debug("Ignoring malformed value for %s: %r", option, value)
            return UNSET

        return convert
