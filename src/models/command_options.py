"""
Command Options data model

Remote-control commands requested on the command line, shared between
a newly launched instance and the primary instance.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Tuple

# Sentinel for "not requested" on the integer fields
UNSET = -1

VOLUME_STEP = 4


class PlayerAction(IntEnum):
    """Transport command (values are the wire ordinals)"""
    NONE = 0
    PLAY = 1
    PLAY_PAUSE = 2
    PAUSE = 3
    STOP = 4
    PREVIOUS = 5
    NEXT = 6


class UrlListAction(IntEnum):
    """How trailing URLs affect the playlist (values are the wire ordinals)"""
    APPEND = 0
    LOAD = 1


@dataclass(frozen=True)
class CommandOptions:
    """
    Command Options data model

    Built once per invocation by CommandLineParser, or decoded from a
    record forwarded by another instance. Integer fields use UNSET (-1)
    when nothing was requested.
    """

    player_action: PlayerAction = PlayerAction.NONE
    url_list_action: UrlListAction = UrlListAction.APPEND
    set_volume: int = UNSET
    volume_modifier: int = 0
    seek_to_seconds: int = UNSET
    play_track_at_index: int = UNSET
    show_osd: bool = False
    urls: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        """Whether every field still holds its default value."""
        return (
            self.player_action == PlayerAction.NONE
            and self.url_list_action == UrlListAction.APPEND
            and self.set_volume == UNSET
            and self.volume_modifier == 0
            and self.seek_to_seconds == UNSET
            and self.play_track_at_index == UNSET
            and self.show_osd is False
            and not self.urls
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            'player_action': self.player_action.name,
            'url_list_action': self.url_list_action.name,
            'set_volume': self.set_volume,
            'volume_modifier': self.volume_modifier,
            'seek_to_seconds': self.seek_to_seconds,
            'play_track_at_index': self.play_track_at_index,
            'show_osd': self.show_osd,
            'urls': list(self.urls),
        }


@dataclass
class CommandOptionsBuilder:
    """
    Mutable accumulator used while parsing.

    Also serves as the argparse namespace: each recognized flag sets one
    attribute.
    """

    player_action: PlayerAction = PlayerAction.NONE
    url_list_action: UrlListAction = UrlListAction.APPEND
    set_volume: int = UNSET
    volume_modifier: int = 0
    seek_to_seconds: int = UNSET
    play_track_at_index: int = UNSET
    show_osd: bool = False
    urls: List[str] = field(default_factory=list)

    def build(self) -> CommandOptions:
        """Freeze the accumulated values into a CommandOptions."""
        return CommandOptions(
            player_action=PlayerAction(self.player_action),
            url_list_action=UrlListAction(self.url_list_action),
            set_volume=self.set_volume,
            volume_modifier=self.volume_modifier,
            seek_to_seconds=self.seek_to_seconds,
            play_track_at_index=self.play_track_at_index,
            show_osd=bool(self.show_osd),
            urls=tuple(self.urls),
        )
