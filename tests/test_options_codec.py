"""
Command Options Codec Tests
"""

import struct

import pytest

from core.options_codec import MINIMUM_RECORD_SIZE, MalformedRecordError, decode, encode
from models.command_options import CommandOptions, PlayerAction, UrlListAction


def _record(player=0, url_list=0, volume=-1, modifier=0, seek=-1, track=-1, osd=0, urls=()):
    """Build a buffer by hand, independently of encode()."""
    data = struct.pack(">iiiiiiBI", player, url_list, volume, modifier, seek, track, osd, len(urls))
    for url in urls:
        raw = url.encode("utf-8")
        data += struct.pack(">I", len(raw)) + raw
    return data


class TestEncode:
    """Tests for the wire layout produced by encode()."""

    def test_default_record_layout(self):
        data = encode(CommandOptions())
        assert len(data) == MINIMUM_RECORD_SIZE == 29
        assert data == _record()

    def test_field_order_and_widths(self):
        options = CommandOptions(
            player_action=PlayerAction.PAUSE,
            url_list_action=UrlListAction.LOAD,
            set_volume=50,
            volume_modifier=-4,
            seek_to_seconds=120,
            play_track_at_index=7,
            show_osd=True,
            urls=("http://a", "file:///music/b.mp3"),
        )
        assert encode(options) == _record(
            player=3, url_list=1, volume=50, modifier=-4, seek=120, track=7, osd=1,
            urls=("http://a", "file:///music/b.mp3"),
        )

    def test_out_of_range_integer_is_rejected(self):
        with pytest.raises(ValueError):
            encode(CommandOptions(seek_to_seconds=2 ** 31))


class TestRoundTrip:
    """decode(encode(R)) == R"""

    @pytest.mark.parametrize("options", [
        CommandOptions(),
        CommandOptions(url_list_action=UrlListAction.LOAD, urls=()),
        CommandOptions(player_action=PlayerAction.NEXT, show_osd=True),
        CommandOptions(set_volume=0, volume_modifier=4, seek_to_seconds=0, play_track_at_index=0),
        CommandOptions(
            player_action=PlayerAction.PLAY_PAUSE,
            url_list_action=UrlListAction.LOAD,
            set_volume=100,
            volume_modifier=-4,
            seek_to_seconds=2 ** 31 - 1,
            play_track_at_index=12,
            show_osd=True,
            urls=("file:///music/%E9%9F%B3%E4%B9%90.flac", "http://example.com/stream", "üñí", ""),
        ),
    ])
    def test_round_trip(self, options):
        assert decode(encode(options)) == options

    def test_decoded_enums_are_members(self):
        options = decode(encode(CommandOptions(player_action=PlayerAction.STOP)))
        assert options.player_action is PlayerAction.STOP
        assert options.url_list_action is UrlListAction.APPEND

    def test_decode_accepts_bytearray(self):
        assert decode(bytearray(_record(player=1))).player_action is PlayerAction.PLAY


class TestMalformedRecords:
    """decode() must reject malformed buffers."""

    def test_empty_buffer(self):
        with pytest.raises(MalformedRecordError):
            decode(b"")

    def test_every_truncation_fails(self):
        data = encode(CommandOptions(urls=("http://example.com/stream", "file:///a.mp3")))
        for size in range(len(data)):
            with pytest.raises(MalformedRecordError):
                decode(data[:size])

    def test_trailing_bytes(self):
        with pytest.raises(MalformedRecordError):
            decode(_record() + b"\x00")

    @pytest.mark.parametrize("player, url_list", [(7, 0), (-1, 0), (0, 2), (0, -1)])
    def test_out_of_range_ordinals(self, player, url_list):
        with pytest.raises(MalformedRecordError):
            decode(_record(player=player, url_list=url_list))

    def test_invalid_boolean(self):
        with pytest.raises(MalformedRecordError):
            decode(_record(osd=2))

    def test_string_length_past_end(self):
        data = _record(urls=("http://a",))
        # Claim a longer string than the buffer holds
        data = data[:29] + struct.pack(">I", 1000) + data[33:]
        with pytest.raises(MalformedRecordError):
            decode(data)

    def test_huge_url_count(self):
        data = _record()[:25] + struct.pack(">I", 0xFFFFFFF0)
        with pytest.raises(MalformedRecordError):
            decode(data)

    def test_invalid_utf8(self):
        data = _record()[:25] + struct.pack(">II", 1, 2) + b"\xff\xfe"
        with pytest.raises(MalformedRecordError):
            decode(data)

    def test_null_string_decodes_as_empty(self):
        data = _record()[:25] + struct.pack(">II", 1, 0xFFFFFFFF)
        assert decode(data).urls == ("",)

    def test_malformed_error_is_a_value_error(self):
        assert issubclass(MalformedRecordError, ValueError)
