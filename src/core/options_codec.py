# -*- coding: utf-8 -*-
"""
Command Options Codec

Binary format used to hand a CommandOptions record from a secondary
instance to the primary one. Written with QDataStream (big-endian, pinned
stream version) in this exact field order:

    player_action          int32   (PlayerAction ordinal)
    url_list_action        int32   (UrlListAction ordinal)
    set_volume             int32
    volume_modifier        int32
    seek_to_seconds        int32
    play_track_at_index    int32
    show_osd               uint8   (0 or 1)
    urls                   uint32 count, then per URL:
                           uint32 byte length + UTF-8 bytes

Both instances must agree on this layout; change it only together with
every build that talks to it.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QByteArray, QDataStream, QIODevice

from models.command_options import CommandOptions, PlayerAction, UrlListAction

logger = logging.getLogger(__name__)

STREAM_VERSION = QDataStream.Version.Qt_5_0

INT32_SIZE = 4
BOOL_SIZE = 1

# Six int32 fields, the bool, and the URL count
MINIMUM_RECORD_SIZE = 6 * INT32_SIZE + BOOL_SIZE + INT32_SIZE

# Length prefix QDataStream writes for a null byte array
_NULL_LENGTH = 0xFFFFFFFF

_INT32_RANGE = range(-(2 ** 31), 2 ** 31)


class MalformedRecordError(ValueError):
    """The buffer is not a well-formed encoded CommandOptions record"""


def _new_stream(*args) -> QDataStream:
    stream = QDataStream(*args)
    stream.setVersion(STREAM_VERSION)
    stream.setByteOrder(QDataStream.ByteOrder.BigEndian)
    return stream


def encode(options: CommandOptions) -> bytes:
    """
    Serialize a record.

    Raises:
        ValueError: An integer field does not fit in 32 bits.
    """
    for name in ('set_volume', 'volume_modifier', 'seek_to_seconds', 'play_track_at_index'):
        if getattr(options, name) not in _INT32_RANGE:
            raise ValueError(f"{name} out of int32 range: {getattr(options, name)}")

    payload = QByteArray()
    stream = _new_stream(payload, QIODevice.OpenModeFlag.WriteOnly)

    stream.writeInt32(int(options.player_action))
    stream.writeInt32(int(options.url_list_action))
    stream.writeInt32(options.set_volume)
    stream.writeInt32(options.volume_modifier)
    stream.writeInt32(options.seek_to_seconds)
    stream.writeInt32(options.play_track_at_index)
    stream.writeBool(options.show_osd)

    stream.writeUInt32(len(options.urls))
    for url in options.urls:
        stream.writeBytes(url.encode('utf-8'))

    data = payload.data()
    logger.debug("Encoded command options: %d bytes", len(data))
    return data


class _RecordReader:
    """Bounds-checked reads over a QDataStream"""

    def __init__(self, data: bytes):
        self._buffer = QByteArray(data)
        self._stream = _new_stream(self._buffer)

    @property
    def remaining(self) -> int:
        return self._stream.device().bytesAvailable()

    def _require(self, size: int, field: str) -> None:
        if size > self.remaining:
            raise MalformedRecordError(
                f"truncated record: {field} needs {size} bytes, {self.remaining} left"
            )

    def _check_status(self, field: str) -> None:
        if self._stream.status() != QDataStream.Status.Ok:
            raise MalformedRecordError(f"failed to read {field}")

    def read_int32(self, field: str) -> int:
        self._require(INT32_SIZE, field)
        value = self._stream.readInt32()
        self._check_status(field)
        return value

    def read_uint32(self, field: str) -> int:
        self._require(INT32_SIZE, field)
        value = self._stream.readUInt32()
        self._check_status(field)
        return value

    def read_bool(self, field: str) -> bool:
        self._require(BOOL_SIZE, field)
        value = self._stream.readUInt8()
        self._check_status(field)
        if value not in (0, 1):
            raise MalformedRecordError(f"invalid boolean for {field}: {value}")
        return bool(value)

    def read_string(self, field: str) -> str:
        length = self.read_uint32(field)
        if length == _NULL_LENGTH:
            return ""

        self._require(length, field)
        raw = self._stream.readRawData(length) if length else b""
        self._check_status(field)
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedRecordError(f"{field} is not valid UTF-8") from e


def decode(data: bytes) -> CommandOptions:
    """
    Deserialize a record produced by encode().

    Raises:
        MalformedRecordError: The buffer is truncated, has trailing bytes,
            or contains an invalid enum ordinal, boolean or string.
    """
    if len(data) < MINIMUM_RECORD_SIZE:
        raise MalformedRecordError(
            f"record too short: {len(data)} bytes, need at least {MINIMUM_RECORD_SIZE}"
        )

    reader = _RecordReader(bytes(data))

    player_ordinal = reader.read_int32('player_action')
    url_list_ordinal = reader.read_int32('url_list_action')
    try:
        player_action = PlayerAction(player_ordinal)
    except ValueError as e:
        raise MalformedRecordError(f"unknown player action ordinal: {player_ordinal}") from e
    try:
        url_list_action = UrlListAction(url_list_ordinal)
    except ValueError as e:
        raise MalformedRecordError(f"unknown url list action ordinal: {url_list_ordinal}") from e

    set_volume = reader.read_int32('set_volume')
    volume_modifier = reader.read_int32('volume_modifier')
    seek_to_seconds = reader.read_int32('seek_to_seconds')
    play_track_at_index = reader.read_int32('play_track_at_index')
    show_osd = reader.read_bool('show_osd')

    count = reader.read_uint32('urls')
    # Every entry carries at least its length prefix
    if count * INT32_SIZE > reader.remaining:
        raise MalformedRecordError(
            f"url count {count} exceeds remaining {reader.remaining} bytes"
        )
    urls = tuple(reader.read_string(f'urls[{i}]') for i in range(count))

    if reader.remaining:
        raise MalformedRecordError(f"{reader.remaining} trailing bytes after record")

    return CommandOptions(
        player_action=player_action,
        url_list_action=url_list_action,
        set_volume=set_volume,
        volume_modifier=volume_modifier,
        seek_to_seconds=seek_to_seconds,
        play_track_at_index=play_track_at_index,
        show_osd=show_osd,
        urls=urls,
    )
