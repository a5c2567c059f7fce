# -*- coding: utf-8 -*-

"""
SCGI header block codec.

A header block is a netstring whose payload is a sequence of NUL terminated
strings, alternating name and value:

    <decimal-length>:<name>\\0<value>\\0...<name>\\0<value>\\0,

The request body follows the block on the same stream. Reading therefore
never consumes more than the block itself: the length is read byte by byte,
and the payload is read with an exact size.
"""

from __future__ import annotations

import typing

from .base import log, ProtocolError, MAX_HEADER_LENGTH


__all__ = [
    "Pairs", "read_length", "read_header_block", "read_pairs",
    "unpack_pairs", "pack_pairs", "pack_header_block",
]


class ByteStream(typing.Protocol):
    def read(self, size: int = -1, /) -> typing.Optional[bytes]:
        ...


Pairs = list[tuple[bytes, bytes]]

_DIGITS = b'0123456789'


def _read_char(stream: ByteStream) -> int:
    try:
        ch = stream.read(1)
    except OSError as e:
        raise ProtocolError("SCGI stream truncated") from e
    if not ch:
        raise ProtocolError("SCGI stream truncated")
    return ch[0]


def _read_exactly(stream: ByteStream, size: int) -> bytes:
    # pipes and sockets may hand out short reads; only EOF or a read error is truncation
    data = b''
    while len(data) < size:
        try:
            chunk = stream.read(size - len(data))
        except OSError as e:
            raise ProtocolError("SCGI Header truncated") from e
        if not chunk:
            raise ProtocolError("SCGI Header truncated")
        data += chunk
    return data


def read_length(stream: ByteStream, max_length: int = MAX_HEADER_LENGTH) -> int:
    ch = _read_char(stream)
    if not ch in _DIGITS:
        raise ProtocolError(f"SCGI stream didn't start with a digit, started with char 0x{ch:x}")
    length = ch - 0x30

    while True:
        ch = _read_char(stream)
        if ch in _DIGITS:
            length = (length * 10) + (ch - 0x30)
            if length > max_length:
                raise ProtocolError(f"SCGI Header length is not in the range 0..{max_length}")
        elif ch == 0x3a:  # ':'
            break
        else:
            raise ProtocolError(f"Invalid character 0x{ch:x} in length", status="500 Invalid SCGI header")

    # a single digit is checked here
    if length > max_length:
        raise ProtocolError(f"SCGI Header length is not in the range 0..{max_length}")
    return length


def read_header_block(stream: ByteStream, max_length: int = MAX_HEADER_LENGTH) -> bytes:
    length = read_length(stream, max_length)
    log(f"SCGI header length = {length}")

    # +1 is for the comma after the headers
    headers = _read_exactly(stream, length + 1)
    if headers[length:] != b',':
        raise ProtocolError("SCGI Header: Incomplete netstring, missing comma")
    return headers[:length]


def unpack_pairs(payload: bytes) -> typing.Generator[tuple[bytes, bytes], None, None]:
    end = len(payload)
    name_start = 0
    while name_start < end:
        name_end = payload.find(b'\0', name_start)
        if name_end < 0:
            raise ProtocolError("SCGI Header: Corrupt name/value table")
        value_start = name_end + 1
        if value_start >= end:
            raise ProtocolError("SCGI Header: Corrupt name/value table")
        value_end = payload.find(b'\0', value_start)
        if value_end < 0:
            raise ProtocolError("SCGI Header: Corrupt name/value table")
        yield payload[name_start:name_end], payload[value_start:value_end]
        name_start = value_end + 1


def read_pairs(stream: ByteStream, max_length: int = MAX_HEADER_LENGTH) -> Pairs:
    return list(unpack_pairs(read_header_block(stream, max_length)))


def pack_pairs(pairs: typing.Iterable[tuple[bytes, bytes]]) -> bytes:
    payload = b''
    for name, value in pairs:
        if b'\0' in name or b'\0' in value:
            raise ProtocolError(f"NUL byte in SCGI header {name!r}")
        payload += name + b'\0' + value + b'\0'
    return payload


def pack_header_block(pairs: typing.Iterable[tuple[bytes, bytes]]) -> bytes:
    payload = pack_pairs(pairs)
    return str(len(payload)).encode() + b':' + payload + b','
