# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import typing

from .base import log, log_enabled


__all__ = ["build_environment", "PROTOCOL_MARKER", "GATEWAY_INTERFACE"]


PROTOCOL_MARKER = b'SCGI'
GATEWAY_INTERFACE = (b'GATEWAY_INTERFACE', b'CGI/1.1')


def _valid_name(name: bytes) -> bool:
    # same rules as setenv(3)
    return bool(name) and not b'=' in name


def build_environment(
    pairs: typing.Iterable[tuple[bytes, bytes]],
    ambient: typing.Optional[typing.Mapping[bytes, bytes]] = None,
) -> dict[bytes, bytes]:
    """Make things look like a CGI environment"""
    if ambient is None:
        ambient = os.environb
    env = dict(ambient)
    for name, value in pairs:
        if not _valid_name(name):
            log(f"Skipping invalid variable name {name!r}")
            continue
        env[name] = value
        if log_enabled():
            log(f"Set [{name.decode(errors='backslashreplace')}]=[{value.decode(errors='backslashreplace')}]")

    env.pop(PROTOCOL_MARKER, None)
    env[GATEWAY_INTERFACE[0]] = GATEWAY_INTERFACE[1]
    return env
