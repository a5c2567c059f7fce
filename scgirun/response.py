# -*- coding: utf-8 -*-

from __future__ import annotations

import sys
import typing

from .base import log, EnvContext, GatewayError, EXIT_FAILURE


__all__ = ["format_error", "report_error"]


def format_error(status: str, message: str) -> bytes:
    # looks like a CGI response, so the front end passes it on to the client
    text = f"Status: {status}\r\nContent-Type: text/plain\r\n\r\n{message}\r\n"
    return text.encode('utf-8', errors='backslashreplace')


def report_error(error: GatewayError, out: typing.Optional[typing.BinaryIO] = None) -> typing.NoReturn:
    env = EnvContext.get()
    if out is None:
        out = env.stdout if env else sys.stdout.buffer
    log(f"{type(error).__name__}: {error.status}: {error.message.rstrip()}")
    out.write(format_error(error.status, error.message))
    out.flush()
    if env:
        env.flush()
    sys.exit(EXIT_FAILURE)
