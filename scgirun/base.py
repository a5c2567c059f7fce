# -*- coding: utf-8 -*-

from __future__ import annotations

import contextlib
import contextvars
import dataclasses
import io
import sys
import typing


__all__ = [
    "Env", "EnvContext", "log", "log_enabled",
    "GatewayError", "ProtocolError", "ConfigError", "SecurityError", "ExecutionError", "ScriptNotFound",
    "MAX_HEADER_LENGTH", "SCRIPT_VARIABLE", "EXIT_FAILURE",
]


MAX_HEADER_LENGTH = 262144  # sanity check on what the server sends
SCRIPT_VARIABLE = b'SCRIPT_FILENAME'
EXIT_FAILURE = 1


class GatewayError(Exception):
    status: typing.ClassVar[str] = "500 Internal Error"

    def __init__(self, message: str, *, status: typing.Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if not status is None:
            self.status = status


class ProtocolError(GatewayError):
    pass


class ConfigError(GatewayError):
    pass


class SecurityError(GatewayError):
    pass


class ExecutionError(GatewayError):
    pass


class ScriptNotFound(ExecutionError):
    status = "404 Not Found"


@dataclasses.dataclass
class Env:
    max_header_length: int = MAX_HEADER_LENGTH
    script_variable: bytes = SCRIPT_VARIABLE
    canonical: bool = False
    debug_log: str = ''
    args: list[bytes] = dataclasses.field(default_factory=list)
    # unbuffered: the request body must stay unread for the script
    stdin: typing.BinaryIO = dataclasses.field(default_factory=lambda: sys.stdin.buffer.raw)
    stdout: typing.BinaryIO = dataclasses.field(default_factory=lambda: sys.stdout.buffer)
    # None: diagnostics are disabled
    log: typing.Optional[io.TextIOBase] = None

    @contextlib.contextmanager
    def use(self) -> typing.Generator[None, None, None]:
        token = EnvContext.set(self)
        try:
            yield
        finally:
            EnvContext.reset(token)

    def flush(self) -> None:
        if self.log and not self.log.closed:
            self.log.flush()
        self.stdout.flush()


# pipeline stages log without passing the env around explicitly
EnvContext: contextvars.ContextVar[typing.Optional[Env]] = contextvars.ContextVar('env', default=None)


def log_enabled() -> bool:
    env = EnvContext.get()
    return bool(env and env.log)


def log(*args, **kwargs) -> None:
    env = EnvContext.get()
    if not env or not env.log:
        return
    print(*args, file=env.log, **kwargs)
