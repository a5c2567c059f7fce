# -*- coding: utf-8 -*-

from __future__ import annotations

import dataclasses
import os
import typing

from .base import log, log_enabled, ConfigError, SecurityError, MAX_HEADER_LENGTH, SCRIPT_VARIABLE
from .environment import build_environment
from .netstring import ByteStream, read_pairs


__all__ = ["Invocation", "resolve_script", "validate_script", "prepare_invocation"]


@dataclasses.dataclass
class Invocation:
    script: bytes
    argv: list[bytes]
    env: dict[bytes, bytes]
    prefix: typing.Optional[bytes] = None


def _show(path: bytes) -> str:
    return path.decode(errors='backslashreplace')


def resolve_script(
    env: typing.Mapping[bytes, bytes],
    args: typing.Sequence[bytes] = (),
    *,
    script_variable: bytes = SCRIPT_VARIABLE,
) -> tuple[bytes, list[bytes], typing.Optional[bytes]]:
    """
    Returns (script, argv, prefix).

    A first argument ending in '/' is a directory every script has to reside
    under; any other first argument is the script itself (inetd style
    configuration), with the remaining arguments passed on to it.
    """
    script = env.get(script_variable)
    prefix: typing.Optional[bytes] = None

    if args and args[0].endswith(b'/'):
        prefix = args[0]
    elif args and args[0]:
        script = args[0]
        return script, list(args), prefix

    # set but empty still counts; running it fails with "not found"
    if script is None:
        raise ConfigError(f"CGI environment missing {_show(script_variable)}")
    return script, [script], prefix


def _canonical_contains(prefix: bytes, script: bytes) -> bool:
    directory = os.path.realpath(prefix)
    target = os.path.realpath(script)
    return os.path.commonpath([directory, target]) == directory


def validate_script(
    script: bytes,
    prefix: typing.Optional[bytes] = None,
    *,
    canonical: bool = False,
    script_variable: bytes = SCRIPT_VARIABLE,
) -> None:
    if b'../' in script:
        raise SecurityError(f'{_show(script_variable)} should not include "../"')

    if prefix is None:
        return
    if canonical:
        contained = _canonical_contains(prefix, script)
    else:
        contained = script.startswith(prefix)
    if not contained:
        raise SecurityError(f"[{_show(script)}] doesn't reside under [{_show(prefix)}]")


def prepare_invocation(
    stream: ByteStream,
    args: typing.Sequence[bytes] = (),
    *,
    max_length: int = MAX_HEADER_LENGTH,
    ambient: typing.Optional[typing.Mapping[bytes, bytes]] = None,
    canonical: bool = False,
    script_variable: bytes = SCRIPT_VARIABLE,
) -> Invocation:
    """
    Runs everything up to (but not including) starting the script; raises
    GatewayError subclasses on failure. Does not touch the process
    environment, so it also works for callers spawning the script themselves.
    """
    pairs = read_pairs(stream, max_length)
    env = build_environment(pairs, ambient)
    script, argv, prefix = resolve_script(env, args, script_variable=script_variable)
    if log_enabled():
        log(f"Script [{_show(script)}], argv {[_show(a) for a in argv]}")
    validate_script(script, prefix, canonical=canonical, script_variable=script_variable)
    return Invocation(script=script, argv=argv, env=env, prefix=prefix)
