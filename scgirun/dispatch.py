# -*- coding: utf-8 -*-

from __future__ import annotations

import errno
import os
import subprocess
import typing

from .base import log, EnvContext, ExecutionError, ScriptNotFound
from .gateway import Invocation


__all__ = ["execute", "spawn"]


class FileWithFd(typing.Protocol):
    def fileno(self) -> int:
        ...


def _failed(e: OSError) -> ExecutionError:
    if isinstance(e, FileNotFoundError):
        return ScriptNotFound("Can't locate CGI script\n")
    return ExecutionError(
        f"Unable to execute CGI script, please contact the system administrator\n{e.strerror}\n",
    )


def _check_script(script: bytes) -> None:
    # execve(2) gives ENOENT for "", but os.execve refuses an empty argv[0] with ValueError
    if not script:
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), script)


def execute(invocation: Invocation) -> typing.NoReturn:
    """Replaces the current process with the script; returns only by raising"""
    log(f"Executing {invocation.script!r}")
    env = EnvContext.get()
    if env:
        # anything still buffered would get lost with the process image
        env.flush()
    try:
        _check_script(invocation.script)
        os.execve(invocation.script, invocation.argv, invocation.env)
    except OSError as e:
        log(f"execve failed: {e}")
        raise _failed(e) from e


def spawn(
    invocation: Invocation,
    *,
    stdin: typing.Union[FileWithFd, int, None] = None,
    stdout: typing.Union[FileWithFd, int, None] = None,
    stderr: typing.Union[FileWithFd, int, None] = None,
) -> subprocess.Popen:
    """
    Starts the script as child process instead of replacing the current
    process, for callers that live longer than one request.
    """
    log(f"Spawning {invocation.script!r}")
    try:
        _check_script(invocation.script)
        return subprocess.Popen(
            invocation.argv,
            executable=invocation.script,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            env=invocation.env,
            close_fds=True,
        )
    except OSError as e:
        log(f"spawn failed: {e}")
        raise _failed(e) from e
