# -*- coding: utf-8 -*-

import optparse
import os
import sys
import typing

from .base import Env, GatewayError, log, MAX_HEADER_LENGTH
from .dispatch import execute
from .gateway import prepare_invocation
from .logfile import open_log
from .response import report_error


USAGE = "%prog [options] [DIRECTORY/ | SCRIPT [ARGS...]]"
DESCRIPTION = (
    "Execute a CGI script over a SCGI connection: reads the SCGI header from stdin, "
    "sets up the CGI environment and replaces itself with the script. "
    "A DIRECTORY/ argument (trailing slash) restricts SCRIPT_FILENAME to that directory; "
    "a SCRIPT argument runs that script (with ARGS) instead of SCRIPT_FILENAME."
)


def parse_args(argv: typing.Optional[list[str]] = None) -> tuple[optparse.Values, list[str]]:
    parser = optparse.OptionParser(usage=USAGE, description=DESCRIPTION)
    # everything after the script belongs to the script
    parser.disable_interspersed_args()
    parser.add_option(
        "--max-header-length",
        help=f"Reject SCGI headers longer than this (default: {MAX_HEADER_LENGTH})",
        default=MAX_HEADER_LENGTH,
        type="int",
    )
    parser.add_option(
        "--debug-log",
        help="Append diagnostics to this file",
        default='',
    )
    parser.add_option(
        "--canonical",
        help="Resolve symlinks and '.' segments before checking DIRECTORY/",
        action="store_true",
        default=False,
    )

    (options, args) = parser.parse_args(argv)

    if options.max_header_length < 0:
        parser.error("--max-header-length must not be negative")

    return options, args


def setup_env(argv: typing.Optional[list[str]] = None) -> Env:
    options, args = parse_args(argv)

    env = Env()
    env.max_header_length = options.max_header_length
    env.canonical = options.canonical
    env.debug_log = options.debug_log
    env.args = [os.fsencode(arg) for arg in args]
    if env.debug_log:
        try:
            env.log = open_log(env.debug_log)
        except OSError as e:
            # diagnostics only; the request still gets handled
            print(f"scgi-run: can't open debug log {env.debug_log!r}: {e}", file=sys.stderr)
    return env


def run(env: Env) -> typing.NoReturn:
    with env.use():
        log(f"-------- Starting, argc={len(env.args) + 1}")
        for i, arg in enumerate(env.args, start=1):
            log(f"argv[{i}] == [{arg.decode(errors='backslashreplace')}]")
        try:
            invocation = prepare_invocation(
                env.stdin,
                env.args,
                max_length=env.max_header_length,
                canonical=env.canonical,
                script_variable=env.script_variable,
            )
            execute(invocation)
        except GatewayError as e:
            report_error(e)


def main(argv: typing.Optional[list[str]] = None) -> None:
    env = setup_env(argv)
    run(env)


if __name__ == '__main__':
    main()
