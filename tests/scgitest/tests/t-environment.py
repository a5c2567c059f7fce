# -*- coding: utf-8 -*-

import io
import os

from scgitest.base import TestBase
from scgirun.base import Env, log_enabled
from scgirun.environment import build_environment


AMBIENT = {b'PATH': b'/usr/bin:/bin', b'HOME': b'/nonexistent', b'SCRIPT_FILENAME': b'/from/inetd.cgi'}


class TestGatewayMarkers(TestBase):
    def run_test(self) -> bool:
        env = build_environment([(b'CONTENT_LENGTH', b'0'), (b'SCGI', b'1')], ambient={})
        assert env == {b'CONTENT_LENGTH': b'0', b'GATEWAY_INTERFACE': b'CGI/1.1'}, env
        return True


class TestLastWriteWins(TestBase):
    def run_test(self) -> bool:
        env = build_environment([(b'A', b'1'), (b'B', b'2'), (b'A', b'3')], ambient={})
        assert env[b'A'] == b'3'
        assert env[b'B'] == b'2'
        return True


class TestAmbientInherited(TestBase):
    def run_test(self) -> bool:
        env = build_environment([(b'SCRIPT_FILENAME', b'/srv/cgi/a.cgi')], ambient=AMBIENT)
        assert env[b'PATH'] == b'/usr/bin:/bin'
        assert env[b'HOME'] == b'/nonexistent'
        assert env[b'SCRIPT_FILENAME'] == b'/srv/cgi/a.cgi'
        # no side effects on the input
        assert AMBIENT[b'SCRIPT_FILENAME'] == b'/from/inetd.cgi'
        return True


class TestHeaderOverridesGatewayInterface(TestBase):
    def run_test(self) -> bool:
        env = build_environment([(b'GATEWAY_INTERFACE', b'SCGI/1')], ambient={b'SCGI': b'1'})
        assert env[b'GATEWAY_INTERFACE'] == b'CGI/1.1'
        assert not b'SCGI' in env
        return True


class TestInvalidNamesSkipped(TestBase):
    def run_test(self) -> bool:
        env = build_environment([(b'', b'empty'), (b'A=B', b'x'), (b'OK', b'y')], ambient={})
        assert env == {b'OK': b'y', b'GATEWAY_INTERFACE': b'CGI/1.1'}, env
        return True


class TestProcessEnvironmentDefault(TestBase):
    def run_test(self) -> bool:
        env = build_environment([])
        assert env.get(b'PATH') == os.environb.get(b'PATH')
        assert env[b'GATEWAY_INTERFACE'] == b'CGI/1.1'
        # a copy, never the live process environment
        assert env is not os.environb
        assert isinstance(env, dict)
        return True


class TestDiagnostics(TestBase):
    def run_test(self) -> bool:
        out = io.StringIO()
        with Env(log=out, stdin=io.BytesIO(), stdout=io.BytesIO()).use():
            assert log_enabled()
            build_environment([(b'A', b'\xff1'), (b'', b'x')], ambient={})
        lines = out.getvalue().splitlines()
        assert lines == ["Set [A]=[\\xff1]", "Skipping invalid variable name b''"], lines

        # without a log nothing gets formatted at all
        with Env(stdin=io.BytesIO(), stdout=io.BytesIO()).use():
            assert not log_enabled()
            build_environment([(b'A', b'1')], ambient={})
        assert not log_enabled()
        return True
