# -*- coding: utf-8 -*-

"""SCGI to CGI adapter: run one CGI script per SCGI connection."""

from .base import (
    Env, GatewayError, ProtocolError, ConfigError, SecurityError, ExecutionError, ScriptNotFound,
)
from .gateway import Invocation, prepare_invocation

__version__ = "1.0.0"

__all__ = [
    "Env", "GatewayError", "ProtocolError", "ConfigError", "SecurityError", "ExecutionError", "ScriptNotFound",
    "Invocation", "prepare_invocation",
]
