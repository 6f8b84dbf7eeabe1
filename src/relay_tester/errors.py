"""
Relay Tester Exceptions
=======================

Two failure kinds reach the operator:

- ValidationError: operator input outside its domain, raised before any
  Modbus request is issued.
- TransportError: the Modbus round trip failed (connection refused or lost,
  timeout, exception response, malformed response).

Author: Guilherme F. G. Santos
Date: January 2026
License: MIT
"""


class RelayTesterError(Exception):
    """Base class for all relay tester errors."""


class ValidationError(RelayTesterError, ValueError):
    """Operator-supplied value outside its allowed range."""


class TransportError(RelayTesterError):
    """
    Modbus transaction failure.

    Attributes:
        reason: One of 'connection', 'timeout', 'exception_response', 'protocol'
    """

    CONNECTION = "connection"
    TIMEOUT = "timeout"
    EXCEPTION_RESPONSE = "exception_response"
    PROTOCOL = "protocol"

    def __init__(self, message: str, reason: str = PROTOCOL):
        super().__init__(message)
        self.reason = reason

    def __str__(self) -> str:
        return f"{super().__str__()} ({self.reason})"
