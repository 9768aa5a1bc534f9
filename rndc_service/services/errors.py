"""Exceptions raised by the submission workflow.

Transport failures and RNDC rejections are not exceptions: they come back
as ``TransportResult`` / ``RndcResult`` values and end in an ``error``
state. The classes below cover what stops a record before anything is sent.
"""

from __future__ import annotations


class RndcError(Exception):
    """Base class; the message is shown to the operator as-is."""


class ConfigurationError(RndcError):
    """No active RNDC configuration."""


class ResolutionError(RndcError):
    """A referenced site, vehicle, remesa or manifest does not exist."""


class InvalidInputError(RndcError):
    """Input that cannot be turned into an RNDC document (e.g. a bad date)."""


class StateError(RndcError):
    """The record exists but its state does not allow the requested operation."""
