"""Error types raised around the remote log service."""

from __future__ import annotations


class LogServiceError(Exception):
    """A call to the remote log service failed outright (network, auth, throttling)."""


class RemoteQueryFailed(Exception):
    """The remote service reported the query as failed or cancelled."""


class RemoteQueryTimedOut(Exception):
    """The query did not finish, either remotely or within our own deadline."""
