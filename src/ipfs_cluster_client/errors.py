"""Exception types raised by the cluster client."""

from __future__ import annotations

from typing import Any

import httpx


class ClusterError(Exception):
    """Base exception for every failure surfaced by the client."""


class HttpError(ClusterError):
    """The cluster answered with a non-2xx status.

    The body is never interpreted; callers inspect ``response`` themselves.
    """

    def __init__(
        self,
        status: int,
        reason: str,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(f"{status}: {reason}")
        self.status = status
        self.reason = reason
        self.response = response


class DecodeError(ClusterError):
    """The transport succeeded but the payload did not have the expected shape."""

    def __init__(
        self,
        message: str,
        *,
        line: str | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.line = line
        self.payload = payload


class RequestCancelledError(ClusterError):
    """The caller's abort signal fired before the request completed."""
