"""Exceptions raised by the FlowQL pipeline."""

from __future__ import annotations


class FlowQLError(Exception):
    """Base exception for the pipeline."""


class InvalidUrlError(FlowQLError):
    """The submitted URL cannot be normalised into an absolute http(s) URL."""

    def __init__(self, url: str, reason: str = "invalid URL format"):
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url!r}")


class NetworkError(FlowQLError):
    """A page could not be fetched (retries exhausted, oversized, bad status).

    The last underlying error is chained as ``__cause__`` and kept on
    :attr:`cause`.
    """

    def __init__(
        self,
        url: str,
        message: str,
        attempts: int = 1,
        cause: BaseException | None = None,
    ):
        self.url = url
        self.message = message
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"Failed to fetch {url} after {attempts} attempt(s): {message}")


class EngineUnavailable(FlowQLError):
    """A citation engine call failed or produced no usable text."""

    def __init__(self, engine: str, reason: str):
        self.engine = engine
        self.reason = reason
        super().__init__(f"{engine}: {reason}")
