"""Exceptions raised by the market data subsystem."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised at startup when the market configuration cannot work."""

    pass


class SourceError(Exception):
    """Raised by a source adapter when a fetch yields nothing usable.

    Covers network failures, non-2xx responses, malformed payloads and
    responses that cover none of the requested instruments.
    """

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
