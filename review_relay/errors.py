"""
Error taxonomy for ReviewRelay.

Only ConfigError is fatal. Every other error is caught close to where it is
raised, logged, and the run degrades gracefully.
"""


class ReviewRelayError(Exception):
    """Base class for all ReviewRelay errors."""


class ConfigError(ReviewRelayError):
    """Missing credentials or an invalid run selection. Fatal before any fetch."""


class FetchError(ReviewRelayError):
    """A vendor call failed. Isolated to the source that raised it."""

    def __init__(self, message: str, source=None):
        super().__init__(message)
        self.source = source


class ParseError(FetchError):
    """A vendor payload could not be parsed."""


class WatermarkReadError(ReviewRelayError):
    """The watermark file is missing, unreadable or corrupted."""


class WebhookDeliveryError(ReviewRelayError):
    """A single webhook post failed."""
