"""
Review Dispatcher.

Writes formatted reviews to the console and, when asked, forwards each
one to Slack. Delivery is best-effort: at most one post per review per
run, no retry.
"""

import logging
import sys
from typing import Optional, TextIO

from review_relay.delivery.slack import SlackClient
from review_relay.errors import WebhookDeliveryError
from review_relay.models.review import Review

logger = logging.getLogger(__name__)


class ReviewDispatcher:
    """
    Emits reviews and keeps per-run delivery counts.
    """

    def __init__(
        self,
        slack_client: Optional[SlackClient] = None,
        stream: Optional[TextIO] = None
    ):
        """
        Args:
            slack_client: Client used for webhook delivery (None disables it)
            stream: Console stream (defaults to sys.stdout at call time)
        """
        self.slack_client = slack_client
        self._stream = stream
        self.printed = 0
        self.delivered = 0
        self.failed_deliveries = 0

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def announce(self, text: str) -> None:
        """Print a header or notice. Never forwarded to Slack."""
        print(text, file=self.stream)

    def emit(self, review: Review, text: str, deliver_to_webhook: bool) -> None:
        """
        Print one formatted review and optionally post it.

        A failed post is logged and counted; it never stops the run.
        """
        print(f"\n{text}", file=self.stream)
        self.printed += 1

        if not deliver_to_webhook:
            return

        if self.slack_client is None:
            logger.error("Slack delivery requested but no Slack client is configured")
            self.failed_deliveries += 1
            return

        try:
            self.slack_client.post_message(text)
        except WebhookDeliveryError as e:
            logger.error(f"{e} (review {review.identifier or 'without id'})")
            self.failed_deliveries += 1
            return

        self.delivered += 1
