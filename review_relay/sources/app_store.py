"""
App Store source adapter.

Fetches the public customer-review RSS/XML feed for an iOS app.
"""

import logging
from typing import List, Optional

import feedparser
import requests

from review_relay.errors import FetchError, ParseError
from review_relay.models.review import Source
from review_relay.sources.base import RawRecord, SourceAdapter

logger = logging.getLogger(__name__)

FEED_URL_TEMPLATE = "https://itunes.apple.com/rss/customerreviews/id={app_id}/sortBy=mostRecent/xml"


class AppStoreSource(SourceAdapter):
    """
    Reads the most recent customer reviews from the App Store RSS feed.

    The feed returns the latest page of reviews only (no pagination).
    Entries are returned as feedparser dictionaries; namespaced fields
    appear with an "im_" prefix (im_rating, im_version, ...).
    """

    source = Source.APP_STORE

    def __init__(
        self,
        app_id: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        """
        Args:
            app_id: Numeric App Store id of the app
            timeout: HTTP timeout in seconds
            session: Optional requests session (a new one is created if omitted)
        """
        self.app_id = app_id
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def feed_url(self) -> str:
        return FEED_URL_TEMPLATE.format(app_id=self.app_id)

    def fetch(self) -> List[RawRecord]:
        """
        Fetch and parse the review feed.

        Returns:
            List of feed entries, newest first as served (may be empty)

        Raises:
            FetchError: on network errors or a non-success HTTP status
            ParseError: if the body is not a parsable feed
        """
        logger.debug(f"Fetching App Store reviews from {self.feed_url}")
        try:
            response = self.session.get(self.feed_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Error fetching Apple reviews: {e}", source=self.source) from e

        parsed = feedparser.parse(response.content)
        entries = list(parsed.get("entries", []))

        if parsed.get("bozo") and not entries:
            raise ParseError(
                f"Error parsing App Store feed: {parsed.get('bozo_exception')}",
                source=self.source
            )
        if parsed.get("bozo"):
            logger.warning(f"App Store feed parsed with warnings: {parsed.get('bozo_exception')}")

        logger.info(f"Fetched {len(entries)} App Store reviews")
        return entries
