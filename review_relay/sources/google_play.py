"""
Google Play source adapter.

Lists reviews through the Android Publisher API using a service account.
"""

import logging
from typing import Any, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from review_relay.errors import FetchError, ParseError
from review_relay.models.review import Source
from review_relay.sources.base import RawRecord, SourceAdapter

logger = logging.getLogger(__name__)

ANDROID_PUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"


class GooglePlaySource(SourceAdapter):
    """
    Reads reviews for an Android app from the Google Play Developer API.

    The API only returns reviews created or modified in the last week,
    and only the first page is read.
    """

    source = Source.GOOGLE_PLAY

    def __init__(
        self,
        package_name: str,
        key_path: str,
        service: Optional[Any] = None
    ):
        """
        Args:
            package_name: Android package name (e.g., "com.example.app")
            key_path: Path to the service account JSON key
            service: Pre-built androidpublisher client (built lazily if omitted)
        """
        self.package_name = package_name
        self.key_path = key_path
        self._service = service

    def fetch(self) -> List[RawRecord]:
        """
        List the app's reviews.

        Returns:
            Review resources as returned by the API (may be empty)

        Raises:
            FetchError: on authentication, key file or API errors
            ParseError: if the response is not a JSON object
        """
        try:
            service = self._get_service()
            result = service.reviews().list(packageName=self.package_name).execute()
        except HttpError as e:
            raise FetchError(f"Error fetching Google Play reviews: {e}", source=self.source) from e
        except GoogleAuthError as e:
            raise FetchError(f"Google Play authentication failed: {e}", source=self.source) from e
        except (OSError, ValueError) as e:
            raise FetchError(
                f"Could not load Google Play service account key {self.key_path}: {e}",
                source=self.source
            ) from e

        if not isinstance(result, dict):
            raise ParseError(
                f"Unexpected Google Play response type: {type(result).__name__}",
                source=self.source
            )

        reviews = result.get("reviews") or []
        logger.info(f"Fetched {len(reviews)} Google Play reviews")
        return list(reviews)

    def _get_service(self):
        """Authenticate and build the androidpublisher v3 client once."""
        if self._service is None:
            credentials = service_account.Credentials.from_service_account_file(
                self.key_path,
                scopes=[ANDROID_PUBLISHER_SCOPE]
            )
            self._service = build(
                "androidpublisher",
                "v3",
                credentials=credentials,
                cache_discovery=False
            )
            logger.debug(f"Built androidpublisher client for {self.package_name}")
        return self._service
