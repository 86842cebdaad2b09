"""
Review Normalizer.

Maps each vendor's raw record shape onto the common Review model.
Missing optional fields get their default here, once; nothing downstream
re-derives them.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from review_relay.models.review import DEFAULT_AUTHOR, DEFAULT_TEXT, Review, Source
from review_relay.sources.base import RawRecord

logger = logging.getLogger(__name__)

PLAY_REVIEW_LINK_TEMPLATE = "https://play.google.com/store/apps/details?id={package}&reviewId={review_id}"


def _to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _to_text(value: Any) -> Optional[str]:
    """Stripped string, or None for missing/blank values."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _to_rating(value: Any) -> Optional[int]:
    rating = _to_int(value)
    if rating is None or not (1 <= rating <= 5):
        return None
    return rating


def _parse_iso_timestamp(value: Any) -> Optional[datetime]:
    text = _to_text(value)
    if text is None:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparsable App Store timestamp: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc).replace(microsecond=0)
    except OverflowError:
        logger.debug(f"Out of range App Store timestamp: {value!r}")
        return None


def _from_epoch_seconds(value: Any) -> Optional[datetime]:
    seconds = _to_int(value)
    if seconds is None:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug(f"Out of range Google Play timestamp: {value!r}")
        return None


def _dict_items(value: Any) -> List[Dict[str, Any]]:
    """Dict members of a list field; anything else counts as empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _put(extra: Dict[str, Any], key: str, value: Any) -> None:
    """Store value under key only when it is present."""
    if value is not None:
        extra[key] = value


class ReviewNormalizer:
    """
    Converts raw vendor records into Review objects.

    Tolerates any missing or mistyped field by substituting its default,
    so a sparse record never fails normalization.
    """

    def __init__(self, google_package_name: str = ""):
        """
        Args:
            google_package_name: Android package, used to build review deep links
        """
        self.google_package_name = google_package_name

    def normalize(self, source: Source, raw: RawRecord) -> Review:
        """
        Normalize one raw record from the given source.

        Args:
            source: Which vendor produced the record
            raw: Vendor record (feedparser entry or API review resource)

        Returns:
            Normalized Review
        """
        if source is Source.APP_STORE:
            return self.normalize_app_store_entry(raw)
        if source is Source.GOOGLE_PLAY:
            return self.normalize_google_play_review(raw)
        raise ValueError(f"Unknown review source: {source}")

    def normalize_app_store_entry(self, entry: RawRecord) -> Review:
        """Map an App Store RSS entry (feedparser dict)."""
        extra: Dict[str, Any] = {}
        _put(extra, "country", _to_text(entry.get("im_country")))
        extra["vote_count"] = _to_int(entry.get("im_votecount")) or 0
        extra["vote_sum"] = _to_int(entry.get("im_votesum")) or 0

        return Review(
            source=Source.APP_STORE,
            timestamp=_parse_iso_timestamp(entry.get("updated")),
            rating=_to_rating(entry.get("im_rating")),
            text=self._app_store_text(entry) or DEFAULT_TEXT,
            author=self._app_store_author(entry) or DEFAULT_AUTHOR,
            title=_to_text(entry.get("title")),
            version=_to_text(entry.get("im_version")),
            identifier=_to_text(entry.get("id")),
            link=self._app_store_link(entry),
            extra=extra,
            raw=dict(entry)
        )

    def normalize_google_play_review(self, review: RawRecord) -> Review:
        """Map a Google Play review resource."""
        comment = self._user_comment(review)
        device_metadata = comment.get("deviceMetadata")
        if not isinstance(device_metadata, dict):
            device_metadata = {}

        last_modified = comment.get("lastModified") or review.get("lastModified") or {}
        timestamp = None
        if isinstance(last_modified, dict):
            timestamp = _from_epoch_seconds(last_modified.get("seconds"))

        extra: Dict[str, Any] = {
            "thumbs_up": _to_int(comment.get("thumbsUpCount")) or 0,
            "thumbs_down": _to_int(comment.get("thumbsDownCount")) or 0,
        }
        _put(extra, "language", _to_text(comment.get("reviewerLanguage")))
        _put(extra, "device", _to_text(comment.get("device")))
        _put(extra, "android_os_version", _to_text(comment.get("androidOsVersion")))
        _put(extra, "product_name", _to_text(device_metadata.get("productName")))
        _put(extra, "manufacturer", _to_text(device_metadata.get("manufacturer")))
        density = _to_int(device_metadata.get("screenDensityDpi"))
        if density is not None and density > 0:
            extra["screen_density_dpi"] = density

        review_id = _to_text(review.get("reviewId"))
        link = None
        if review_id and self.google_package_name:
            link = PLAY_REVIEW_LINK_TEMPLATE.format(
                package=self.google_package_name,
                review_id=review_id
            )

        return Review(
            source=Source.GOOGLE_PLAY,
            timestamp=timestamp,
            rating=_to_rating(comment.get("starRating")),
            text=_to_text(comment.get("text")) or DEFAULT_TEXT,
            author=_to_text(review.get("authorName")) or DEFAULT_AUTHOR,
            version=_to_text(comment.get("appVersionName")),
            identifier=review_id,
            link=link,
            extra=extra,
            raw=dict(review)
        )

    @staticmethod
    def _user_comment(review: RawRecord) -> Dict[str, Any]:
        """First user comment of a Play review (developer replies are skipped)."""
        for comment in _dict_items(review.get("comments")):
            if isinstance(comment.get("userComment"), dict):
                return comment["userComment"]
        return {}

    @staticmethod
    def _app_store_text(entry: RawRecord) -> Optional[str]:
        # The feed carries a plain-text and an HTML body; prefer plain text
        contents = _dict_items(entry.get("content"))
        for content in contents:
            if content.get("type") == "text/plain":
                return _to_text(content.get("value"))
        if contents:
            return _to_text(contents[0].get("value"))
        return _to_text(entry.get("summary"))

    @staticmethod
    def _app_store_author(entry: RawRecord) -> Optional[str]:
        author = _to_text(entry.get("author"))
        if author:
            return author
        detail = entry.get("author_detail")
        if not isinstance(detail, dict):
            return None
        return _to_text(detail.get("name"))

    @staticmethod
    def _app_store_link(entry: RawRecord) -> Optional[str]:
        """
        Review page URL.

        feedparser copies the entry <id> into "link" when the feed has no
        alternate link (guidislink), so that value is only a last resort.
        """
        link = _to_text(entry.get("link"))
        if link and not entry.get("guidislink") and link != _to_text(entry.get("id")):
            return link
        for candidate in _dict_items(entry.get("links")):
            href = _to_text(candidate.get("href"))
            if href and href != _to_text(entry.get("id")):
                return href
        return link
