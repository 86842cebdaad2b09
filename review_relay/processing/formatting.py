"""
Review Formatter.

Renders a normalized review into the fixed-layout, Slack-flavoured text
block that is printed to the console and posted to the channel.
"""

from datetime import datetime
from typing import Any, List, Optional
from zoneinfo import ZoneInfo

from review_relay.models.review import Review, Source

SEPARATOR = "========================="
DETAIL_SEPARATOR = "- - - - - - - -"
DATE_FORMAT = "%B %d, %Y, %I:%M %p"  # June 01, 2024, 05:00 AM

_REVIEW_TITLES = {
    Source.APP_STORE: "iOS App Review",
    Source.GOOGLE_PLAY: "Android App Review",
}

# (extra key, label) pairs rendered after the author, in order
_DEVICE_FIELDS = [
    ("language", "Language"),
    ("device", "Device"),
    ("android_os_version", "Android OS Version"),
    ("product_name", "Product Name"),
    ("manufacturer", "Manufacturer"),
    ("screen_density_dpi", "Screen Density DPI"),
]


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


class ReviewFormatter:
    """
    Formats reviews and per-source notices.

    Dates are rendered in a fixed display time zone, so output does not
    depend on the machine's local zone.
    """

    def __init__(
        self,
        display_timezone: str = "America/Los_Angeles",
        ios_app_name: str = "iOS App",
        android_app_name: str = "Android App"
    ):
        """
        Args:
            display_timezone: IANA zone name used for review dates
            ios_app_name: App name shown in App Store headers
            android_app_name: App name shown in Google Play headers
        """
        self.zone = ZoneInfo(display_timezone)
        self.app_names = {
            Source.APP_STORE: ios_app_name,
            Source.GOOGLE_PLAY: android_app_name,
        }

    def format_date(self, instant: datetime) -> str:
        return instant.astimezone(self.zone).strftime(DATE_FORMAT)

    def format_header(self, source: Source) -> str:
        """Banner printed once per source before its reviews."""
        return f"{SEPARATOR}\nApp: {self.app_names[source]}\n{SEPARATOR}"

    def no_reviews_notice(self, source: Source) -> str:
        return f"No reviews available for {self.app_names[source]}."

    def no_new_reviews_notice(self, source: Source) -> str:
        return f"No new reviews have occurred in the {source.store_name} since the last run."

    def format_review(self, review: Review) -> str:
        """
        Render one review.

        Each labeled line is emitted only when its field is present; vote
        counts are always shown since the normalizer defaults them to 0.
        """
        lines: List[str] = []

        header = f"*{_REVIEW_TITLES[review.source]}:*"
        if _present(review.version):
            header += f" v{review.version}"
        lines.append(header)

        if review.timestamp is not None:
            lines.append(f"*Date:* {self.format_date(review.timestamp)}")
        if review.rating is not None:
            lines.append(f"*Rating:* {review.rating}/5")
        if review.source is Source.APP_STORE:
            self._add(lines, "Title", review.title)
        self._add(lines, "Detail", review.text)
        lines.append(DETAIL_SEPARATOR)
        self._add(lines, "by", review.author)

        extra = review.extra
        if review.source is Source.APP_STORE:
            self._add(lines, "Country", extra.get("country"))
            lines.append(
                f"*Helpful Votes:* {extra.get('vote_count', 0)} "
                f"(Total: {extra.get('vote_sum', 0)})"
            )
        else:
            lines.append(
                f"*Thumbs Up:* {extra.get('thumbs_up', 0)} | "
                f"*Thumbs Down:* {extra.get('thumbs_down', 0)}"
            )

        for key, label in _DEVICE_FIELDS:
            self._add(lines, label, extra.get(key))

        self._add(lines, "Review ID", review.identifier)
        self._add(lines, "Review Link", review.link)

        lines.append("")
        lines.append(SEPARATOR)
        return "\n".join(lines)

    @staticmethod
    def _add(lines: List[str], label: str, value: Optional[Any]) -> None:
        if _present(value):
            lines.append(f"*{label}:* {value}")
