"""
Review data model.

Represents a store review after normalization, independent of the vendor
payload it was built from.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

DEFAULT_TEXT = "No review text"
DEFAULT_AUTHOR = "Anonymous"


class Source(Enum):
    """Review sources, declared in processing order."""
    APP_STORE = "apple"
    GOOGLE_PLAY = "google"

    @property
    def store_name(self) -> str:
        return _STORE_NAMES[self]


_STORE_NAMES = {
    Source.APP_STORE: "Apple App Store",
    Source.GOOGLE_PLAY: "Google Play Store",
}


@dataclass
class Review:
    """
    A normalized review.

    Optional attributes are defaulted once by the normalizer; renderers only
    check for presence.
    """
    source: Source
    timestamp: Optional[datetime] = None  # UTC, second resolution
    rating: Optional[int] = None  # 1-5
    text: str = DEFAULT_TEXT
    author: str = DEFAULT_AUTHOR
    title: Optional[str] = None  # App Store only
    version: Optional[str] = None
    identifier: Optional[str] = None
    link: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self):
        if self.rating is not None and not (1 <= self.rating <= 5):
            raise ValueError(f"Invalid rating: {self.rating}. Must be 1-5")
        if self.timestamp is not None and self.timestamp.tzinfo is None:
            raise ValueError("Review timestamp must be timezone-aware")

    @property
    def effective_timestamp(self) -> datetime:
        """Ordering and filtering key; epoch-zero when the vendor gave no time."""
        return self.timestamp if self.timestamp is not None else EPOCH
