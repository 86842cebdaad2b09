"""
Review selection.

Decides which reviews of one source are delivered in this run:
newest first, newer than the watermark, at most max_count.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from review_relay.models.review import Review

logger = logging.getLogger(__name__)


def sort_newest_first(reviews: Iterable[Review]) -> List[Review]:
    """Stable sort by effective timestamp, descending. Ties keep fetch order."""
    return sorted(reviews, key=lambda r: r.effective_timestamp, reverse=True)


def select_reviews(
    reviews: Iterable[Review],
    watermark: datetime,
    max_count: Optional[int] = None,
    ignore_watermark: bool = False
) -> List[Review]:
    """
    Select the reviews to deliver.

    1. Sort descending by timestamp.
    2. Keep reviews strictly newer than the watermark (all of them if
       ignore_watermark is set). A review exactly at the watermark is
       excluded; a review without a timestamp never passes.
    3. Truncate to max_count (unbounded if None).

    Args:
        reviews: Normalized reviews of a single source, in fetch order
        watermark: Last-run instant (timezone-aware)
        max_count: Maximum number of reviews to return
        ignore_watermark: Keep every review regardless of the watermark

    Returns:
        New list, newest first. May be empty.

    Raises:
        ValueError: if max_count is negative
    """
    if max_count is not None and max_count < 0:
        raise ValueError(f"Invalid max_count: {max_count}. Must be >= 0")

    ordered = sort_newest_first(reviews)

    if ignore_watermark:
        passing = ordered
    else:
        passing = [r for r in ordered if r.effective_timestamp > watermark]

    selected = passing if max_count is None else passing[:max_count]

    logger.debug(
        f"Selected {len(selected)} of {len(ordered)} reviews "
        f"({len(passing)} passed watermark filter, ignore_watermark={ignore_watermark})"
    )
    return selected


def newest_timestamp(reviews: Iterable[Review]) -> Optional[datetime]:
    """Newest real timestamp among reviews, or None if none has one."""
    timestamps = [r.timestamp for r in reviews if r.timestamp is not None]
    return max(timestamps) if timestamps else None
