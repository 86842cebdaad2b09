"""
Source adapter interface.
"""

from typing import Any, Dict, List

from review_relay.models.review import Source

RawRecord = Dict[str, Any]


class SourceAdapter:
    """
    Fetches raw review records from one vendor.

    Subclasses set `source` and implement fetch(). An empty list is a normal
    "no reviews" outcome; failures raise FetchError (or ParseError).
    """

    source: Source

    def fetch(self) -> List[RawRecord]:
        raise NotImplementedError
