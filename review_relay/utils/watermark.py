"""
Watermark storage.

Persists the single last-run timestamp that separates delivered reviews
from new ones.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from review_relay.errors import WatermarkReadError
from review_relay.models.review import EPOCH

logger = logging.getLogger(__name__)


def format_watermark(instant: datetime) -> str:
    """Canonical on-disk form: ISO-8601 UTC with seconds precision."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).replace(microsecond=0).isoformat()


def parse_watermark(value: str) -> datetime:
    """
    Parse the canonical ISO-8601 form.

    Naive values are read as UTC. A trailing "Z" is accepted.

    Raises:
        ValueError: if the value is not an ISO-8601 instant
    """
    text = value.strip()
    if not text:
        raise ValueError("empty watermark")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    instant = datetime.fromisoformat(text)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    try:
        return instant.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"watermark out of range in UTC: {text}") from e


class WatermarkStore:
    """
    Reads and writes the watermark file.

    Single process, single run: the file is read once and written once, with
    no locking. Overlapping runs race and the last writer wins.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Args:
            path: Location of the watermark file
        """
        self.path = Path(path)

    def load(self) -> datetime:
        """
        Load the persisted watermark.

        Returns:
            The stored instant, or epoch-zero if the file is missing,
            unreadable or corrupted. Never raises.
        """
        try:
            watermark = self._read()
        except WatermarkReadError as e:
            logger.warning(f"{e}. Proceeding as a first run (no watermark).")
            return EPOCH

        if watermark is None:
            logger.info(f"No last run timestamp found at {self.path}, proceeding without filtering")
            return EPOCH

        logger.info(f"Loaded last run timestamp {format_watermark(watermark)}")
        return watermark

    def save(self, instant: datetime) -> bool:
        """
        Overwrite the persisted watermark.

        Failures are logged, not retried and not raised.

        Returns:
            True if the file was written
        """
        value = format_watermark(instant)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to save last run timestamp to {self.path}: {e}")
            return False

        logger.info(f"Saved last run timestamp {value} to {self.path}")
        return True

    def _read(self):
        """
        Read and parse the file.

        Returns:
            The stored instant, or None if the file does not exist

        Raises:
            WatermarkReadError: if the file cannot be read or parsed
        """
        try:
            if not self.path.exists():
                return None
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise WatermarkReadError(f"Could not read last run timestamp {self.path}: {e}") from e

        try:
            return parse_watermark(content)
        except (ValueError, OverflowError) as e:
            raise WatermarkReadError(
                f"Invalid last run timestamp in {self.path}: {content.strip()[:40]!r}"
            ) from e
